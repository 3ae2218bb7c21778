# examples/demo_delaunay2d.py
from math import sqrt

from delgraph.delaunay import DelaunayTriangulation

if __name__ == "__main__":
    # pentagon in the plane spanned by (1,0,1)/sqrt(2) and (0,1,0)
    s = 1.0 / sqrt(2.0)
    flat = [(0, 0), (4, 0), (5, 2), (2, 5), (-1, 3), (2, 2)]
    pts = [(x*s, y, x*s) for x, y in flat]

    d2 = DelaunayTriangulation(pts)
    for p in pts:
        res = d2.insert(p)
        print(f"node {res.node}: guilty={res.guilty} boundary={res.boundary} created={res.created}")
    g = d2.finalize()

    for tri in g.triangles:
        print(tri, "r =", round(tri.circumsphere.radius, 4))
    print(g)
