# examples/demo_delaunay3d.py
import logging

from delgraph import setup_logging
from delgraph.geom import unique_points
from delgraph.delaunay import DelaunayTetrahedralization

if __name__ == "__main__":
    setup_logging(logging.INFO)

    # cube + inner points
    raw = [
        (0,0,0), (1,0,0), (1,1,0), (0,1,0),
        (0,0,1), (1,0,1), (1,1,1), (0,1,1),
        (0.5,0.5,0.5), (0.2,0.8,0.3), (0.8,0.2,0.7)
    ]
    pts = unique_points(raw)

    d3 = DelaunayTetrahedralization(pts)
    g = d3.build()                # inserts every point, then strips the super-tetrahedron

    # quick stats
    print("tets:", len(g.tetrahedra))
    print("faces:", len(g.faces), "edges:", len(g.edges))
    print("skipped:", d3.skipped)
    print("delaunay:", g.is_delaunay(tolerance=1e-9))
    print("VALIDATION:", g.validate())
