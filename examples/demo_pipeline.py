# examples/demo_pipeline.py
from delgraph import dual_graph, tetrahedralize, to_arrays

if __name__ == "__main__":
    cube = [
        (0,0,0), (1,0,0), (1,1,0), (0,1,0),
        (0,0,1), (1,0,1), (1,1,1), (0,1,1),
        (0.5,0.5,0.5), (0.2,0.8,0.3), (0.8,0.2,0.7)
    ]

    g = tetrahedralize(cube, dedupe=True, backend="internal")  # or "scipy"
    verts, cells = to_arrays(g)
    print("Vertices:", verts.shape[0])
    print("Tets:", cells.shape[0])

    dual = dual_graph(g)
    print("Dual nodes:", len(dual.nodes))
    print("Dual faces:", len(dual.faces))
