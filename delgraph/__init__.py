"""
delgraph: incremental Delaunay triangulation (2D, embedded in 3D) and
tetrahedralization (3D) on an index-based topology graph, plus the dual
graph of a tetrahedralization.
"""
import logging

__version__ = "0.1.0"

from delgraph.geom import Pt, EPS, centroid, unique_points
from delgraph.errors import (DelgraphError, DegenerateGeometryError, TopologyError,
                             StaleHandleError, UnsupportedOperationError, InvalidStateError)
from delgraph.sphere import Sphere, circumsphere
from delgraph.trigraph import TriGraph
from delgraph.tetragraph import TetraGraph
from delgraph.delaunay import (Bounds, SeedMesh, Stage, InsertionResult,
                               DelaunayTriangulation, DelaunayTetrahedralization)
from delgraph.dual import DualGraph, dual_graph
from delgraph.pipeline import triangulate, tetrahedralize, to_arrays
from delgraph.logging_config import setup_logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Pt", "EPS", "centroid", "unique_points",
    "DelgraphError", "DegenerateGeometryError", "TopologyError",
    "StaleHandleError", "UnsupportedOperationError", "InvalidStateError",
    "Sphere", "circumsphere", "TriGraph", "TetraGraph",
    "Bounds", "SeedMesh", "Stage", "InsertionResult",
    "DelaunayTriangulation", "DelaunayTetrahedralization",
    "DualGraph", "dual_graph", "triangulate", "tetrahedralize", "to_arrays",
    "setup_logging", "__version__",
]
