# delgraph/pipeline.py
from __future__ import annotations
import logging
from typing import Iterable, List, Optional, Tuple

import numpy as np

from .delaunay import (SUPER_SCALE, Bounds, DelaunayTetrahedralization,
                       DelaunayTriangulation, SeedMesh)
from .errors import DegenerateGeometryError
from .geom import Pt, as_pt, unique_points
from .graph import Graph
from .predicates import is_coplanar
from .tetragraph import TetraGraph
from .trigraph import TriGraph

logger = logging.getLogger(__name__)


def _prepare(points: Iterable, bounds: Optional[Bounds], dedupe: bool) -> List[Pt]:
    pts: List[Pt] = unique_points(points) if dedupe else [as_pt(p) for p in points]
    if bounds is not None:
        kept = [p for p in pts if bounds.contains(p)]
        if len(kept) != len(pts):
            logger.debug("%d points outside bounds dropped", len(pts) - len(kept))
        pts = kept
    return pts


def triangulate(
    points: Iterable,
    *,
    seed_mesh: Optional[SeedMesh] = None,
    bounds: Optional[Bounds] = None,
    dedupe: bool = False,
    scale: float = SUPER_SCALE,
) -> TriGraph:
    """
    Delaunay triangulation of coplanar points (any plane of 3D space).
      - optional dedupe (quantized, see unique_points);
      - points outside `bounds` are dropped;
      - with `seed_mesh` the graph starts from that surface instead of a super-triangle.
    """
    pts = _prepare(points, bounds, dedupe)
    driver = DelaunayTriangulation(pts, seed_mesh=seed_mesh, scale=scale)
    return driver.build()


def tetrahedralize(
    points: Iterable,
    *,
    bounds: Optional[Bounds] = None,
    dedupe: bool = False,
    backend: str = "internal",
    scale: float = SUPER_SCALE,
) -> TetraGraph:
    """
    Delaunay tetrahedralization of 3D points.

    backend:
      "internal" - incremental Bowyer-Watson (DelaunayTetrahedralization);
      "scipy"    - scipy.spatial.Delaunay (Qhull), loaded into the same graph type;
                   fewer than 4 points give no tetrahedra, degenerate input raises
                   DegenerateGeometryError.
    """
    pts = _prepare(points, bounds, dedupe)

    if backend.lower() == "internal":
        return DelaunayTetrahedralization(pts, scale=scale).build()

    if backend.lower() == "scipy":
        try:
            from scipy.spatial import Delaunay, QhullError
        except ImportError as e:
            raise RuntimeError(
                "backend='scipy' needs SciPy installed; use backend='internal' otherwise."
            ) from e

        # Qhull needs d + 2 points for its initial simplex
        if len(pts) < 4:
            tets = []
        elif len(pts) == 4:
            if is_coplanar(*pts):
                raise DegenerateGeometryError("the four points are coplanar")
            tets = [(0, 1, 2, 3)]
        else:
            arr = np.array([tuple(p) for p in pts], dtype=float)
            try:
                # QJ = joggle for robustness
                dela = Delaunay(arr, qhull_options="QJ")
            except QhullError as e:
                raise DegenerateGeometryError(f"Qhull failed on {len(pts)} points") from e
            tets = [tuple(int(i) for i in simplex) for simplex in dela.simplices]
        graph = TetraGraph.from_tetrahedra(pts, tets)
        logger.info("scipy backend: %r", graph)
        return graph

    raise ValueError(f"unknown backend: {backend}")


def to_arrays(graph: Graph) -> Tuple[np.ndarray, np.ndarray]:
    """
    Live nodes as an (N, 3) float array and simplices as an (M, 3) or
    (M, 4) int array of row indices into it.
    """
    ids = graph.nodes
    row = {n: i for i, n in enumerate(ids)}
    verts = np.array([tuple(graph.node_list[n].pt) for n in ids], dtype=float).reshape(-1, 3)
    width = 3 if isinstance(graph, TriGraph) else 4
    cells = np.array([[row[n] for n in s.nodes] for s in graph.simplices()],
                     dtype=np.int64).reshape(-1, width)
    return verts, cells
