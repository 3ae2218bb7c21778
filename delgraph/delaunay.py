# delgraph/delaunay.py
"""
Incremental Bowyer-Watson insertion.

One generic driver (BowyerWatson) walks the same steps for triangles and
tetrahedra; DelaunayTriangulation and DelaunayTetrahedralization only
supply the dimension specific pieces (super-structure, boundary elements,
cone operator).

Per point:
  1) collect the guilty simplices (circumsphere strictly contains p);
  2) split their elements into boundary (one guilty simplex) and interior;
  3) check every cone simplex of real nodes (boundary element + p) is non-degenerate;
  4) remove guilty simplices and interior elements, add p, cone the boundary;
  5) reconcile: keep exactly the cone simplices around the new node.
A degenerate configuration skips the point before the graph is touched.
"""
from __future__ import annotations
import logging
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from math import cos, radians, sin, sqrt
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .errors import (DegenerateGeometryError, InvalidStateError, TopologyError,
                     UnsupportedOperationError)
from .geom import Pt, add, as_pt, best_fit_plane, bounding_box, centroid, dist, norm, scale
from .graph import Graph
from .simplex import Simplex
from .sphere import circumsphere
from .tetragraph import TetraGraph
from .trigraph import TriGraph

logger = logging.getLogger(__name__)

SUPER_SCALE = 1000.0
DEFAULT_SUPER_EXTENTS = (10.0, 10.0, 10.0)
SUPER_ROTATION = (0.7, 1.1, 0.4)   # radians about x, y, z


class Stage(Enum):
    INITIALIZING = "initializing"
    INSERTING = "inserting"
    FINALIZING = "finalizing"
    DONE = "done"


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned box, bounds inclusive."""
    lo: Pt
    hi: Pt

    def contains(self, p) -> bool:
        p = as_pt(p)
        return (self.lo.x <= p.x <= self.hi.x and
                self.lo.y <= p.y <= self.hi.y and
                self.lo.z <= p.z <= self.hi.z)

    @classmethod
    def of(cls, points: Iterable, pad: float = 0.0) -> "Bounds":
        lo, hi = bounding_box(as_pt(p) for p in points)
        return cls(Pt(lo.x - pad, lo.y - pad, lo.z - pad),
                   Pt(hi.x + pad, hi.y + pad, hi.z + pad))


@dataclass
class SeedMesh:
    """Surface mesh to start a triangulation from: vertex positions + index triples."""
    vertices: Sequence
    triangles: Sequence[Tuple[int, int, int]]


@dataclass(frozen=True)
class InsertionResult:
    node: Optional[int]     # None when the point was skipped
    guilty: int = 0         # simplices removed
    boundary: int = 0       # boundary elements of the cavity
    created: int = 0        # simplices created

    @property
    def inserted(self) -> bool:
        return self.node is not None


class BowyerWatson:
    """
    Generic incremental Delaunay driver. Subclasses provide the hooks marked
    below; the graph is owned by the driver until `finalize` hands it out.

    Stages: INITIALIZING -> INSERTING -> FINALIZING -> DONE.
    """
    graph_type = Graph

    def __init__(self, points: Optional[Iterable] = None, *, bounds: Optional[Bounds] = None,
                 scale: float = SUPER_SCALE, extents: Optional[Sequence[float]] = None):
        self.graph = self.graph_type()
        self.points: List[Pt] = [as_pt(p) for p in points] if points is not None else []
        self.bounds = bounds
        self.scale = scale
        self.extents = tuple(extents) if extents is not None else DEFAULT_SUPER_EXTENTS
        self.stage = Stage.INITIALIZING
        self.super_nodes: Tuple[int, ...] = ()
        self.skipped: List[Pt] = []

    # ---------- super-structure ----------
    def enclosing_sphere(self) -> Tuple[Pt, float]:
        """
        Centre and radius the super-structure must enclose: the bounding
        sphere of the known points times `scale`, or the `extents` box
        around the origin when no points were given.
        """
        if not self.points:
            return Pt(0.0, 0.0, 0.0), norm(Pt(*(float(e) for e in self.extents)))
        c = centroid(self.points)
        r = max(dist(c, p) for p in self.points) or 1.0
        return c, r * self.scale

    def _build_super(self) -> Tuple[int, ...]:
        center, radius = self.enclosing_sphere()
        corners = self._super_vertices(center, radius)
        self.super_nodes = tuple(self.graph.add_node(p) for p in corners)
        self._connect(*self.super_nodes)
        logger.debug("super-structure around %s, inradius %.6g: nodes %s",
                     center, radius, self.super_nodes)
        return self.super_nodes

    # ---------- insertion ----------
    def insert(self, p) -> InsertionResult:
        """
        Insert one point. Points outside `bounds` are ignored; degenerate
        configurations are logged, recorded in `skipped` and ignored.
        """
        if self.stage in (Stage.FINALIZING, Stage.DONE):
            raise InvalidStateError(f"cannot insert in stage {self.stage.value}")
        if self.stage is Stage.INITIALIZING:
            self.stage = Stage.INSERTING
            logger.info("inserting into %r", self.graph)
        p = as_pt(p)
        if self.bounds is not None and not self.bounds.contains(p):
            logger.debug("point %s outside bounds, ignored", p)
            return InsertionResult(None)
        try:
            return self._insert(p)
        except DegenerateGeometryError as e:
            logger.warning("skipping point %s: %s", p, e)
            self.skipped.append(p)
            return InsertionResult(None)

    def _insert(self, p: Pt) -> InsertionResult:
        g = self.graph

        # 1) guilty simplices, over the list captured before the scan
        guilty: List[Simplex] = []
        for s in g.simplices():
            try:
                if s.inside_circumsphere(p):
                    guilty.append(s)
            except DegenerateGeometryError as e:
                logger.debug("ignoring degenerate %r: %s", s, e)
        if not guilty:
            return self._no_cavity(p)
        for n in {n for s in guilty for n in s.nodes}:
            if g.position(n) == p:
                raise DegenerateGeometryError(f"point coincides with node {n}")

        # 2) boundary = used by exactly one guilty simplex, interior = shared
        uses = Counter(e for s in guilty for e in self._elements_of(s))
        boundary = sorted(e for e, k in uses.items() if k == 1)
        interior = sorted(e for e, k in uses.items() if k > 1)
        keys = [g.element_nodes(e) for e in boundary]

        # 3) every cone simplex of real nodes must have a sphere, before anything changes
        supers = set(self.super_nodes)
        for key in keys:
            if supers.isdisjoint(key):
                circumsphere(*g.positions(key), p)

        # 4) carve the cavity and cone its boundary to the new node
        for s in guilty:
            self._remove_simplex(s)
        for e in interior:
            self._remove_element(e)
        node = g.add_node(p)
        for e in boundary:
            g.add_cone(e, node)

        # 5) reconcile
        created = self._reconcile(node, keys)
        logger.debug("node %d: %d guilty, %d boundary, %d created",
                     node, len(guilty), len(boundary), created)
        return InsertionResult(node, len(guilty), len(boundary), created)

    def _reconcile(self, node: int, keys: List[Tuple[int, ...]]) -> int:
        """
        Exactly one simplex per boundary element must surround `node`.
        Coning can also close cycles through elements outside the cavity;
        those simplices are not cells and are removed.
        """
        expected = {tuple(sorted(key + (node,))) for key in keys}
        found = set()
        for s in self._simplices_at(node):
            if s.key in expected:
                found.add(s.key)
            else:
                logger.debug("removing %r closed outside the cavity", s)
                self._remove_simplex(s)
        missing = expected - found
        if missing:
            raise TopologyError(f"cavity around node {node} left open: {sorted(missing)}")
        return len(expected)

    def insert_all(self, points: Iterable) -> List[InsertionResult]:
        return [self.insert(p) for p in points]

    def finalize(self) -> Graph:
        """Strip the super-structure and every element left without a simplex."""
        if self.stage in (Stage.FINALIZING, Stage.DONE):
            raise InvalidStateError(f"cannot finalize in stage {self.stage.value}")
        self.stage = Stage.FINALIZING
        for n in self.super_nodes:
            self.graph.remove_node(n)
        self.graph.prune_orphans()
        self.stage = Stage.DONE
        logger.info("done: %r, %d points skipped", self.graph, len(self.skipped))
        return self.graph

    def build(self, points: Optional[Iterable] = None) -> Graph:
        """
        Insert `points` (default: the constructor's points) and finalize.
        New points are only accepted before the first insertion; the
        super-structure is then rebuilt around them.
        """
        if points is not None:
            if self.stage is not Stage.INITIALIZING:
                raise InvalidStateError(f"cannot take new points in stage {self.stage.value}")
            self.points = [as_pt(p) for p in points]
            if self.super_nodes:
                for n in self.super_nodes:
                    self.graph.remove_node(n)
                self._build_super()
        self.insert_all(self.points)
        return self.finalize()

    def remove_node(self, *args, **kwargs):
        raise UnsupportedOperationError(
            "node removal is not supported during triangulation; only the super-structure is removed")

    # ---------- hooks ----------
    def _super_vertices(self, center: Pt, radius: float) -> List[Pt]:
        raise NotImplementedError

    def _connect(self, *nodes: int) -> None:
        raise NotImplementedError

    def _elements_of(self, s: Simplex) -> Tuple[int, ...]:
        raise NotImplementedError

    def _remove_simplex(self, s: Simplex) -> None:
        raise NotImplementedError

    def _remove_element(self, e: int) -> None:
        raise NotImplementedError

    def _simplices_at(self, node: int) -> List[Simplex]:
        raise NotImplementedError

    def _no_cavity(self, p: Pt) -> InsertionResult:
        raise DegenerateGeometryError("no circumsphere contains the point (duplicate or outside the super-structure)")


class DelaunayTriangulation(BowyerWatson):
    """
    2D Delaunay triangulation of points lying in one plane of 3D space.
    Starts from an equilateral super-triangle in the best-fit plane of the
    constructor's points, or from a seed mesh (then without super-structure).
    """
    graph_type = TriGraph

    def __init__(self, points: Optional[Iterable] = None, *, seed_mesh: Optional[SeedMesh] = None,
                 bounds: Optional[Bounds] = None, scale: float = SUPER_SCALE,
                 extents: Optional[Sequence[float]] = None):
        super().__init__(points, bounds=bounds, scale=scale, extents=extents)
        if seed_mesh is not None:
            self._seed(seed_mesh)
        else:
            self._build_super()

    def _seed(self, mesh: SeedMesh) -> None:
        ids = [self.graph.add_node(v) for v in mesh.vertices]
        for a, b, c in mesh.triangles:
            self.graph.add_triangle_edges(ids[a], ids[b], ids[c])
        logger.debug("seeded from mesh: %r", self.graph)

    def _super_vertices(self, center: Pt, radius: float) -> List[Pt]:
        # in-plane basis; the triangle's incircle has radius `radius`
        if len(self.points) >= 3:
            _, u, v = best_fit_plane(self.points)
        else:
            u, v = Pt(1.0, 0.0, 0.0), Pt(0.0, 1.0, 0.0)
        out = []
        for deg in (90.0, 210.0, 330.0):
            t = radians(deg)
            out.append(add(center, add(scale(u, 2*radius*cos(t)), scale(v, 2*radius*sin(t)))))
        return out

    def _connect(self, *nodes: int) -> None:
        self.graph.add_triangle_edges(*nodes)

    def _elements_of(self, s: Simplex) -> Tuple[int, ...]:
        return s.get_edges()

    def _remove_simplex(self, s: Simplex) -> None:
        # boundary edges must survive the cavity
        self.graph.remove_triangle(s, prune_edges=False)

    def _remove_element(self, e: int) -> None:
        self.graph.remove_edge(e)

    def _simplices_at(self, node: int) -> List[Simplex]:
        return self.graph.triangles_at(node)

    def _no_cavity(self, p: Pt) -> InsertionResult:
        if self.super_nodes:
            return super()._no_cavity(p)
        # seed mesh only: attach to everything while the graph is tiny, else to the 2 nearest
        g = self.graph
        existing = g.nodes
        targets = existing if len(existing) < 3 else g.closest(p, 2)
        node = g.add_node(p)
        for n in targets:
            g.add_edge(n, node)
        created = len(g.triangles_at(node))
        logger.debug("node %d: no cavity, linked to %s", node, targets)
        return InsertionResult(node, 0, 0, created)


class DelaunayTetrahedralization(BowyerWatson):
    """3D Delaunay tetrahedralization inside a regular super-tetrahedron."""
    graph_type = TetraGraph

    def __init__(self, points: Optional[Iterable] = None, *, bounds: Optional[Bounds] = None,
                 scale: float = SUPER_SCALE, extents: Optional[Sequence[float]] = None):
        super().__init__(points, bounds=bounds, scale=scale, extents=extents)
        self._build_super()

    def _super_vertices(self, center: Pt, radius: float) -> List[Pt]:
        # regular tetrahedron, circumradius 3r, inradius r, turned off the axes
        k = 3.0 * radius / sqrt(3.0)
        corners = np.array([(1.0, 1.0, 1.0), (1.0, -1.0, -1.0), (-1.0, 1.0, -1.0), (-1.0, -1.0, 1.0)])
        turned = corners @ _rotation(*SUPER_ROTATION).T
        return [add(center, scale(Pt(*(float(c) for c in row)), k)) for row in turned]

    def _connect(self, *nodes: int) -> None:
        self.graph.add_tetra_faces(*nodes)

    def _elements_of(self, s: Simplex) -> Tuple[int, ...]:
        return s.get_faces()

    def _remove_simplex(self, s: Simplex) -> None:
        self.graph.remove_tetrahedron(s)

    def _remove_element(self, e: int) -> None:
        self.graph.remove_face(e)

    def _simplices_at(self, node: int) -> List[Simplex]:
        return self.graph.tetrahedra_at(node)


def _rotation(ax: float, ay: float, az: float) -> np.ndarray:
    """Rotation matrix Rz @ Ry @ Rx."""
    cx, sx, cy, sy, cz, sz = cos(ax), sin(ax), cos(ay), sin(ay), cos(az), sin(az)
    rx = np.array([[1.0, 0.0, 0.0], [0.0, cx, -sx], [0.0, sx, cx]])
    ry = np.array([[cy, 0.0, sy], [0.0, 1.0, 0.0], [-sy, 0.0, cy]])
    rz = np.array([[cz, -sz, 0.0], [sz, cz, 0.0], [0.0, 0.0, 1.0]])
    return rz @ ry @ rx
