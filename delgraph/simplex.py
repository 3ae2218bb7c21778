# delgraph/simplex.py
from __future__ import annotations
from itertools import combinations
from typing import Iterable, Optional, Tuple, TYPE_CHECKING

from .errors import StaleHandleError, TopologyError
from .geom import as_pt
from .sphere import Sphere, circumsphere

if TYPE_CHECKING:
    from .trigraph import TriGraph
    from .tetragraph import TetraGraph


class Simplex:
    """
    Triangle or tetrahedron living in a graph arena.

    Holds node handles only, never positions. Immutable once built: any
    topology change kills the simplex (alive=False) and, if needed, the
    graph creates a new one, so the circumsphere can be cached for the
    lifetime of the instance.
    """
    size = 0

    def __init__(self, graph, index: int, nodes: Iterable[int]):
        self.graph = graph
        self.index = index
        self.nodes: Tuple[int, ...] = tuple(nodes)
        self.alive = True
        self._sphere: Optional[Sphere] = None

    @property
    def key(self) -> Tuple[int, ...]:
        return tuple(sorted(self.nodes))

    @property
    def circumsphere(self) -> Sphere:
        if not self.alive:
            raise StaleHandleError(f"{self!r} was removed from its graph")
        # lazy, computed once per instance
        if self._sphere is None:
            self._sphere = circumsphere(*(self.graph.position(n) for n in self.nodes))
        return self._sphere

    def inside_circumsphere(self, p) -> bool:
        return self.circumsphere.contains(as_pt(p))

    def contains(self, node: int) -> bool:
        return node in self.nodes

    def get_nodes(self) -> Tuple[int, ...]:
        return self.nodes

    def same_nodes(self, other: "Simplex") -> bool:
        return set(self.nodes) == set(other.nodes)

    def __eq__(self, other):
        if not isinstance(other, Simplex):
            return NotImplemented
        return self.graph is other.graph and self.same_nodes(other)

    def __hash__(self):
        return hash(frozenset(self.nodes))

    def __repr__(self):
        state = "" if self.alive else " dead"
        return f"{type(self).__name__}#{self.index}{self.nodes}{state}"


class Triangle(Simplex):
    """
    Three pairwise connected nodes of a TriGraph and the three edges between them.
    """
    size = 3

    def __init__(self, graph: "TriGraph", index: int, a: int, b: int, c: int):
        super().__init__(graph, index, (a, b, c))
        ab = graph.edge_between(a, b)
        ac = graph.edge_between(a, c)
        bc = graph.edge_between(b, c)
        if ab is None or ac is None or bc is None:
            raise TopologyError(f"nodes {a}, {b}, {c} do not form a triangle")
        self.ab, self.ac, self.bc = ab, ac, bc

    def get_edges(self) -> Tuple[int, int, int]:
        return (self.ab, self.ac, self.bc)

    def contains_edge(self, edge: int) -> bool:
        return edge in (self.ab, self.ac, self.bc)

    def shares_edge(self, other: "Triangle") -> bool:
        return any(other.contains_edge(e) for e in self.get_edges())


class Tetrahedron(Simplex):
    """
    Four faces of a TetraGraph closing over exactly four nodes.
    Edges are not stored by the 3D graph; get_edges() derives the six node pairs.
    """
    size = 4

    def __init__(self, graph: "TetraGraph", index: int, faces: Iterable[int]):
        faces = tuple(faces)
        triples = {graph.face_key(f) for f in faces}
        nodes = sorted({n for key in triples for n in key})
        if len(faces) != 4 or len(triples) != 4 or len(nodes) != 4:
            raise TopologyError(f"faces {faces} do not bound a tetrahedron")
        super().__init__(graph, index, nodes)
        self.faces: Tuple[int, int, int, int] = faces

    def get_faces(self) -> Tuple[int, int, int, int]:
        return self.faces

    def get_edges(self) -> Tuple[Tuple[int, int], ...]:
        return tuple(combinations(self.nodes, 2))

    def contains_face(self, face: int) -> bool:
        return face in self.faces

    def contains_nodes(self, nodes: Iterable[int]) -> bool:
        return all(n in self.nodes for n in nodes)

    def shares_face(self, other: "Tetrahedron") -> bool:
        return any(other.contains_face(f) for f in self.faces)
