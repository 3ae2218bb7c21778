# delgraph/trigraph.py
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set, Tuple

from .errors import StaleHandleError, TopologyError
from .graph import Graph
from .simplex import Triangle

logger = logging.getLogger(__name__)

EdgeKey = Tuple[int, int]           # sorted node pair
TriKey = Tuple[int, int, int]       # sorted node triple


@dataclass
class Edge:
    v: EdgeKey
    tris: Set[int] = field(default_factory=set)
    alive: bool = True

    def other(self, node: int) -> int:
        a, b = self.v
        if node == a:
            return b
        if node == b:
            return a
        raise ValueError(f"edge {self.v} does not contain node {node}")


class TriGraph(Graph):
    """
    2D triangulation graph (points may sit in any plane of 3D space).

      - edge_list / edgemap: primary connective structure, edgemap: sorted pair -> edge id
      - tri_list / trimap: triangles, derived automatically whenever an added
        edge closes a 3-cycle; trimap: sorted triple -> triangle id
    """

    def __init__(self):
        super().__init__()
        self.edge_list: List[Edge] = []
        self.edgemap: Dict[EdgeKey, int] = {}
        self.tri_list: List[Triangle] = []
        self.trimap: Dict[TriKey, int] = {}

    # ---------- edges ----------
    def add_edge(self, x: int, y: int) -> int:
        """
        Connect x and y and return the edge id (the existing one if x-y is
        already connected). Every node n connected to both x and y that does
        not already form a recorded triangle with them yields a new Triangle.
        """
        self.node(x); self.node(y)
        if x == y:
            raise TopologyError(f"cannot connect node {x} to itself")
        key = _ekey(x, y)
        eid = self.edgemap.get(key)
        if eid is not None:
            return eid

        # scan y's neighbours BEFORE linking the edge, so x never matches itself
        closing = [n for n in self.neighbors(y)
                   if self.connected(n, x) and not self.contains_triangle(x, y, n)]

        eid = len(self.edge_list)
        self.edge_list.append(Edge(key))
        self.edgemap[key] = eid
        self.node_list[x].links.add(eid)
        self.node_list[y].links.add(eid)

        for n in closing:
            self._add_triangle(x, y, n)
        return eid

    def edge(self, e: int) -> Edge:
        if e < 0 or e >= len(self.edge_list) or not self.edge_list[e].alive:
            raise StaleHandleError(f"edge {e} does not exist")
        return self.edge_list[e]

    def remove_edge(self, e: int) -> None:
        """Remove the edge and every triangle built on it."""
        edge = self.edge(e)
        for tid in sorted(edge.tris):
            self.remove_triangle(tid, prune_edges=False)
        edge.alive = False
        del self.edgemap[edge.v]
        for n in edge.v:
            self.node_list[n].links.discard(e)

    def _remove_link(self, link: int) -> None:
        self.remove_edge(link)

    def add_cone(self, edge: int, node: int) -> List[int]:
        """Connect both ends of `edge` to `node`; existing edges are reused."""
        a, b = self.edge(edge).v
        return [self.add_edge(a, node), self.add_edge(b, node)]

    def add_triangle_edges(self, a: int, b: int, c: int) -> List[int]:
        """Connect every pair of a, b, c; the third edge closes the triangle."""
        return [self.add_edge(a, b), self.add_edge(a, c), self.add_edge(b, c)]

    # ---------- triangles ----------
    def _add_triangle(self, x: int, y: int, z: int) -> Triangle:
        tid = len(self.tri_list)
        tri = Triangle(self, tid, x, y, z)
        self.tri_list.append(tri)
        self.trimap[tri.key] = tid
        for e in tri.get_edges():
            self.edge_list[e].tris.add(tid)
        return tri

    def triangle(self, t) -> Triangle:
        tid = t.index if isinstance(t, Triangle) else t
        if tid < 0 or tid >= len(self.tri_list) or not self.tri_list[tid].alive:
            raise StaleHandleError(f"triangle {tid} does not exist")
        return self.tri_list[tid]

    def remove_triangle(self, t, prune_edges: bool = True) -> None:
        """
        Remove a triangle. With `prune_edges`, edges of the triangle that no
        other triangle uses any more are removed as well.
        """
        tri = self.triangle(t)
        tri.alive = False
        del self.trimap[tri.key]
        for e in tri.get_edges():
            self.edge_list[e].tris.discard(tri.index)
        if prune_edges:
            for e in tri.get_edges():
                edge = self.edge_list[e]
                if edge.alive and not edge.tris:
                    self.remove_edge(e)

    # ---------- queries ----------
    def connected(self, a: int, b: int) -> bool:
        return _ekey(a, b) in self.edgemap

    contains_edge = connected

    def edge_between(self, a: int, b: int) -> Optional[int]:
        return self.edgemap.get(_ekey(a, b))

    def contains_triangle(self, a: int, b: int, c: int) -> bool:
        return tuple(sorted((a, b, c))) in self.trimap

    def triangle_on(self, a: int, b: int, c: int) -> Optional[Triangle]:
        tid = self.trimap.get(tuple(sorted((a, b, c))))
        return None if tid is None else self.tri_list[tid]

    def neighbors(self, n: int) -> Iterator[int]:
        for e in sorted(self.node(n).links):
            yield self.edge_list[e].other(n)

    def edge_nodes(self, e: int) -> EdgeKey:
        return self.edge(e).v

    def triangles_of(self, e: int) -> List[Triangle]:
        return [self.tri_list[t] for t in sorted(self.edge(e).tris)]

    def triangles_at(self, n: int) -> List[Triangle]:
        tids: Set[int] = set()
        for e in self.node(n).links:
            tids.update(self.edge_list[e].tris)
        return [self.tri_list[t] for t in sorted(tids)]

    @property
    def edges(self) -> List[int]:
        return [i for i, e in enumerate(self.edge_list) if e.alive]

    @property
    def triangles(self) -> List[Triangle]:
        return [t for t in self.tri_list if t.alive]

    def simplices(self) -> List[Triangle]:
        return self.triangles

    def elements(self) -> List[int]:
        return self.edges

    def element_nodes(self, e: int) -> EdgeKey:
        return self.edge_nodes(e)

    # ---------- clean-up / validation ----------
    def prune_orphans(self) -> int:
        """Remove edges that no triangle uses. Returns how many were removed."""
        orphans = [e for e in self.edges if not self.edge_list[e].tris]
        for e in orphans:
            self.remove_edge(e)
        if orphans:
            logger.debug("pruned %d orphan edges", len(orphans))
        return len(orphans)

    def validate(self) -> dict:
        """
        Quick consistency check of the arena:
          - every live triangle references live nodes and live edges, and is indexed in trimap;
          - every live edge references live nodes that link back to it;
          - orphan edges (used by no triangle) are reported separately.
        Returns a dict with diagnostics (empty lists = all good).
        """
        bad_triangles: List[Tuple[int, str]] = []
        bad_edges: List[Tuple[int, str]] = []

        for tri in self.triangles:
            if any(not self.node_list[n].alive for n in tri.nodes):
                bad_triangles.append((tri.index, "dead_node"))
            if any(not self.edge_list[e].alive for e in tri.get_edges()):
                bad_triangles.append((tri.index, "dead_edge"))
            if self.trimap.get(tri.key) != tri.index:
                bad_triangles.append((tri.index, "not_indexed"))

        for e in self.edges:
            edge = self.edge_list[e]
            for n in edge.v:
                node = self.node_list[n]
                if not node.alive:
                    bad_edges.append((e, "dead_node"))
                elif e not in node.links:
                    bad_edges.append((e, f"no_backlink_from_{n}"))
            if any(not self.tri_list[t].alive for t in edge.tris):
                bad_edges.append((e, "dead_triangle"))

        return {
            "nodes": len(self.nodes),
            "edges": len(self.edges),
            "triangles": len(self.triangles),
            "orphan_edges": [e for e in self.edges if not self.edge_list[e].tris],
            "bad_triangles": bad_triangles,
            "bad_edges": bad_edges,
        }

    def __repr__(self):
        return (f"TriGraph(nodes={len(self.nodes)}, edges={len(self.edges)}, "
                f"triangles={len(self.triangles)})")


def _ekey(a: int, b: int) -> EdgeKey:
    return (a, b) if a < b else (b, a)
