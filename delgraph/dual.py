# delgraph/dual.py
from __future__ import annotations
import logging
from typing import Dict, Set

from .errors import DegenerateGeometryError
from .tetragraph import TetraGraph

logger = logging.getLogger(__name__)


class DualGraph(TetraGraph):
    """TetraGraph whose nodes stand for the tetrahedra of another graph."""

    def __init__(self):
        super().__init__()
        self.dual_of: Dict[int, int] = {}   # tetrahedron id -> dual node

    def __repr__(self):
        return (f"DualGraph(nodes={len(self.nodes)}, faces={len(self.faces)}, "
                f"tetrahedra={len(self.tetrahedra)})")


def dual_adjacency(graph: TetraGraph) -> Dict[int, Set[int]]:
    """Tetrahedron id -> ids of the tetrahedra it shares a face with."""
    adj: Dict[int, Set[int]] = {t.index: set() for t in graph.tetrahedra}
    for f in graph.faces:
        tets = sorted(graph.face_list[f].tets)
        for i, a in enumerate(tets):
            for b in tets[i+1:]:
                adj[a].add(b)
                adj[b].add(a)
    return adj


def dual_graph(graph: TetraGraph) -> DualGraph:
    """
    Dual of a tetrahedralization:
      - one node per tetrahedron, placed at its circumcentre
        (`dual.dual_of[tet id] -> dual node`);
      - one face per triple of pairwise face-adjacent tetrahedra
        (the tetrahedra around an edge of degree 3).
    Higher-connectivity dual cells (edges shared by 4+ tetrahedra) are not
    represented. The triple walk is the expensive part.
    """
    dual = DualGraph()
    for tet in graph.tetrahedra:
        try:
            center = tet.circumsphere.center
        except DegenerateGeometryError as e:
            logger.warning("no dual node for %r: %s", tet, e)
            continue
        dual.dual_of[tet.index] = dual.add_node(center)

    adj = dual_adjacency(graph)
    for a in sorted(adj):
        if a not in dual.dual_of:
            continue
        for b in sorted(adj[a]):
            if b <= a or b not in dual.dual_of:
                continue
            for c in sorted(adj[a] & adj[b]):
                if c <= b or c not in dual.dual_of:
                    continue
                dual.add_face(dual.dual_of[a], dual.dual_of[b], dual.dual_of[c])

    logger.info("dual graph: %r from %r", dual, graph)
    return dual
