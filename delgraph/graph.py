# delgraph/graph.py
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set, Tuple

import numpy as np

from .errors import StaleHandleError
from .geom import Pt, as_pt, dist
from .simplex import Simplex

logger = logging.getLogger(__name__)


@dataclass
class Node:
    """
    A position plus back-references to every connective element touching it
    (edge ids in a TriGraph, face ids in a TetraGraph).
    Identity is the handle, not the coordinates.
    """
    pt: Pt
    links: Set[int] = field(default_factory=set)
    alive: bool = True


class Graph:
    """
    Arena shared by TriGraph and TetraGraph.

    Nodes, connective elements and simplices live in append-only lists and
    are addressed by index. Removal only flips `alive`; indices are never
    reused, so holding on to a handle after a removal is detectable rather
    than silently pointing at something else.
    """

    def __init__(self):
        self.node_list: List[Node] = []

    # ---------- nodes ----------
    def add_node(self, p) -> int:
        nid = len(self.node_list)
        self.node_list.append(Node(as_pt(p)))
        return nid

    def node(self, n: int) -> Node:
        if n < 0 or n >= len(self.node_list) or not self.node_list[n].alive:
            raise StaleHandleError(f"node {n} does not exist")
        return self.node_list[n]

    def position(self, n: int) -> Pt:
        return self.node(n).pt

    def positions(self, nodes: Iterable[int]) -> List[Pt]:
        return [self.position(n) for n in nodes]

    @property
    def nodes(self) -> List[int]:
        return [i for i, node in enumerate(self.node_list) if node.alive]

    def remove_node(self, n: int) -> None:
        """Remove the node and, cascading, every element and simplex touching it."""
        node = self.node(n)
        for link in sorted(node.links):
            self._remove_link(link)
        node.alive = False

    def closest(self, p, k: int) -> List[int]:
        """The k nodes nearest to p, nearest first (fewer if the graph is smaller)."""
        ids = self.nodes
        if not ids or k <= 0:
            return []
        arr = np.array([tuple(self.node_list[i].pt) for i in ids], dtype=float)
        d = np.linalg.norm(arr - np.array(tuple(as_pt(p)), dtype=float), axis=1)
        order = np.argsort(d, kind="stable")[:k]
        return [ids[int(i)] for i in order]

    # ---------- hooks ----------
    def simplices(self) -> List[Simplex]:
        raise NotImplementedError

    def _remove_link(self, link: int) -> None:
        raise NotImplementedError

    # ---------- checks ----------
    def find_delaunay_violation(self, tolerance: float = 0.0) -> Optional[Tuple[Simplex, int]]:
        """
        First (simplex, node) such that the node is not part of the simplex
        and lies strictly inside its circumsphere (shrunk by `tolerance`).
        None when the graph is Delaunay.
        """
        ids = self.nodes
        for s in self.simplices():
            sphere = s.circumsphere
            for n in ids:
                if n in s.nodes:
                    continue
                if dist(sphere.center, self.node_list[n].pt) < sphere.radius - tolerance:
                    return s, n
        return None

    def is_delaunay(self, tolerance: float = 0.0) -> bool:
        return self.find_delaunay_violation(tolerance) is None
