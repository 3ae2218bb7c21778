# delgraph/tetragraph.py
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .errors import StaleHandleError, TopologyError
from .graph import Graph
from .simplex import Tetrahedron

logger = logging.getLogger(__name__)

FaceKey = Tuple[int, int, int]          # sorted node triple
TetKey = Tuple[int, int, int, int]      # sorted node quadruple


@dataclass
class Face:
    """Unordered triple of nodes. tets: ids of the tetrahedra built on this face."""
    v: FaceKey
    tets: Set[int] = field(default_factory=set)
    alive: bool = True

    def other(self, n1: int, n2: int) -> int:
        """The third node, given the other two."""
        for n in self.v:
            if n != n1 and n != n2:
                return n
        raise ValueError(f"face {self.v} has no third node besides {n1}, {n2}")


class TetraGraph(Graph):
    """
    3D tetrahedralization graph:
      - face_list / facemap: triangular faces, facemap: sorted triple -> face id
      - tet_list / tetmap: tetrahedra, derived whenever all four faces over the
        same four nodes exist; tetmap: sorted quadruple -> tetrahedron id
    Edges are not stored; `edges` derives them from the live faces.
    """

    def __init__(self):
        super().__init__()
        self.face_list: List[Face] = []
        self.facemap: Dict[FaceKey, int] = {}
        self.tet_list: List[Tetrahedron] = []
        self.tetmap: Dict[TetKey, int] = {}

    @classmethod
    def from_tetrahedra(cls, points: Sequence, tets: Sequence[Sequence[int]]) -> "TetraGraph":
        """
        Graph over `points` (node i = points[i]) holding exactly the given
        tetrahedra. Face closures that are not in `tets` are dropped.
        """
        g = cls()
        ids = [g.add_node(p) for p in points]
        wanted = set()
        for tet in tets:
            quad = [ids[int(i)] for i in tet]
            g.add_tetra_faces(*quad)
            wanted.add(tuple(sorted(quad)))
        for t in g.tetrahedra:
            if t.key not in wanted:
                g.remove_tetrahedron(t)
        return g

    # ---------- faces ----------
    def add_face(self, x: int, y: int, z: int) -> int:
        """
        Connect three nodes with a face and return its id (the existing one
        if the triple is already connected). Any tetrahedron the new face
        closes, i.e. a fourth node w with faces on all the other triples of
        {x, y, z, w}, is materialized.
        """
        self.node(x); self.node(y); self.node(z)
        if len({x, y, z}) != 3:
            raise TopologyError(f"face needs three distinct nodes, got {x}, {y}, {z}")
        key = _fkey(x, y, z)
        fid = self.facemap.get(key)
        if fid is not None:
            return fid

        # look for closures BEFORE the face is registered, so it cannot match itself
        closing = self._closures(key)

        fid = len(self.face_list)
        self.face_list.append(Face(key))
        self.facemap[key] = fid
        for n in key:
            self.node_list[n].links.add(fid)

        for partners in closing:
            self._add_tetrahedron((fid,) + partners)
        return fid

    def _closures(self, key: FaceKey) -> List[Tuple[int, int, int]]:
        """
        For a face about to be added: every set of three existing faces that,
        together with it, bounds a not yet recorded tetrahedron.
        Walks only the faces sharing an edge with `key` (node adjacency),
        so the cost is bounded by the local degree, not the face count.
        """
        found: List[Tuple[int, int, int]] = []
        seen: Set[TetKey] = set()
        x, y, z = key
        for a, b, c in ((x, y, z), (x, z, y), (y, z, x)):
            for f in self._faces_with(a, b):
                w = self.face_list[f].other(a, b)
                quad = tuple(sorted((x, y, z, w)))
                if quad in seen or quad in self.tetmap:
                    continue
                seen.add(quad)
                f2 = self.facemap.get(_fkey(a, c, w))
                f3 = self.facemap.get(_fkey(b, c, w))
                if f2 is not None and f3 is not None:
                    found.append((f, f2, f3))
        return found

    def _faces_with(self, a: int, b: int) -> List[int]:
        return [f for f in sorted(self.node_list[a].links) if b in self.face_list[f].v]

    def face(self, f: int) -> Face:
        if f < 0 or f >= len(self.face_list) or not self.face_list[f].alive:
            raise StaleHandleError(f"face {f} does not exist")
        return self.face_list[f]

    def face_key(self, f: int) -> FaceKey:
        return self.face(f).v

    face_nodes = face_key

    def remove_face(self, f: int) -> None:
        """Remove the face and every tetrahedron built on it."""
        face = self.face(f)
        for tid in sorted(face.tets):
            self.remove_tetrahedron(tid)
        face.alive = False
        del self.facemap[face.v]
        for n in face.v:
            self.node_list[n].links.discard(f)

    def _remove_link(self, link: int) -> None:
        self.remove_face(link)

    def add_cone(self, face: int, node: int) -> List[int]:
        """Connect each pair of the face's nodes to `node`: three faces, existing ones reused."""
        a, b, c = self.face(face).v
        return [self.add_face(a, b, node), self.add_face(a, c, node), self.add_face(b, c, node)]

    def add_tetra_faces(self, n1: int, n2: int, n3: int, n4: int) -> List[int]:
        """Faces on every triple of the four nodes; the last one closes the tetrahedron."""
        return [
            self.add_face(n1, n2, n3),
            self.add_face(n1, n2, n4),
            self.add_face(n1, n3, n4),
            self.add_face(n2, n3, n4),
        ]

    # ---------- tetrahedra ----------
    def _add_tetrahedron(self, faces: Tuple[int, int, int, int]) -> Tetrahedron:
        tid = len(self.tet_list)
        tet = Tetrahedron(self, tid, faces)
        self.tet_list.append(tet)
        self.tetmap[tet.key] = tid
        for f in faces:
            self.face_list[f].tets.add(tid)
        return tet

    def tetrahedron(self, t) -> Tetrahedron:
        tid = t.index if isinstance(t, Tetrahedron) else t
        if tid < 0 or tid >= len(self.tet_list) or not self.tet_list[tid].alive:
            raise StaleHandleError(f"tetrahedron {tid} does not exist")
        return self.tet_list[tid]

    def remove_tetrahedron(self, t) -> None:
        """Remove a tetrahedron; its faces stay."""
        tet = self.tetrahedron(t)
        tet.alive = False
        del self.tetmap[tet.key]
        for f in tet.faces:
            self.face_list[f].tets.discard(tet.index)

    # ---------- queries ----------
    def contains_face(self, a: int, b: int, c: int) -> bool:
        return _fkey(a, b, c) in self.facemap

    def face_between(self, a: int, b: int, c: int) -> Optional[int]:
        return self.facemap.get(_fkey(a, b, c))

    def contains_tetrahedron(self, a: int, b: int, c: int, d: int) -> bool:
        return tuple(sorted((a, b, c, d))) in self.tetmap

    def tetrahedron_on(self, a: int, b: int, c: int, d: int) -> Optional[Tetrahedron]:
        tid = self.tetmap.get(tuple(sorted((a, b, c, d))))
        return None if tid is None else self.tet_list[tid]

    def connected(self, a: int, b: int) -> bool:
        return bool(self._faces_with(a, b)) if a != b else False

    def faces_of(self, n: int) -> List[int]:
        return sorted(self.node(n).links)

    def neighbors(self, n: int) -> List[int]:
        out: Set[int] = set()
        for f in self.node(n).links:
            out.update(self.face_list[f].v)
        out.discard(n)
        return sorted(out)

    def tetrahedra_of(self, f: int) -> List[Tetrahedron]:
        return [self.tet_list[t] for t in sorted(self.face(f).tets)]

    def tetrahedra_at(self, n: int) -> List[Tetrahedron]:
        tids: Set[int] = set()
        for f in self.node(n).links:
            tids.update(self.face_list[f].tets)
        return [self.tet_list[t] for t in sorted(tids)]

    @property
    def faces(self) -> List[int]:
        return [i for i, f in enumerate(self.face_list) if f.alive]

    @property
    def edges(self) -> List[Tuple[int, int]]:
        out: Set[Tuple[int, int]] = set()
        for f in self.face_list:
            if f.alive:
                a, b, c = f.v
                out.update(((a, b), (a, c), (b, c)))
        return sorted(out)

    @property
    def tetrahedra(self) -> List[Tetrahedron]:
        return [t for t in self.tet_list if t.alive]

    def simplices(self) -> List[Tetrahedron]:
        return self.tetrahedra

    def elements(self) -> List[int]:
        return self.faces

    def element_nodes(self, f: int) -> FaceKey:
        return self.face_key(f)

    # ---------- clean-up / validation ----------
    def prune_orphans(self) -> int:
        """Remove faces that no tetrahedron uses. Returns how many were removed."""
        orphans = [f for f in self.faces if not self.face_list[f].tets]
        for f in orphans:
            self.remove_face(f)
        if orphans:
            logger.debug("pruned %d orphan faces", len(orphans))
        return len(orphans)

    def validate(self) -> dict:
        """
        Quick consistency check:
          - live tetrahedra reference live nodes and live faces, and are indexed in tetmap;
          - live faces are linked from their nodes;
          - a face is shared by at most 2 tetrahedra (more means overlapping cells);
          - orphan faces (no tetrahedron) are reported separately.
        Returns a dict with diagnostics (empty lists = all good).
        """
        bad_tets: List[Tuple[int, str]] = []
        bad_faces: List[Tuple[int, str]] = []

        for tet in self.tetrahedra:
            if any(not self.node_list[n].alive for n in tet.nodes):
                bad_tets.append((tet.index, "dead_node"))
            if any(not self.face_list[f].alive for f in tet.faces):
                bad_tets.append((tet.index, "dead_face"))
            if self.tetmap.get(tet.key) != tet.index:
                bad_tets.append((tet.index, "not_indexed"))

        for f in self.faces:
            face = self.face_list[f]
            for n in face.v:
                node = self.node_list[n]
                if not node.alive:
                    bad_faces.append((f, "dead_node"))
                elif f not in node.links:
                    bad_faces.append((f, f"no_backlink_from_{n}"))
            if any(not self.tet_list[t].alive for t in face.tets):
                bad_faces.append((f, "dead_tetrahedron"))
            if len(face.tets) > 2:
                bad_faces.append((f, f"shared_by_{len(face.tets)}"))

        return {
            "nodes": len(self.nodes),
            "faces": len(self.faces),
            "tetrahedra": len(self.tetrahedra),
            "orphan_faces": [f for f in self.faces if not self.face_list[f].tets],
            "bad_tetrahedra": bad_tets,
            "bad_faces": bad_faces,
        }

    def __repr__(self):
        return (f"TetraGraph(nodes={len(self.nodes)}, faces={len(self.faces)}, "
                f"tetrahedra={len(self.tetrahedra)})")


def _fkey(a: int, b: int, c: int) -> FaceKey:
    return tuple(sorted((a, b, c)))
