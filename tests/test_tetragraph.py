import pytest

from delgraph.errors import StaleHandleError, TopologyError
from delgraph.simplex import Tetrahedron
from delgraph.tetragraph import TetraGraph


def _graph(points):
    g = TetraGraph()
    return g, [g.add_node(p) for p in points]


def test_fourth_face_closes_tetrahedron(corner_tetra):
    g, (a, b, c, d) = _graph(corner_tetra)
    g.add_face(a, b, c)
    g.add_face(a, b, d)
    g.add_face(a, c, d)
    assert g.tetrahedra == []
    g.add_face(b, c, d)
    assert len(g.tetrahedra) == 1
    tet = g.tetrahedra[0]
    assert tet.key == (a, b, c, d)
    assert len(g.faces) == 4
    assert len(g.edges) == 6
    assert len(tet.get_edges()) == 6
    assert tet.contains_nodes((a, d)) and tet.get_nodes() == (a, b, c, d)
    assert g.contains_tetrahedron(d, c, b, a)


def test_add_face_is_deduplicated(corner_tetra):
    g, (a, b, c, d) = _graph(corner_tetra)
    f = g.add_face(a, b, c)
    assert g.add_face(c, a, b) == f
    assert g.face_between(b, c, a) == f
    with pytest.raises(TopologyError):
        g.add_face(a, a, b)


def test_shared_face_between_two_tetrahedra(star_points):
    g, (o, p, q, r, s) = _graph(star_points)
    g.add_tetra_faces(o, p, q, r)
    g.add_tetra_faces(o, p, q, s)
    assert len(g.tetrahedra) == 2
    shared = g.face_between(o, p, q)
    assert len(g.tetrahedra_of(shared)) == 2
    t1, t2 = g.tetrahedra
    assert t1.shares_face(t2)
    assert g.validate()["bad_faces"] == []


def test_remove_face_cascades_to_tetrahedra(star_points):
    g, (o, p, q, r, s) = _graph(star_points)
    g.add_tetra_faces(o, p, q, r)
    g.add_tetra_faces(o, p, q, s)
    shared = g.face_between(o, p, q)
    g.remove_face(shared)
    assert g.tetrahedra == []
    assert len(g.faces) == 6
    with pytest.raises(StaleHandleError):
        g.face(shared)


def test_remove_tetrahedron_keeps_faces(corner_tetra):
    g, ids = _graph(corner_tetra)
    g.add_tetra_faces(*ids)
    tet = g.tetrahedra[0]
    g.remove_tetrahedron(tet)
    assert g.tetrahedra == [] and len(g.faces) == 4
    assert g.validate()["orphan_faces"] == g.faces
    assert g.prune_orphans() == 4
    with pytest.raises(StaleHandleError):
        g.remove_tetrahedron(tet)


def test_remove_node_cascades(star_points):
    g, (o, p, q, r, s) = _graph(star_points)
    g.add_tetra_faces(o, p, q, r)
    g.add_tetra_faces(o, p, q, s)
    g.remove_node(s)
    assert [t.key for t in g.tetrahedra] == [(o, p, q, r)]
    assert len(g.faces) == 4
    report = g.validate()
    assert report["bad_faces"] == [] and report["bad_tetrahedra"] == []


def test_cone_over_face(corner_tetra):
    g, (a, b, c, d) = _graph(corner_tetra)
    f = g.add_face(a, b, c)
    cone = g.add_cone(f, d)
    assert len(cone) == 3
    assert len(g.tetrahedra) == 1
    assert g.faces_of(d) == sorted(cone)
    assert g.neighbors(d) == [a, b, c]


def test_tetrahedron_requires_four_distinct_faces(corner_tetra):
    g, (a, b, c, d) = _graph(corner_tetra)
    f1 = g.add_face(a, b, c)
    f2 = g.add_face(a, b, d)
    with pytest.raises(TopologyError):
        Tetrahedron(g, 0, (f1, f2, f1, f2))


def test_from_tetrahedra_drops_unlisted_closures(star_points):
    # the four cells around the centre also close the outer tetrahedron
    cells = [(0, 1, 2, 3), (0, 1, 2, 4), (0, 1, 3, 4), (0, 2, 3, 4)]
    g = TetraGraph.from_tetrahedra(star_points, cells)
    assert sorted(t.key for t in g.tetrahedra) == cells
    assert not g.contains_tetrahedron(1, 2, 3, 4)
    assert len(g.tetrahedra_at(0)) == 4
    report = g.validate()
    assert report["bad_faces"] == [] and report["orphan_faces"] == []
