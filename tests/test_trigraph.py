import pytest

from delgraph.errors import StaleHandleError, TopologyError
from delgraph.simplex import Triangle
from delgraph.trigraph import TriGraph


def _graph(*points):
    g = TriGraph()
    ids = [g.add_node(p) for p in points]
    return g, ids


def test_third_edge_closes_triangle():
    g, (a, b, c) = _graph((0, 0), (1, 0), (0, 1))
    g.add_edge(a, b)
    g.add_edge(b, c)
    assert g.triangles == []
    g.add_edge(c, a)
    assert len(g.triangles) == 1
    tri = g.triangles[0]
    assert tri.key == (a, b, c)
    assert g.contains_triangle(c, b, a)
    assert g.validate()["bad_triangles"] == []


def test_add_edge_is_deduplicated():
    g, (a, b) = _graph((0, 0), (1, 0))
    e = g.add_edge(a, b)
    assert g.add_edge(b, a) == e
    assert len(g.edges) == 1
    with pytest.raises(TopologyError):
        g.add_edge(a, a)


def test_diagonal_closes_every_triangle():
    g, (a, b, c, d) = _graph((0, 0), (1, 0), (1, 1), (0, 1))
    for x, y in ((a, b), (b, c), (c, d), (d, a)):
        g.add_edge(x, y)
    g.add_edge(a, c)
    assert sorted(t.key for t in g.triangles) == [(a, b, c), (a, c, d)]
    diag = g.edge_between(a, c)
    assert len(g.triangles_of(diag)) == 2


def test_remove_triangle_prunes_unused_edges():
    g, (a, b, c) = _graph((0, 0), (1, 0), (0, 1))
    g.add_triangle_edges(a, b, c)
    g.remove_triangle(g.triangles[0])
    assert g.triangles == [] and g.edges == []

    g.add_triangle_edges(a, b, c)
    g.remove_triangle(g.triangles[0], prune_edges=False)
    assert g.triangles == [] and len(g.edges) == 3


def test_remove_triangle_keeps_shared_edges():
    g, (a, b, c, d) = _graph((0, 0), (1, 0), (1, 1), (0, 1))
    g.add_triangle_edges(a, b, c)
    g.add_triangle_edges(a, c, d)
    g.remove_triangle(g.triangle_on(a, b, c))
    assert g.connected(a, c)
    assert not g.connected(a, b)
    assert [t.key for t in g.triangles] == [(a, c, d)]


def test_remove_node_cascades():
    g, (a, b, c, d) = _graph((0, 0), (1, 0), (1, 1), (0, 1))
    g.add_triangle_edges(a, b, c)
    g.add_triangle_edges(a, c, d)
    g.remove_node(a)
    assert g.nodes == [b, c, d]
    assert g.triangles == []
    assert sorted(g.edge_nodes(e) for e in g.edges) == [(b, c), (c, d)]
    with pytest.raises(StaleHandleError):
        g.node(a)
    report = g.validate()
    assert report["bad_edges"] == [] and report["bad_triangles"] == []


def test_stale_handles_are_detected():
    g, (a, b, c) = _graph((0, 0), (1, 0), (0, 1))
    edges = g.add_triangle_edges(a, b, c)
    tri = g.triangles[0]
    g.remove_edge(edges[0])
    assert not tri.alive
    with pytest.raises(StaleHandleError):
        g.triangle(tri)
    with pytest.raises(StaleHandleError):
        tri.circumsphere
    with pytest.raises(StaleHandleError):
        g.remove_edge(edges[0])


def test_triangle_requires_connected_nodes():
    g, (a, b, c) = _graph((0, 0), (1, 0), (0, 1))
    g.add_edge(a, b)
    with pytest.raises(TopologyError):
        Triangle(g, 0, a, b, c)


def test_cone_reuses_existing_edges():
    g, (a, b, c) = _graph((0, 0), (1, 0), (0, 1))
    ab = g.add_edge(a, b)
    ac = g.add_edge(a, c)
    cone = g.add_cone(ab, c)
    assert cone[0] == ac
    assert len(g.edges) == 3
    assert len(g.triangles) == 1


def test_triangle_views():
    g, (a, b, c, d) = _graph((0, 0), (1, 0), (1, 1), (0, 1))
    g.add_triangle_edges(a, b, c)
    g.add_triangle_edges(a, c, d)
    t1 = g.triangle_on(a, b, c)
    t2 = g.triangle_on(c, d, a)
    assert t1.shares_edge(t2)
    assert t1.contains_edge(g.edge_between(b, c))
    assert t1 != t2 and t1 == g.triangle_on(c, a, b)
    assert sorted(g.neighbors(a)) == [b, c, d]
    assert [t.key for t in g.triangles_at(b)] == [(a, b, c)]
    sphere = t1.circumsphere
    assert t1.circumsphere is sphere


def test_closest_nodes():
    g, ids = _graph((0, 0), (5, 0), (1, 0), (2, 0))
    assert g.closest((0.9, 0, 0), 2) == [ids[2], ids[0]]
    assert g.closest((0, 0, 0), 10) == [ids[0], ids[2], ids[3], ids[1]]
    assert g.closest((0, 0, 0), 0) == []


def test_delaunay_check_on_square():
    # split along the long diagonal of a rhombus: not Delaunay
    g, (a, b, c, d) = _graph((0, 0), (2, -1), (4, 0), (2, 1))
    g.add_triangle_edges(a, b, c)
    g.add_triangle_edges(a, c, d)
    hit = g.find_delaunay_violation()
    assert hit is not None
    assert not g.is_delaunay()

    h, (a, b, c, d) = _graph((0, 0), (2, -1), (4, 0), (2, 1))
    h.add_triangle_edges(a, b, d)
    h.add_triangle_edges(b, c, d)
    assert h.is_delaunay()


def test_prune_orphans():
    g, (a, b, c, d) = _graph((0, 0), (1, 0), (0, 1), (5, 5))
    g.add_triangle_edges(a, b, c)
    g.add_edge(c, d)
    assert g.validate()["orphan_edges"] == [g.edge_between(c, d)]
    assert g.prune_orphans() == 1
    assert g.validate()["orphan_edges"] == []
    assert len(g.edges) == 3
