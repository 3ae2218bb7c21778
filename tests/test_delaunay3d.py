import logging

import pytest

from delgraph.delaunay import DelaunayTetrahedralization, Stage
from delgraph.errors import InvalidStateError, UnsupportedOperationError
from delgraph.geom import as_pt, dist, norm, sub


def test_four_points_give_one_tetrahedron(corner_tetra):
    d = DelaunayTetrahedralization()
    results = d.insert_all(corner_tetra)
    assert all(r.inserted for r in results)
    g = d.finalize()
    assert len(g.tetrahedra) == 1
    assert len(g.faces) == 4
    assert len(g.edges) == 6
    assert len(g.nodes) == 4
    assert g.validate()["bad_tetrahedra"] == []


def test_super_tetrahedron_encloses_points(cloud3d):
    d = DelaunayTetrahedralization(cloud3d)
    assert len(d.super_nodes) == 4
    (tet,) = d.graph.tetrahedra
    sphere = tet.circumsphere
    assert all(sphere.contains(as_pt(p)) for p in cloud3d)
    center, radius = d.enclosing_sphere()
    # regular tetrahedron: circumradius is three times the inradius
    assert abs(sphere.radius - 3.0 * radius) < 1e-6 * radius
    assert dist(sphere.center, center) < 1e-6 * radius


def test_random_cloud_is_delaunay(cloud3d):
    d = DelaunayTetrahedralization(cloud3d)
    g = d.build()
    assert d.skipped == []
    report = g.validate()
    assert report["nodes"] == len(cloud3d)
    assert report["bad_tetrahedra"] == [] and report["bad_faces"] == []
    assert report["orphan_faces"] == []
    assert g.is_delaunay(tolerance=1e-9)
    assert not set(d.super_nodes) & set(g.nodes)


def test_cavity_counts(cloud3d):
    d = DelaunayTetrahedralization(cloud3d)
    for p in cloud3d:
        before = len(d.graph.tetrahedra)
        res = d.insert(p)
        assert res.created == res.boundary
        assert len(d.graph.tetrahedra) - before == res.created - res.guilty
        # every face is shared by at most two cells after each insertion
        assert d.graph.validate()["bad_faces"] == []


def test_matches_scipy(cloud3d, keys_of):
    spatial = pytest.importorskip("scipy.spatial")
    g = DelaunayTetrahedralization(cloud3d).build()
    ref = spatial.Delaunay(cloud3d)
    expected = {frozenset(cloud3d[i] for i in s) for s in ref.simplices}
    ours = keys_of(g)
    assert ours <= expected
    assert len(ours) >= 0.9 * len(expected)


def test_point_outside_super_tetrahedron_is_skipped(caplog):
    d = DelaunayTetrahedralization(extents=(1, 1, 1))
    with caplog.at_level(logging.WARNING, logger="delgraph"):
        res = d.insert((1000.0, 1000.0, 1000.0))
    assert res.node is None
    assert d.skipped == [as_pt((1000.0, 1000.0, 1000.0))]
    assert "skipping point" in caplog.text
    assert len(d.graph.tetrahedra) == 1


def test_duplicate_point_leaves_graph_untouched(corner_tetra):
    d = DelaunayTetrahedralization(corner_tetra)
    d.insert_all(corner_tetra)
    before = d.graph.validate()
    res = d.insert(corner_tetra[1])
    assert not res.inserted
    assert d.graph.validate() == before


def test_driver_lifecycle(corner_tetra):
    d = DelaunayTetrahedralization(corner_tetra)
    assert d.stage is Stage.INITIALIZING
    with pytest.raises(UnsupportedOperationError):
        d.remove_node(d.super_nodes[0])
    g = d.build()
    assert d.stage is Stage.DONE
    assert g is d.graph
    with pytest.raises(InvalidStateError):
        d.insert((0.1, 0.1, 0.1))


def test_super_edges_are_off_the_axes():
    d = DelaunayTetrahedralization(extents=(1, 1, 1))
    corners = d.graph.positions(d.super_nodes)
    for i in range(4):
        for j in range(i + 1, 4):
            e = sub(corners[j], corners[i])
            assert min(abs(e.x), abs(e.y), abs(e.z)) > 1e-2 * norm(e)


def test_axis_aligned_points_are_not_skipped(corner_tetra):
    d = DelaunayTetrahedralization()
    d.insert_all(corner_tetra + [(2.0, 2.0, 2.0)])
    assert d.skipped == []
    g = d.finalize()
    assert len(g.nodes) == 5
    assert sorted(t.key for t in g.tetrahedra) == [(4, 5, 6, 7), (5, 6, 7, 8)]


def test_build_sizes_super_tetrahedron_to_given_points(rng):
    points = [tuple(float(c) for c in row) for row in rng.uniform(0.0, 100.0, size=(20, 3))]
    d = DelaunayTetrahedralization()
    g = d.build(points)
    assert d.skipped == []
    assert len(g.nodes) == 20
    assert g.is_delaunay(tolerance=1e-9)


def test_build_rejects_new_points_after_insertion(corner_tetra):
    d = DelaunayTetrahedralization()
    d.insert(corner_tetra[0])
    with pytest.raises(InvalidStateError):
        d.build(corner_tetra[1:])
