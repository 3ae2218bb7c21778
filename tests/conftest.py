"""
Shared fixtures: small hand-made point sets and seeded random clouds.
"""
from math import sqrt

import numpy as np
import pytest

from delgraph.geom import Pt


@pytest.fixture
def rng():
    return np.random.default_rng(20240607)


@pytest.fixture
def pentagon():
    """Convex, no four points on a common circle."""
    return [(0.0, 0.0, 0.0), (4.0, 0.0, 0.0), (5.0, 2.0, 0.0), (2.0, 5.0, 0.0), (-1.0, 3.0, 0.0)]


@pytest.fixture
def tilted_pentagon(pentagon):
    """The same pentagon laid into the plane spanned by (1,0,1)/sqrt(2) and (0,1,0)."""
    s = 1.0 / sqrt(2.0)
    origin = (3.0, -2.0, 1.0)
    return [(origin[0] + x*s, origin[1] + y, origin[2] + x*s) for x, y, _ in pentagon]


@pytest.fixture
def corner_tetra():
    return [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0)]


@pytest.fixture
def cloud2d(rng):
    xy = rng.uniform(0.0, 1.0, size=(40, 2))
    return [(float(x), float(y), 0.0) for x, y in xy]


@pytest.fixture
def cloud3d(rng):
    return [tuple(float(c) for c in row) for row in rng.uniform(0.0, 1.0, size=(30, 3))]


def coord_keys(graph):
    """Simplices as frozensets of coordinate tuples, comparable across graphs."""
    return {frozenset(tuple(graph.position(n)) for n in s.nodes) for s in graph.simplices()}


@pytest.fixture
def keys_of():
    return coord_keys


@pytest.fixture
def star_points():
    """Centre node 0 inside the regular tetrahedron 1-2-3-4."""
    return [Pt(0.0, 0.0, 0.0), Pt(1.0, 1.0, 1.0), Pt(1.0, -1.0, -1.0),
            Pt(-1.0, 1.0, -1.0), Pt(-1.0, -1.0, 1.0)]
