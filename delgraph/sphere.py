# delgraph/sphere.py
from __future__ import annotations
from dataclasses import dataclass
from itertools import combinations
from math import sqrt
from typing import List, Optional, Tuple

from .errors import DegenerateGeometryError
from .geom import Pt, sub, dot, cross, dist, lerp
from .intersect import (closest_points_on_two_lines, line_line_intersection,
                        plane_plane_intersection)
from .predicates import is_collinear, is_coplanar


@dataclass(frozen=True)
class Sphere:
    """Centre + radius. Built once per simplex and never mutated."""
    center: Pt
    radius: float

    def contains(self, p: Pt) -> bool:
        # strict: a point exactly on the sphere is outside
        return dist(self.center, p) < self.radius


# ---------- triangle ----------
def circumcenter_tri(a: Pt, b: Pt, c: Pt) -> Pt:
    """
    Intersection of the perpendicular bisectors of ab and ac, taken inside
    the plane of the triangle (direction = normal x side). Rounding often
    leaves the two bisectors slightly skew; then the midpoint of their
    closest-approach segment is used.
    """
    if is_collinear(a, b, c):
        raise DegenerateGeometryError(f"collinear triangle {a}, {b}, {c}")
    ab = sub(b, a)
    ac = sub(c, a)
    normal = cross(ab, ac)
    m1 = lerp(a, b, 0.5)
    m2 = lerp(a, c, 0.5)
    d1 = cross(normal, ab)
    d2 = cross(normal, ac)
    return _meet(m1, d1, m2, d2)

def circumradius_tri(a: Pt, b: Pt, c: Pt) -> float:
    #                     pqr
    # R = -------------------------------------------
    #      sqrt((p+q+r)(q+r-p)(r+p-q)(p+q-r))
    p = dist(a, b)
    q = dist(a, c)
    r = dist(b, c)
    radicand = (p + q + r) * (q + r - p) * (r + p - q) * (p + q - r)
    if radicand <= 0.0:
        raise DegenerateGeometryError(f"collinear triangle {a}, {b}, {c}")
    return p*q*r / sqrt(radicand)


# ---------- tetrahedron ----------
def _face_axis(a: Pt, b: Pt, c: Pt) -> Optional[Tuple[Pt, Pt]]:
    """
    Line of points equidistant from a, b and c, as the intersection of the
    bisector planes of two of the face's edges. All three pairs describe the
    same line; the pair closest to perpendicular is tried first.
    """
    edges = [(a, b), (a, c), (b, c)]
    pairs = []
    for (e1, e2) in combinations(edges, 2):
        n1 = sub(e1[1], e1[0])
        n2 = sub(e2[1], e2[0])
        pairs.append((_sin2(n1, n2), n1, lerp(e1[0], e1[1], 0.5), n2, lerp(e2[0], e2[1], 0.5)))
    pairs.sort(key=lambda item: item[0], reverse=True)
    for _, n1, p1, n2, p2 in pairs:
        line = plane_plane_intersection(n1, p1, n2, p2)
        if line is not None:
            return line
    return None

def circumcenter_tet(a: Pt, b: Pt, c: Pt, d: Pt) -> Pt:
    """
    The face axes of a tetrahedron all pass through its circumcentre, so
    two of them meet there. Uses the pair of axes closest to perpendicular.
    """
    if is_coplanar(a, b, c, d):
        raise DegenerateGeometryError(f"coplanar tetrahedron {a}, {b}, {c}, {d}")
    axes: List[Tuple[Pt, Pt]] = []
    for face in ((a, b, c), (a, b, d), (a, c, d), (b, c, d)):
        axis = _face_axis(*face)
        if axis is not None:
            axes.append(axis)
    if len(axes) < 2:
        raise DegenerateGeometryError(f"no stable face axes for tetrahedron {a}, {b}, {c}, {d}")
    (p1, d1), (p2, d2) = max(combinations(axes, 2), key=lambda pair: _sin2(pair[0][1], pair[1][1]))
    return _meet(p1, d1, p2, d2)


def circumsphere(*points: Pt) -> Sphere:
    """Sphere through 3 points (circle embedded in 3D) or 4 points."""
    if len(points) == 3:
        return Sphere(circumcenter_tri(*points), circumradius_tri(*points))
    if len(points) == 4:
        centre = circumcenter_tet(*points)
        return Sphere(centre, dist(centre, points[0]))
    raise ValueError(f"circumsphere needs 3 or 4 points, got {len(points)}")


# ---------- utilities ----------
def _sin2(u: Pt, v: Pt) -> float:
    uu = dot(u, u)
    vv = dot(v, v)
    if uu == 0.0 or vv == 0.0:
        return 0.0
    w = cross(u, v)
    return dot(w, w) / (uu * vv)

def _meet(p1: Pt, d1: Pt, p2: Pt, d2: Pt) -> Pt:
    hit = line_line_intersection(p1, d1, p2, d2)
    if hit is not None:
        return hit
    closest = closest_points_on_two_lines(p1, d1, p2, d2)
    if closest is None:
        raise DegenerateGeometryError("construction lines are parallel")
    return lerp(closest[0], closest[1], 0.5)
