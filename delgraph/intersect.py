# delgraph/intersect.py
"""
Line / plane intersection primitives used by the circumsphere constructions.

Lines are (point, direction) pairs, planes are (normal, point) pairs.
Directions and normals need not be unit length. Every function returns
None instead of raising when the configuration has no (stable) answer;
deciding whether that is an error is left to the caller.
"""
from __future__ import annotations
from typing import Optional, Tuple

from .geom import (Pt, add, sub, scale, dot, cross, norm, normalize,
                   LINE_EPS, PLANE_EPS, PARALLEL_EPS)

def line_line_intersection(p1: Pt, d1: Pt, p2: Pt, d2: Pt,
                           eps: float = LINE_EPS) -> Optional[Pt]:
    """
    Intersection of two lines, or None if they are (nearly) parallel or skew.
    In 3D two lines rarely meet exactly: they count as intersecting when
    their distance is below `eps`; use closest_points_on_two_lines otherwise.
    """
    d3 = sub(p2, p1)
    c12 = cross(d1, d2)
    c32 = cross(d3, d2)
    c12_sq = dot(c12, c12)
    if c12_sq <= PARALLEL_EPS * dot(d1, d1) * dot(d2, d2):
        return None
    # distance between the two lines
    planar = abs(dot(d3, c12)) / c12_sq**0.5
    if planar >= eps:
        return None
    s = dot(c32, c12) / c12_sq
    return add(p1, scale(d1, s))

def closest_points_on_two_lines(p1: Pt, d1: Pt, p2: Pt, d2: Pt) -> Optional[Tuple[Pt, Pt]]:
    """
    The pair of points, one on each line, closest to each other.
    None only for parallel lines.
    """
    a = dot(d1, d1)
    b = dot(d1, d2)
    e = dot(d2, d2)
    d = a*e - b*b
    if d <= PARALLEL_EPS * a * e:
        return None
    r = sub(p1, p2)
    c = dot(d1, r)
    f = dot(d2, r)
    s = (b*f - c*e) / d
    t = (a*f - c*b) / d
    return add(p1, scale(d1, s)), add(p2, scale(d2, t))

def plane_plane_intersection(n1: Pt, p1: Pt, n2: Pt, p2: Pt,
                             eps: float = PLANE_EPS) -> Optional[Tuple[Pt, Pt]]:
    """
    Line shared by two planes as (point, direction).

    With unit normals the denominator below is sin^2 of the angle between
    the planes; planes closer than ~5 degrees to parallel (`eps` = 0.006)
    give None.
    """
    if norm(n1) == 0.0 or norm(n2) == 0.0:
        return None
    u1 = normalize(n1)
    u2 = normalize(n2)
    line_dir = cross(u1, u2)
    # in-plane direction of plane 2, perpendicular to the line
    ldir = cross(u2, line_dir)
    denominator = dot(u1, ldir)
    if abs(denominator) <= eps:
        return None
    t = dot(u1, sub(p1, p2)) / denominator
    return add(p2, scale(ldir, t)), line_dir

def line_plane_intersection(line_point: Pt, line_dir: Pt, normal: Pt, plane_point: Pt) -> Optional[Pt]:
    denominator = dot(line_dir, normal)
    if denominator == 0.0:
        return None
    t = dot(sub(plane_point, line_point), normal) / denominator
    return add(line_point, scale(line_dir, t))
