# delgraph/geom.py
from __future__ import annotations
from dataclasses import dataclass
from math import sqrt
from typing import Iterable, List, Sequence, Tuple

import numpy as np

EPS = 1e-10             # generic float guard
LINE_EPS = 1e-4         # max distance between two lines still treated as intersecting
PLANE_EPS = 0.006       # min sin^2 between plane normals (~4.4 degrees)
PARALLEL_EPS = 1e-12    # min sin^2 between two line directions
DEGENERACY_EPS = 1e-12  # relative area / volume below which a simplex is flat

@dataclass(frozen=True)
class Pt:
    x: float
    y: float
    z: float
    def __iter__(self):
        yield self.x; yield self.y; yield self.z

def as_pt(p) -> Pt:
    """Pt, 3-sequence or numpy row -> Pt. Two coordinates are padded with z=0."""
    if isinstance(p, Pt):
        return p
    coords = [float(c) for c in p]
    if len(coords) == 2:
        coords.append(0.0)
    if len(coords) != 3:
        raise ValueError(f"expected 2 or 3 coordinates, got {len(coords)}")
    return Pt(*coords)

def add(a: Pt, b: Pt) -> Pt:
    return Pt(a.x + b.x, a.y + b.y, a.z + b.z)

def sub(a: Pt, b: Pt) -> Pt:
    return Pt(a.x - b.x, a.y - b.y, a.z - b.z)

def scale(a: Pt, s: float) -> Pt:
    return Pt(a.x*s, a.y*s, a.z*s)

def dot(a: Pt, b: Pt) -> float:
    return a.x*b.x + a.y*b.y + a.z*b.z

def cross(a: Pt, b: Pt) -> Pt:
    return Pt(a.y*b.z - a.z*b.y,
              a.z*b.x - a.x*b.z,
              a.x*b.y - a.y*b.x)

def norm(a: Pt) -> float:
    return sqrt(dot(a, a))

def dist(a: Pt, b: Pt) -> float:
    return norm(sub(a, b))

def lerp(a: Pt, b: Pt, t: float) -> Pt:
    return Pt(a.x + (b.x - a.x)*t,
              a.y + (b.y - a.y)*t,
              a.z + (b.z - a.z)*t)

def normalize(a: Pt) -> Pt:
    n = norm(a)
    if n == 0.0:
        raise ValueError("cannot normalize a zero vector")
    return scale(a, 1.0 / n)

def centroid(points: Iterable[Pt]) -> Pt:
    xs = ys = zs = 0.0
    n = 0
    for p in points:
        xs += p.x; ys += p.y; zs += p.z; n += 1
    if n == 0:
        raise ValueError("empty set")
    inv = 1.0 / n
    return Pt(xs*inv, ys*inv, zs*inv)

def bounding_box(points: Iterable[Pt]) -> Tuple[Pt, Pt]:
    pts = list(points)
    if not pts:
        raise ValueError("empty set")
    lo = Pt(min(p.x for p in pts), min(p.y for p in pts), min(p.z for p in pts))
    hi = Pt(max(p.x for p in pts), max(p.y for p in pts), max(p.z for p in pts))
    return lo, hi

def best_fit_plane(points: Sequence[Pt]) -> Tuple[Pt, Pt, Pt]:
    """
    Plane through the centroid of `points` as (origin, u, v), u and v an
    orthonormal in-plane basis. Uses the SVD of the centred coordinates;
    with fewer than 3 points (or all collinear) the basis is completed
    arbitrarily, preferring the XY plane.
    """
    o = centroid(points)
    arr = np.array([tuple(sub(p, o)) for p in points], dtype=float)
    if len(arr) >= 2 and np.linalg.norm(arr) > 0.0:
        _, s, vt = np.linalg.svd(arr, full_matrices=True)
        u = Pt(*(float(c) for c in vt[0]))
        if len(s) > 1 and s[1] > EPS * s[0]:
            v = Pt(*(float(c) for c in vt[1]))
        else:
            # collinear input: any direction perpendicular to u will do
            helper = Pt(0.0, 0.0, 1.0) if abs(u.z) < 0.9 else Pt(1.0, 0.0, 0.0)
            v = normalize(cross(helper, u))
        return o, normalize(u), v
    return o, Pt(1.0, 0.0, 0.0), Pt(0.0, 1.0, 0.0)

def unique_points(points: Iterable[Tuple[float, float, float]], scale: float = 1e9) -> List[Pt]:
    """
    Coarse deduplication by quantizing coordinates (stable for floats).
    `scale=1e9` is ~1e-9 per coordinate. Order of first occurrence is kept.
    """
    seen: dict[Tuple[int, int, int], Pt] = {}
    for p in points:
        x, y, z = as_pt(p)
        key = (int(round(x*scale)), int(round(y*scale)), int(round(z*scale)))
        if key not in seen:
            seen[key] = Pt(x, y, z)
    return list(seen.values())
