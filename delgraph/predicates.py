# delgraph/predicates.py
from __future__ import annotations
from typing import List
from .geom import Pt, sub, cross, dot, norm, DEGENERACY_EPS

def orient3d(a: Pt, b: Pt, c: Pt, d: Pt) -> float:
    ab = sub(b, a)
    ac = sub(c, a)
    ad = sub(d, a)
    return dot(cross(ab, ac), ad)

def triangle_area2(a: Pt, b: Pt, c: Pt) -> float:
    """Twice the area of triangle abc (length of the face normal)."""
    return norm(cross(sub(b, a), sub(c, a)))

def is_collinear(a: Pt, b: Pt, c: Pt, eps: float = DEGENERACY_EPS) -> bool:
    """
    Relative test: |ab x ac| against |ab|*|ac|, i.e. the sine of the angle at a.
    Coincident points count as collinear.
    """
    lab = norm(sub(b, a))
    lac = norm(sub(c, a))
    lbc = norm(sub(c, b))
    if lab == 0.0 or lac == 0.0 or lbc == 0.0:
        return True
    return triangle_area2(a, b, c) <= eps * max(lab*lac, lab*lbc, lac*lbc)

def is_coplanar(a: Pt, b: Pt, c: Pt, d: Pt, eps: float = DEGENERACY_EPS) -> bool:
    """Relative test: |orient3d| against the product of the three edge lengths from a."""
    lab = norm(sub(b, a))
    lac = norm(sub(c, a))
    lad = norm(sub(d, a))
    if lab == 0.0 or lac == 0.0 or lad == 0.0:
        return True
    return abs(orient3d(a, b, c, d)) <= eps * lab * lac * lad

# ---------- determinant helper ----------
def _det(m: List[List[float]]) -> float:
    """Determinant by Gaussian elimination with partial pivoting (float)."""
    n = len(m)
    a = [row[:] for row in m]
    det = 1.0
    for i in range(n):
        # pivot
        piv = i
        maxv = abs(a[i][i])
        for r in range(i+1, n):
            v = abs(a[r][i])
            if v > maxv:
                maxv = v; piv = r
        if maxv == 0.0:
            return 0.0
        if piv != i:
            a[i], a[piv] = a[piv], a[i]
            det = -det
        det *= a[i][i]
        inv = 1.0 / a[i][i]
        # eliminate
        for r in range(i+1, n):
            factor = a[r][i] * inv
            if factor != 0.0:
                for c in range(i, n):
                    a[r][c] -= factor * a[i][c]
    return det

def insphere(a: Pt, b: Pt, c: Pt, d: Pt, e: Pt) -> float:
    """
    Sign of the "is e inside the sphere through a,b,c,d?" determinant.
      >0  e inside circumsphere(a,b,c,d),
      <0  outside,
       0  on the sphere, or a,b,c,d coplanar.
    Independent of the line/plane construction in sphere.py, so it serves
    as a cross-check for Sphere.contains.
    """
    def row(p: Pt) -> list[float]:
        s = p.x*p.x + p.y*p.y + p.z*p.z
        return [p.x, p.y, p.z, s, 1.0]

    M = [row(a), row(b), row(c), row(d), row(e)]
    val = _det(M)
    ori = orient3d(a, b, c, d)
    # the raw determinant is positive-inside for negatively oriented a,b,c,d
    if ori > 0:
        return -val
    elif ori < 0:
        return val
    else:
        return 0.0
