# blob3d/predicates.py
from __future__ import annotations
from typing import Tuple

from .geom import Pt, EPS, add, sub, cross, dot, scale, normalize, neg, dist2, centroid

INSPHERE_REL_EPS = 1e-6        # відносний допуск для тесту «всередині сфери»
DEGENERATE_RADIUS_SCALE = 1e6  # множник r² для виродженого (пласкаго) тетраедра


def orient3d(a: Pt, b: Pt, c: Pt, d: Pt) -> float:
    ab = sub(b, a)
    ac = sub(c, a)
    ad = sub(d, a)
    return dot(cross(ab, ac), ad)

def circumsphere(a: Pt, b: Pt, c: Pt, d: Pt) -> Tuple[Pt, float]:
    """
    Описана сфера тетраедра (a,b,c,d) через замкнену детермінантну формулу:

        offset = (|ba|²(ca×da) + |ca|²(da×ba) + |da|²(ba×ca)) / (2·ba·(ca×da))

    Повертає (center, radius²).
    Якщо |знаменник| < EPS, точки (майже) копланарні: центр = центроїд,
    r² = (макс. відстань до центроїда)² · 1e6. Такий тетраедр
    майже завжди потрапляє у «погані» при наступних вставках.
    """
    ba = sub(b, a)
    ca = sub(c, a)
    da = sub(d, a)

    len_ba = dot(ba, ba)
    len_ca = dot(ca, ca)
    len_da = dot(da, da)

    cross_cd = cross(ca, da)
    cross_db = cross(da, ba)
    cross_bc = cross(ba, ca)

    denom = 2.0 * dot(ba, cross_cd)
    if abs(denom) < EPS:
        center = centroid((a, b, c, d))
        max_d2 = max(dist2(center, p) for p in (a, b, c, d))
        return center, max_d2 * DEGENERATE_RADIUS_SCALE

    num = add(add(scale(cross_cd, len_ba), scale(cross_db, len_ca)), scale(cross_bc, len_da))
    offset = scale(num, 1.0 / denom)
    return add(a, offset), dot(offset, offset)

def in_circumsphere(p: Pt, center: Pt, radius_sq: float, rel_eps: float = INSPHERE_REL_EPS) -> bool:
    """Строго всередині (з відносним допуском): dist² < r²·(1 + eps)."""
    return dist2(p, center) < radius_sq * (1.0 + rel_eps)

def is_degenerate_tetra(a: Pt, b: Pt, c: Pt, d: Pt) -> bool:
    return abs(2.0 * orient3d(a, b, c, d)) < EPS

def outward_normal(p0: Pt, p1: Pt, p2: Pt, opposite: Pt) -> Tuple[Pt, bool]:
    """
    Нормаль грані (p0,p1,p2), спрямована геть від вершини `opposite`.
    Другий елемент — чи треба перевернути обхід (поміняти p1 і p2).
    """
    n = normalize(cross(sub(p1, p0), sub(p2, p0)))
    if dot(n, sub(opposite, p0)) > 0:
        return neg(n), True
    return n, False
