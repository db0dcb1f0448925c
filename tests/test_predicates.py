import math

import pytest

from blob3d.geom import Pt, normalize, bounds, bounding_sphere, as_pt, ZERO, dist2
from blob3d.predicates import (
    circumsphere, in_circumsphere, orient3d, outward_normal, is_degenerate_tetra,
)


def test_circumsphere_unit_tetrahedron(unit_tet):
    center, r2 = circumsphere(*unit_tet)
    assert center.x == pytest.approx(0.5)
    assert center.y == pytest.approx(0.5)
    assert center.z == pytest.approx(0.5)
    assert r2 == pytest.approx(0.75)
    for p in unit_tet:
        assert dist2(p, center) == pytest.approx(r2)


def test_circumsphere_is_order_independent(unit_tet):
    a, b, c, d = unit_tet
    c1, r1 = circumsphere(a, b, c, d)
    c2, r2 = circumsphere(d, c, a, b)
    assert r1 == pytest.approx(r2)
    assert dist2(c1, c2) == pytest.approx(0.0, abs=1e-12)


def test_circumsphere_coplanar_fallback_is_finite_and_large():
    square = [Pt(0, 0, 0), Pt(1, 0, 0), Pt(0, 1, 0), Pt(1, 1, 0)]
    center, r2 = circumsphere(*square)
    assert (center.x, center.y, center.z) == pytest.approx((0.5, 0.5, 0.0))
    assert math.isfinite(r2)
    # (max distance to centroid)² · 1e6 = 0.5 · 1e6
    assert r2 == pytest.approx(0.5e6)


def test_circumsphere_coincident_points_do_not_produce_nan():
    p = Pt(2, 2, 2)
    center, r2 = circumsphere(p, p, p, p)
    assert center == p
    assert r2 == 0.0


def test_in_circumsphere_uses_relative_tolerance():
    center = Pt(0, 0, 0)
    assert in_circumsphere(Pt(0.5, 0, 0), center, 1.0)
    assert not in_circumsphere(Pt(2, 0, 0), center, 1.0)
    # точно на сфері — вважається «всередині» через допуск (1 + 1e-6)
    assert in_circumsphere(Pt(1, 0, 0), center, 1.0)
    assert not in_circumsphere(Pt(1.001, 0, 0), center, 1.0)


def test_orient3d_sign_and_degeneracy(unit_tet):
    a, b, c, d = unit_tet
    assert orient3d(a, b, c, d) > 0
    assert orient3d(a, c, b, d) < 0
    assert not is_degenerate_tetra(a, b, c, d)
    assert is_degenerate_tetra(a, b, c, Pt(3, 3, 0))


def test_outward_normal_points_away_from_opposite():
    p0, p1, p2 = Pt(0, 0, 0), Pt(1, 0, 0), Pt(0, 1, 0)
    n, flipped = outward_normal(p0, p1, p2, Pt(0, 0, 1))
    assert (n.x, n.y, n.z) == pytest.approx((0, 0, -1))
    assert flipped
    n, flipped = outward_normal(p0, p1, p2, Pt(0, 0, -1))
    assert (n.x, n.y, n.z) == pytest.approx((0, 0, 1))
    assert not flipped


def test_normalize_zero_vector_stays_zero():
    assert normalize(ZERO) == ZERO
    n = normalize(Pt(3, 0, 4))
    assert (n.x, n.y, n.z) == pytest.approx((0.6, 0, 0.8))


def test_bounds_and_as_pt():
    lo, hi = bounds([Pt(1, 5, -2), Pt(-1, 2, 3)])
    assert lo == Pt(-1, 2, -2)
    assert hi == Pt(1, 5, 3)
    assert as_pt((1, 2, 3)) == Pt(1.0, 2.0, 3.0)
    with pytest.raises(ValueError):
        as_pt((1, 2))
    with pytest.raises(ValueError):
        bounds([])


def test_bounding_sphere():
    c, r = bounding_sphere([Pt(1, 0, 0), Pt(-1, 0, 0), Pt(0, 3, 0), Pt(0, -3, 0)])
    assert (c.x, c.y, c.z) == pytest.approx((0, 0, 0))
    assert r == pytest.approx(3.0)
    c, r = bounding_sphere(iter([Pt(2, 2, 2)]))
    assert c == Pt(2, 2, 2)
    assert r == 0.0
    with pytest.raises(ValueError):
        bounding_sphere([])
