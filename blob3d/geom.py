from __future__ import annotations
from dataclasses import dataclass
from math import sqrt, isfinite
from typing import Iterable, Sequence, Tuple, Union

EPS = 1e-10  # поріг виродженості (знаменник circumsphere, довжина нормалі)

Color = Tuple[float, float, float, float]
Vec3Like = Union["Pt", Sequence[float]]


@dataclass(frozen=True)
class Pt:
    x: float
    y: float
    z: float
    def __iter__(self):
        yield self.x; yield self.y; yield self.z

ZERO = Pt(0.0, 0.0, 0.0)
UP = Pt(0.0, 1.0, 0.0)


def as_pt(v: Vec3Like) -> Pt:
    """Привести (x, y, z) / numpy-вектор / Pt до Pt із float-координатами."""
    if isinstance(v, Pt):
        return v
    if len(v) != 3:
        raise ValueError(f"expected 3 coordinates, got {len(v)}")
    x, y, z = v
    return Pt(float(x), float(y), float(z))

def as_color(c: Sequence[float]) -> Color:
    if len(c) != 4:
        raise ValueError(f"expected RGBA color, got {len(c)} components")
    r, g, b, a = c
    return (float(r), float(g), float(b), float(a))

def add(a: Pt, b: Pt) -> Pt:
    return Pt(a.x + b.x, a.y + b.y, a.z + b.z)

def sub(a: Pt, b: Pt) -> Pt:
    return Pt(a.x - b.x, a.y - b.y, a.z - b.z)

def scale(a: Pt, k: float) -> Pt:
    return Pt(a.x*k, a.y*k, a.z*k)

def neg(a: Pt) -> Pt:
    return Pt(-a.x, -a.y, -a.z)

def dot(a: Pt, b: Pt) -> float:
    return a.x*b.x + a.y*b.y + a.z*b.z

def cross(a: Pt, b: Pt) -> Pt:
    return Pt(a.y*b.z - a.z*b.y,
              a.z*b.x - a.x*b.z,
              a.x*b.y - a.y*b.x)

def norm(a: Pt) -> float:
    return sqrt(dot(a, a))

def dist2(a: Pt, b: Pt) -> float:
    d = sub(a, b)
    return dot(d, d)

def normalize(a: Pt) -> Pt:
    """Одиничний вектор; для (майже) нульового повертає ZERO замість NaN."""
    n = norm(a)
    if n <= EPS:
        return ZERO
    inv = 1.0 / n
    return Pt(a.x*inv, a.y*inv, a.z*inv)

def is_finite(a: Pt) -> bool:
    return isfinite(a.x) and isfinite(a.y) and isfinite(a.z)

def centroid(points: Iterable[Pt]) -> Pt:
    xs = ys = zs = 0.0
    n = 0
    for p in points:
        xs += p.x; ys += p.y; zs += p.z; n += 1
    if n == 0:
        raise ValueError("empty set")
    inv = 1.0 / n
    return Pt(xs*inv, ys*inv, zs*inv)

def bounds(points: Iterable[Pt]) -> Tuple[Pt, Pt]:
    """AABB (min, max) набору точок."""
    it = iter(points)
    try:
        first = next(it)
    except StopIteration:
        raise ValueError("empty set") from None
    lo_x = hi_x = first.x
    lo_y = hi_y = first.y
    lo_z = hi_z = first.z
    for p in it:
        lo_x = min(lo_x, p.x); hi_x = max(hi_x, p.x)
        lo_y = min(lo_y, p.y); hi_y = max(hi_y, p.y)
        lo_z = min(lo_z, p.z); hi_z = max(hi_z, p.z)
    return Pt(lo_x, lo_y, lo_z), Pt(hi_x, hi_y, hi_z)

def bounding_sphere(points: Iterable[Pt]) -> Tuple[Pt, float]:
    """(центроїд, макс. відстань до нього); порожній набір -> ValueError."""
    pts = list(points)
    c = centroid(pts)
    return c, sqrt(max(dist2(p, c) for p in pts))
