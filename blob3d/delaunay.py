# blob3d/delaunay.py
from __future__ import annotations
import logging
from math import isfinite
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Iterable, List, Mapping, NamedTuple, Sequence, Tuple

from .geom import Pt, add, bounds, is_finite, scale, dist2
from .predicates import circumsphere, in_circumsphere, is_degenerate_tetra, INSPHERE_REL_EPS

logger = logging.getLogger(__name__)

SUPER_MARGIN = 3.0      # у скільки разів розширюємо найбільший вимір AABB
MIN_SUPER_MARGIN = 3.0  # менше не гарантує, що AABB лежить усередині


class VertexKind(IntEnum):
    SUPER = 0
    REAL = 1


class VertexRef(NamedTuple):
    """
    Посилання на вершину робочої сітки: або справжня керуюча точка (REAL, id),
    або одна з 4 вершин супер-тетра (SUPER, 0..3). Так id точок можуть бути
    будь-якими int (навіть від'ємними) без конфлікту з синтетичними вершинами.
    """
    kind: VertexKind
    id: int

    @classmethod
    def real(cls, point_id: int) -> "VertexRef":
        return cls(VertexKind.REAL, point_id)

    @classmethod
    def sentinel(cls, i: int) -> "VertexRef":
        return cls(VertexKind.SUPER, i)

    @property
    def is_super(self) -> bool:
        return self.kind == VertexKind.SUPER


RefFace = Tuple[VertexRef, VertexRef, VertexRef]  # відсортована трійка


@dataclass(frozen=True)
class Tetrahedron:
    """Тетраедр фінальної тетраедралізації: лише id справжніх точок."""
    vertices: Tuple[int, int, int, int]
    circumcenter: Pt
    circumradius_sq: float


@dataclass(frozen=True)
class SuperTetrahedron:
    refs: Tuple[VertexRef, VertexRef, VertexRef, VertexRef]
    positions: Tuple[Pt, Pt, Pt, Pt]


@dataclass
class _WorkTet:
    v: Tuple[VertexRef, VertexRef, VertexRef, VertexRef]
    center: Pt
    radius_sq: float

    def faces(self) -> Iterable[RefFace]:
        a, b, c, d = self.v
        for tri in ((a, b, c), (a, b, d), (a, c, d), (b, c, d)):
            yield tuple(sorted(tri))

    def touches_super(self) -> bool:
        return any(r.is_super for r in self.v)


def build_super_tetrahedron(positions: Iterable[Pt], margin: float = SUPER_MARGIN) -> SuperTetrahedron:
    """
    Великий тетраедр навколо всіх точок:
      - AABB точок, dmax = найбільший вимір (нульовий розмах -> 1.0);
      - піврозмір s = 2·margin·dmax (для margin=3 це 6·dmax),
        вершини mid ± (s,s,s) у «правильному» розташуванні.
    Вписана сфера такого тетра має радіус s/√3, тож AABB гарантовано всередині.
    """
    if margin < MIN_SUPER_MARGIN:
        raise ValueError(f"super-tetrahedron margin must be >= {MIN_SUPER_MARGIN}, got {margin}")
    lo, hi = bounds(positions)
    mid = scale(add(lo, hi), 0.5)
    dmax = max(hi.x - lo.x, hi.y - lo.y, hi.z - lo.z) or 1.0
    s = 2.0 * dmax * margin
    verts = (
        add(mid, Pt(s, s, s)),
        add(mid, Pt(s, -s, -s)),
        add(mid, Pt(-s, s, -s)),
        add(mid, Pt(-s, -s, s)),
    )
    refs = tuple(VertexRef.sentinel(i) for i in range(4))
    return SuperTetrahedron(refs, verts)


class BowyerWatson:
    """
    Інкрементальна 3D Делоне (Bowyer–Watson) з повним переглядом робочого списку:
      1) < 4 точок -> порожній результат (це не помилка);
      2) старт із супер-тетра;
      3) точки вставляються за зростанням id: «погані» тетри (сфера містить точку)
         вилучаються, грані порожнини з кратністю 1 з'єднуються з новою точкою;
      4) наприкінці прибираються всі тетри з супер-вершинами.
    Результат детермінований для однакового входу.
    """

    def __init__(self, points: Iterable[Tuple[int, Pt]], margin: float = SUPER_MARGIN,
                 rel_eps: float = INSPHERE_REL_EPS):
        self.points: Dict[int, Pt] = dict(points)
        self.margin = margin
        self.rel_eps = rel_eps
        self.super_tet: SuperTetrahedron | None = None
        self.stats = {"inserted": 0, "bad": 0, "created": 0, "removed_super": 0}

    def _pos(self, ref: VertexRef) -> Pt:
        if ref.is_super:
            return self.super_tet.positions[ref.id]
        return self.points[ref.id]

    def _make_tet(self, a: VertexRef, b: VertexRef, c: VertexRef, d: VertexRef) -> _WorkTet:
        center, r2 = circumsphere(self._pos(a), self._pos(b), self._pos(c), self._pos(d))
        return _WorkTet((a, b, c, d), center, r2)

    # ---- вставка однієї точки ----
    def _insert(self, work: List[_WorkTet], point_id: int) -> List[_WorkTet]:
        p = self.points[point_id]
        bad: List[_WorkTet] = []
        good: List[_WorkTet] = []
        for t in work:
            if in_circumsphere(p, t.center, t.radius_sq, self.rel_eps):
                bad.append(t)
            else:
                good.append(t)

        # межа порожнини: грані поганих тетр, що зустрічаються рівно один раз
        face_count: Dict[RefFace, int] = {}
        for t in bad:
            for key in t.faces():
                face_count[key] = face_count.get(key, 0) + 1

        new_ref = VertexRef.real(point_id)
        created = [self._make_tet(a, b, c, new_ref)
                   for (a, b, c), k in face_count.items() if k == 1]

        self.stats["inserted"] += 1
        self.stats["bad"] += len(bad)
        self.stats["created"] += len(created)
        return good + created

    def build(self) -> List[Tetrahedron]:
        if len(self.points) < 4:
            logger.debug("tetrahedralize: %d points, need at least 4", len(self.points))
            return []

        self.super_tet = build_super_tetrahedron(self.points.values(), self.margin)
        work = [self._make_tet(*self.super_tet.refs)]

        for point_id in sorted(self.points):
            work = self._insert(work, point_id)

        out: List[Tetrahedron] = []
        for t in work:
            if t.touches_super():
                self.stats["removed_super"] += 1
                continue
            out.append(Tetrahedron(tuple(r.id for r in t.v), t.center, t.radius_sq))

        degenerate = sum(1 for t in out if is_degenerate_tetra(*(self.points[i] for i in t.vertices)))
        if degenerate:
            logger.debug("tetrahedralize: %d degenerate tetrahedra use the fallback circumsphere", degenerate)
        logger.debug(
            "tetrahedralize: %d points -> %d tetrahedra (bad=%d, created=%d, removed_super=%d)",
            len(self.points), len(out), self.stats["bad"], self.stats["created"], self.stats["removed_super"],
        )
        return out


def tetrahedralize(points: Iterable[Tuple[int, Pt]], margin: float = SUPER_MARGIN) -> List[Tetrahedron]:
    """Делоне-тетраедралізація пар (id, Pt)."""
    return BowyerWatson(points, margin).build()


def validate_tetrahedra(tetrahedra: Sequence[Tetrahedron], positions: Mapping[int, Pt],
                        rel_eps: float = INSPHERE_REL_EPS) -> dict:
    """
    Діагностика тетраедралізації:
      - non_finite: тетри з NaN/inf у центрі чи радіусі;
      - degenerate: (майже) пласкі тетри;
      - delaunay_violations: (індекс тетри, id точки), де точка строго всередині
        описаної сфери (dist² < r²·(1 − eps)); O(n·t), лише для перевірок.
    """
    non_finite: List[int] = []
    degenerate: List[int] = []
    violations: List[Tuple[int, int]] = []
    for ti, t in enumerate(tetrahedra):
        if not (is_finite(t.circumcenter) and isfinite(t.circumradius_sq)):
            non_finite.append(ti)
            continue
        if is_degenerate_tetra(*(positions[i] for i in t.vertices)):
            degenerate.append(ti)
            continue
        own = set(t.vertices)
        limit = t.circumradius_sq * (1.0 - rel_eps)
        for pid, p in positions.items():
            if pid in own:
                continue
            if dist2(p, t.circumcenter) < limit:
                violations.append((ti, pid))
    return {
        "tets": len(tetrahedra),
        "non_finite": non_finite,
        "degenerate": degenerate,
        "delaunay_violations": violations,
    }
