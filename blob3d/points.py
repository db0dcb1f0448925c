from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Set, Tuple

from .geom import Pt, Color, Vec3Like, ZERO, as_pt, as_color

DEFAULT_COLOR: Color = (1.0, 1.0, 1.0, 1.0)

ChangeListener = Callable[["ControlPointStore"], None]


@dataclass(frozen=True)
class ControlPoint:
    """Керуюча точка зі стабільним id (для прив'язки до сутностей)."""
    id: int
    position: Pt
    velocity: Pt = ZERO
    color: Color = DEFAULT_COLOR


@dataclass(frozen=True)
class PointSnapshot:
    """
    Незмінний зріз множини точок: points відсортовані за зростанням id.
    version — версія сховища на момент зрізу.
    """
    points: Tuple[ControlPoint, ...] = ()
    version: int = 0

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[ControlPoint]:
        return iter(self.points)

    def ids(self) -> List[int]:
        return [cp.id for cp in self.points]

    def positions(self) -> Dict[int, Pt]:
        return {cp.id: cp.position for cp in self.points}

    def items(self) -> List[Tuple[int, Pt]]:
        """Пари (id, position) за зростанням id, як їх вставляє тріангуляція."""
        return [(cp.id, cp.position) for cp in self.points]


class ControlPointStore:
    """
    Арена керуючих точок:
      - _slots: щільний масив комірок (ControlPoint або None для вільної);
      - _free: стек вільних комірок для повторного використання;
      - _slot_of: id -> індекс комірки (O(1) перевірка «чи живий id»);
      - _generation[slot]: збільшується при кожному звільненні комірки.
    Кожна мутація збільшує version і сповіщає слухачів; у batch() сповіщення
    відкладаються до виходу з найзовнішнього блоку (рівно одне на весь блок).
    """

    def __init__(self, default_color: Sequence[float] = DEFAULT_COLOR):
        self.default_color: Color = as_color(default_color)
        self._slots: List[Optional[ControlPoint]] = []
        self._generation: List[int] = []
        self._free: List[int] = []
        self._slot_of: Dict[int, int] = {}
        self._next_id = 0
        self._version = 0

        self._listeners: List[ChangeListener] = []
        self._batch_depth = 0
        self._batch_changed = False

    # ---------------- Слухачі / batch ----------------
    def subscribe(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: ChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @contextmanager
    def batch(self):
        """Пригнітити сповіщення всередині блоку; одне сповіщення наприкінці."""
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0 and self._batch_changed:
                self._batch_changed = False
                self._notify()

    def _changed(self) -> None:
        self._version += 1
        if self._batch_depth > 0:
            self._batch_changed = True
        else:
            self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ---------------- Арена ----------------
    def _alloc(self, cp: ControlPoint) -> None:
        if self._free:
            slot = self._free.pop()
            self._slots[slot] = cp
        else:
            slot = len(self._slots)
            self._slots.append(cp)
            self._generation.append(0)
        self._slot_of[cp.id] = slot

    def _put(self, cp: ControlPoint) -> None:
        self._slots[self._slot_of[cp.id]] = cp

    def generation(self, point_id: int) -> Optional[int]:
        """Покоління комірки, яку займає точка (None, якщо id не живий)."""
        slot = self._slot_of.get(point_id)
        if slot is None:
            return None
        return self._generation[slot]

    # ---------------- Мутації ----------------
    def add_point(self, position: Vec3Like) -> int:
        point_id = self._next_id
        self._next_id += 1
        self._alloc(ControlPoint(point_id, as_pt(position), ZERO, self.default_color))
        self._changed()
        return point_id

    def add_point_with_id(self, point_id: int, position: Vec3Like) -> bool:
        """False (без змін), якщо id вже зайнятий."""
        if point_id in self._slot_of:
            return False
        self._alloc(ControlPoint(point_id, as_pt(position), ZERO, self.default_color))
        self._next_id = max(self._next_id, point_id + 1)
        self._changed()
        return True

    def remove_point(self, point_id: int) -> bool:
        slot = self._slot_of.pop(point_id, None)
        if slot is None:
            return False
        self._slots[slot] = None
        self._generation[slot] += 1
        self._free.append(slot)
        self._changed()
        return True

    def set_point_position(self, point_id: int, position: Vec3Like) -> None:
        cp = self.get_point(point_id)
        if cp is None:
            return
        self._put(replace(cp, position=as_pt(position)))
        self._changed()

    def set_point_state(self, point_id: int, position: Vec3Like, velocity: Vec3Like) -> None:
        cp = self.get_point(point_id)
        if cp is None:
            return
        self._put(replace(cp, position=as_pt(position), velocity=as_pt(velocity)))
        self._changed()

    def set_point_color(self, point_id: int, color: Sequence[float]) -> None:
        # колір запікається у вершини меша, тож це теж зміна
        cp = self.get_point(point_id)
        if cp is None:
            return
        self._put(replace(cp, color=as_color(color)))
        self._changed()

    def add_points(self, positions: Sequence[Vec3Like]) -> List[int]:
        with self.batch():
            return [self.add_point(p) for p in positions]

    def set_point_positions(self, positions: Mapping[int, Vec3Like]) -> None:
        with self.batch():
            for point_id, pos in positions.items():
                self.set_point_position(point_id, pos)

    def clear(self) -> None:
        """Прибрати всі точки. Лічильник id не скидається."""
        if not self._slot_of:
            return
        with self.batch():
            for point_id in list(self._slot_of):
                self.remove_point(point_id)

    # ---------------- Запити ----------------
    def get_point(self, point_id: int) -> Optional[ControlPoint]:
        slot = self._slot_of.get(point_id)
        if slot is None:
            return None
        return self._slots[slot]

    def get_point_position(self, point_id: int) -> Optional[Pt]:
        cp = self.get_point(point_id)
        return cp.position if cp is not None else None

    def get_point_ids(self) -> Set[int]:
        return set(self._slot_of)

    def has_point(self, point_id: int) -> bool:
        return point_id in self._slot_of

    @property
    def version(self) -> int:
        return self._version

    @property
    def next_id(self) -> int:
        return self._next_id

    def __len__(self) -> int:
        return len(self._slot_of)

    def __contains__(self, point_id: object) -> bool:
        return point_id in self._slot_of

    def __iter__(self) -> Iterator[ControlPoint]:
        for point_id in sorted(self._slot_of):
            yield self._slots[self._slot_of[point_id]]

    def snapshot(self) -> PointSnapshot:
        return PointSnapshot(tuple(self), self._version)
