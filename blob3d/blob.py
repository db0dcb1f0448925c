from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Mapping, Optional, Sequence, Set, Tuple

from .geom import Pt, Color, Vec3Like, as_pt, bounding_sphere, centroid
from .points import ControlPoint, ControlPointStore
from .delaunay import Tetrahedron, SUPER_MARGIN
from .surface import Face
from .assembly import MeshBuffers
from .pipeline import MeshSnapshot, recompute

logger = logging.getLogger(__name__)


class RenderMode(Enum):
    SOLID = "solid"                  # суцільна поверхня
    WIREFRAME = "wireframe"          # лише ребра
    SOLID_WITH_WIRE = "solid_wire"   # поверхня + ребра поверх
    TRANSPARENT = "transparent"      # з альфа-змішуванням


@dataclass
class BlobConfig:
    color: Tuple[float, float, float] = (1.0, 1.0, 1.0)
    alpha: float = 1.0
    smooth_normals: bool = True
    auto_retetrahedralize: bool = True
    render_mode: RenderMode = RenderMode.SOLID
    wireframe_color: Color = (0.1, 0.1, 0.1, 1.0)
    super_margin: float = SUPER_MARGIN
    backend: str = "internal"
    origin: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    @property
    def point_color(self) -> Color:
        r, g, b = self.color
        return (r, g, b, self.alpha)


class DelaunayBlob:
    """
    Деформовний «блоб»: керуючі точки зі стабільними id + кеш останнього MeshSnapshot.

    Будь-яка мутація точок позначає меш брудним. Читання (get_tetrahedra,
    get_surface_faces, get_mesh) перераховує його ліниво, але лише якщо увімкнено
    auto-retetrahedralize; інакше повертається останній знімок, доки не
    викликано retetrahedralize(). Сам перерахунок — чиста функція recompute().
    """

    def __init__(self, config: Optional[BlobConfig] = None):
        self.config = config or BlobConfig()
        self.store = ControlPointStore(self.config.point_color)
        self.store.subscribe(self._on_points_changed)
        self._mesh = MeshSnapshot()
        self._dirty = True
        self._dirty_listeners: List[Callable[["DelaunayBlob"], None]] = []

    # ---------------- брудний прапорець ----------------
    def _on_points_changed(self, store: ControlPointStore) -> None:
        self.mark_dirty()

    def mark_dirty(self) -> None:
        self._dirty = True
        for listener in list(self._dirty_listeners):
            listener(self)

    def on_dirty(self, listener: Callable[["DelaunayBlob"], None]) -> None:
        """Підписка на кожну позначку «меш застарів» (напр. щоб запланувати перерахунок)."""
        self._dirty_listeners.append(listener)

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    # ---------------- точки ----------------
    def add_point(self, position: Vec3Like) -> int:
        return self.store.add_point(position)

    def add_point_with_id(self, point_id: int, position: Vec3Like) -> bool:
        return self.store.add_point_with_id(point_id, position)

    def remove_point(self, point_id: int) -> bool:
        return self.store.remove_point(point_id)

    def set_point_position(self, point_id: int, position: Vec3Like) -> None:
        self.store.set_point_position(point_id, position)

    def set_point_state(self, point_id: int, position: Vec3Like, velocity: Vec3Like) -> None:
        self.store.set_point_state(point_id, position, velocity)

    def set_point_color(self, point_id: int, color: Sequence[float]) -> None:
        self.store.set_point_color(point_id, color)

    def get_point_position(self, point_id: int) -> Optional[Pt]:
        return self.store.get_point_position(point_id)

    def get_point(self, point_id: int) -> Optional[ControlPoint]:
        return self.store.get_point(point_id)

    def get_point_ids(self) -> Set[int]:
        return self.store.get_point_ids()

    def get_point_count(self) -> int:
        return len(self.store)

    def has_point(self, point_id: int) -> bool:
        return self.store.has_point(point_id)

    def add_points(self, positions: Sequence[Vec3Like]) -> List[int]:
        return self.store.add_points(positions)

    def set_point_positions(self, positions: Mapping[int, Vec3Like]) -> None:
        self.store.set_point_positions(positions)

    def batch(self):
        return self.store.batch()

    def clear(self) -> None:
        self.store.clear()
        self._mesh = MeshSnapshot(points=self.store.snapshot(),
                                  buffers=MeshBuffers.empty(self.config.smooth_normals))

    # ---------------- тетраедралізація ----------------
    def retetrahedralize(self) -> MeshSnapshot:
        """Примусовий перерахунок (незалежно від auto-retetrahedralize)."""
        self._mesh = recompute(
            self.store.snapshot(),
            smooth_normals=self.config.smooth_normals,
            backend=self.config.backend,
            margin=self.config.super_margin,
        )
        self._dirty = False
        return self._mesh

    def set_auto_retetrahedralize(self, enable: bool) -> None:
        self.config.auto_retetrahedralize = enable

    @property
    def auto_retetrahedralize(self) -> bool:
        return self.config.auto_retetrahedralize

    def mesh_snapshot(self) -> MeshSnapshot:
        if self._dirty:
            if self.config.auto_retetrahedralize:
                return self.retetrahedralize()
            logger.debug("auto-retetrahedralize is off, serving mesh v%d", self._mesh.version)
        return self._mesh

    def get_tetrahedra(self) -> Tuple[Tetrahedron, ...]:
        return self.mesh_snapshot().tetrahedra

    def get_surface_faces(self) -> Tuple[Face, ...]:
        return self.mesh_snapshot().faces

    def get_mesh(self) -> MeshBuffers:
        return self.mesh_snapshot().buffers

    # ---------------- рендер-параметри ----------------
    def set_smooth_normals(self, smooth: bool) -> None:
        self.config.smooth_normals = smooth
        self.mark_dirty()

    def set_render_mode(self, mode: RenderMode) -> None:
        self.config.render_mode = mode
        self.mark_dirty()

    def set_wireframe_color(self, color: Color) -> None:
        self.config.wireframe_color = color

    def set_alpha(self, alpha: float) -> None:
        # впливає лише на колір нових точок
        self.config.alpha = alpha
        self.store.default_color = self.config.point_color

    def set_color(self, r: float, g: float, b: float) -> None:
        self.config.color = (r, g, b)
        self.store.default_color = self.config.point_color

    # ---------------- скалярні підсумки ----------------
    def get_centroid(self) -> Pt:
        if not len(self.store):
            return as_pt(self.config.origin)
        return centroid(cp.position for cp in self.store)

    def get_bounding_radius(self) -> float:
        if not len(self.store):
            return 0.0
        return bounding_sphere(cp.position for cp in self.store)[1]

    def __len__(self) -> int:
        return len(self.store)

    def __repr__(self) -> str:
        return (f"DelaunayBlob(points={len(self.store)}, tetrahedra={len(self._mesh.tetrahedra)}, "
                f"faces={len(self._mesh.faces)}, dirty={self._dirty})")
