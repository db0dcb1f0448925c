# examples/demo_blob.py
from __future__ import annotations

import logging
import math
import random

from blob3d import DelaunayBlob, BlobConfig, RenderMode
from blob3d.geom import Pt, add, sub, scale, norm, normalize
from blob3d.surface import validate_surface
from blob3d.delaunay import validate_tetrahedra

MAX_SPEED = 6.0
MAX_FORCE = 3.0
PERCEPTION_RADIUS = 8.0
SEPARATION_RADIUS = 2.0


def _clamp(v: Pt, limit: float) -> Pt:
    n = norm(v)
    return scale(v, limit / n) if n > limit else v


def random_in_sphere(rng: random.Random, radius: float, center: Pt) -> Pt:
    """Рівномірна точка всередині кулі (rejection sampling)."""
    while True:
        p = Pt(rng.uniform(-1, 1), rng.uniform(-1, 1), rng.uniform(-1, 1))
        if norm(p) <= 1.0:
            return add(center, scale(p, radius))


class BlobBoid:
    """Простий boid, що керує однією керуючою точкою блоба (cohesion/alignment/separation)."""

    def __init__(self, blob: DelaunayBlob, point_id: int, velocity: Pt):
        self.blob = blob
        self.point_id = point_id
        self.velocity = velocity
        self.blob_center = Pt(0.0, 5.0, 0.0)
        self.max_radius = 10.0

    @property
    def position(self) -> Pt:
        return self.blob.get_point_position(self.point_id)

    def update(self, flock: list["BlobBoid"], t: float, dt: float) -> None:
        me = self.position
        cohesion = alignment = separation = Pt(0.0, 0.0, 0.0)
        n_near = n_sep = 0
        for other in flock:
            if other is self:
                continue
            d = norm(sub(other.position, me))
            if 0.001 < d < PERCEPTION_RADIUS:
                cohesion = add(cohesion, other.position)
                alignment = add(alignment, other.velocity)
                n_near += 1
                if d < SEPARATION_RADIUS:
                    separation = add(separation, scale(sub(me, other.position), 1.0 / (d * d)))
                    n_sep += 1

        steer = Pt(0.0, 0.0, 0.0)
        if n_near:
            to_center = sub(scale(cohesion, 1.0 / n_near), me)
            steer = add(steer, scale(sub(scale(normalize(to_center), MAX_SPEED), self.velocity), 0.8))
            steer = add(steer, scale(sub(scale(normalize(alignment), MAX_SPEED), self.velocity), 0.5))
        if n_sep:
            steer = add(steer, scale(sub(scale(normalize(separation), MAX_SPEED), self.velocity), 2.5))

        # тягнемо назад, якщо точка відлетіла від центру блоба
        back = sub(self.blob_center, me)
        dist = norm(back)
        if dist > self.max_radius:
            steer = add(steer, scale(normalize(back), (dist - self.max_radius) * 1.3))

        k = self.point_id
        steer = add(steer, Pt(math.sin(t*0.7 + k*0.3) * 0.5,
                              math.cos(t*0.5 + k*0.5) * 0.3,
                              math.sin(t*0.6 + k*0.7) * 0.5))
        steer = _clamp(steer, MAX_FORCE)

        self.velocity = _clamp(add(self.velocity, scale(steer, dt)), MAX_SPEED)
        new_pos = add(me, scale(self.velocity, dt))
        self.blob.set_point_state(self.point_id, new_pos, self.velocity)

        # колір від швидкості: повільні сині, швидкі помаранчеві
        s = norm(self.velocity) / MAX_SPEED
        slow, fast = (0.2, 0.4, 0.8, 0.8), (1.0, 0.4, 0.1, 0.9)
        self.blob.set_point_color(self.point_id, tuple(a + (b - a) * s for a, b in zip(slow, fast)))


def main(num_points: int = 200, steps: int = 20, dt: float = 1.0 / 30.0) -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    log = logging.getLogger("demo_blob")

    rng = random.Random(42)
    blob = DelaunayBlob(BlobConfig(color=(0.3, 0.5, 0.9), alpha=0.85,
                                   render_mode=RenderMode.SOLID_WITH_WIRE))
    center = Pt(0.0, 5.0, 0.0)

    # засіваємо одним пакетом: одне сповіщення на всі точки
    ids = blob.add_points([random_in_sphere(rng, 5.0, center) for _ in range(num_points)])
    flock = [BlobBoid(blob, pid, Pt(rng.uniform(-5, 5) * 5.0, 0.0, rng.uniform(-5, 5) * 0.5)) for pid in ids]

    mesh = blob.retetrahedralize()
    log.info("initial: %d tetrahedra, %d surface faces", len(mesh.tetrahedra), len(mesh.faces))

    for step in range(steps):
        t = step * dt
        with blob.batch():
            for boid in flock:
                boid.update(flock, t, dt)
        buffers = blob.get_mesh()
        log.info("step %d: %d vertices, %d triangles, radius %.2f",
                 step, buffers.vertex_count, buffers.index_count // 3, blob.get_bounding_radius())

    mesh = blob.mesh_snapshot()
    log.info("surface: %s", {k: v for k, v in validate_surface(mesh.faces).items()
                             if k in ("faces", "unique_vertices", "edges", "euler")})
    report = validate_tetrahedra(mesh.tetrahedra, mesh.points.positions())
    log.info("delaunay violations: %d", len(report["delaunay_violations"]))

    mesh.write_boundary_off("blob_boundary.off")
    mesh.write_volume_vtk("blob_volume.vtk")
    log.info("Wrote blob_boundary.off, blob_volume.vtk")


if __name__ == "__main__":
    main()
