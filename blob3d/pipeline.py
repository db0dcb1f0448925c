from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import List, Mapping, Sequence, Tuple

from .geom import Pt, bounding_sphere, centroid
from .points import PointSnapshot
from .predicates import circumsphere
from .delaunay import Tetrahedron, tetrahedralize, SUPER_MARGIN
from .surface import Face, extract_surface_faces
from .assembly import MeshBuffers, assemble_mesh

logger = logging.getLogger(__name__)

BACKENDS = ("internal", "scipy")


@dataclass(frozen=True, eq=False)
class MeshSnapshot:
    """
    Незмінний результат одного перерахунку — чиста функція від PointSnapshot.
    Його можна безпечно передати іншому потоку (рендеру) як є.
    """
    points: PointSnapshot = field(default_factory=PointSnapshot)
    tetrahedra: Tuple[Tetrahedron, ...] = ()
    faces: Tuple[Face, ...] = ()
    buffers: MeshBuffers = field(default_factory=MeshBuffers.empty)

    @property
    def version(self) -> int:
        return self.points.version

    def is_empty(self) -> bool:
        return not self.faces

    def centroid(self) -> Pt | None:
        if not self.points.points:
            return None
        return centroid(cp.position for cp in self.points)

    def bounding_radius(self) -> float:
        if not self.points.points:
            return 0.0
        return bounding_sphere(cp.position for cp in self.points)[1]

    # ---------- OFF-експорт граничної поверхні ----------
    def boundary_off(self) -> str:
        """OFF для граничної поверхні (вершини — лише ті, що використані гранями)."""
        pos = self.points.positions()
        used = sorted({v for f in self.faces for v in f.vertices})
        remap = {old: i for i, old in enumerate(used)}

        lines = ["OFF", f"{len(used)} {len(self.faces)} 0"]
        for vi in used:
            p = pos[vi]
            lines.append(f"{p.x} {p.y} {p.z}")
        for f in self.faces:
            a, b, c = (remap[v] for v in f.vertices)
            lines.append(f"3 {a} {b} {c}")
        return "\n".join(lines)

    def write_boundary_off(self, path: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.boundary_off())

    # ---------- VTK-експорт усієї тетра-сітки ----------
    def volume_vtk(self) -> str:
        """Legacy VTK (ASCII) UNSTRUCTURED_GRID: усі точки + тетри (cell type 10)."""
        ids = self.points.ids()
        remap = {pid: i for i, pid in enumerate(ids)}
        lines = [
            "# vtk DataFile Version 3.0",
            "blob3d tetrahedralization",
            "ASCII",
            "DATASET UNSTRUCTURED_GRID",
            f"POINTS {len(ids)} double",
        ]
        for cp in self.points:
            p = cp.position
            lines.append(f"{p.x} {p.y} {p.z}")
        n = len(self.tetrahedra)
        lines.append(f"CELLS {n} {5 * n}")
        for t in self.tetrahedra:
            a, b, c, d = (remap[v] for v in t.vertices)
            lines.append(f"4 {a} {b} {c} {d}")
        lines.append(f"CELL_TYPES {n}")
        lines.extend(["10"] * n)
        return "\n".join(lines)

    def write_volume_vtk(self, path: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.volume_vtk())


def _scipy_tetrahedra(ids: Sequence[int], positions: Mapping[int, Pt]) -> List[Tetrahedron]:
    try:
        import numpy as np
        from scipy.spatial import Delaunay, QhullError
    except ImportError as e:
        raise RuntimeError(
            "backend='scipy', але SciPy не встановлено. "
            "Встанови scipy або використай backend='internal'."
        ) from e

    arr = np.array([tuple(positions[i]) for i in ids], dtype=float)
    try:
        dela = Delaunay(arr, qhull_options="QJ")  # QJ = joggle для робастності
    except QhullError as e:
        # напр. усі точки збігаються: порожня сітка, як у внутрішнього backend
        logger.debug("scipy backend: Qhull failed on %d points: %s", len(ids), e)
        return []
    out: List[Tetrahedron] = []
    for simplex in dela.simplices:
        verts = tuple(ids[int(k)] for k in simplex)
        center, r2 = circumsphere(*(positions[v] for v in verts))
        out.append(Tetrahedron(verts, center, r2))
    return out


def recompute(
    snapshot: PointSnapshot,
    *,
    smooth_normals: bool = True,
    backend: str = "internal",
    margin: float = SUPER_MARGIN,
) -> MeshSnapshot:
    """
    Повний пайплайн над незмінним зрізом точок:
      - тетраедралізація (наш Bowyer–Watson або SciPy/Qhull як еталон);
      - граничні грані з нормалями назовні;
      - вершинні/індексні буфери (smooth або flat).
    < 4 точок -> порожній MeshSnapshot (не помилка).
    """
    backend = backend.lower()
    if backend not in BACKENDS:
        raise ValueError(f"Невідомий backend: {backend}")

    if len(snapshot) < 4:
        logger.debug("recompute: %d points, mesh left empty", len(snapshot))
        return MeshSnapshot(points=snapshot, buffers=MeshBuffers.empty(smooth_normals))

    positions = snapshot.positions()
    if backend == "scipy":
        tets = _scipy_tetrahedra(snapshot.ids(), positions)
    else:
        tets = tetrahedralize(snapshot.items(), margin)

    faces = extract_surface_faces(tets, positions)
    buffers = assemble_mesh(faces, snapshot.points, smooth=smooth_normals)
    logger.debug(
        "recompute v%d [%s]: %d points, %d tetrahedra, %d faces, %d vertices",
        snapshot.version, backend, len(snapshot), len(tets), len(faces), buffers.vertex_count,
    )
    return MeshSnapshot(snapshot, tuple(tets), tuple(faces), buffers)
