# blob3d/assembly.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

import numpy as np

from .geom import Pt, ZERO, UP, add, normalize
from .points import ControlPoint
from .surface import Face

VERTEX_STRIDE = 10  # position(3) + normal(3) + color(4)


@dataclass(frozen=True, eq=False)
class MeshBuffers:
    """
    Вершинні та індексні буфери для рендерера.
      positions (N,3) float32, normals (N,3) float32, colors (N,4) float32;
      indices — трикутники (по 3), wire_indices — ребра для GL_LINES (по 2).
    """
    positions: np.ndarray
    normals: np.ndarray
    colors: np.ndarray
    indices: np.ndarray
    wire_indices: np.ndarray
    smooth: bool = True

    @property
    def vertex_count(self) -> int:
        return int(self.positions.shape[0])

    @property
    def index_count(self) -> int:
        return int(self.indices.shape[0])

    @property
    def wire_index_count(self) -> int:
        return int(self.wire_indices.shape[0])

    def is_empty(self) -> bool:
        return self.index_count == 0

    def interleaved(self) -> np.ndarray:
        """(N, 10) float32: [px py pz nx ny nz r g b a] для одного VBO."""
        return np.hstack([self.positions, self.normals, self.colors]).astype(np.float32, copy=False)

    @classmethod
    def empty(cls, smooth: bool = True) -> "MeshBuffers":
        return cls(
            positions=np.zeros((0, 3), dtype=np.float32),
            normals=np.zeros((0, 3), dtype=np.float32),
            colors=np.zeros((0, 4), dtype=np.float32),
            indices=np.zeros(0, dtype=np.uint32),
            wire_indices=np.zeros(0, dtype=np.uint32),
            smooth=smooth,
        )


def _wire_from_triangles(indices: np.ndarray) -> np.ndarray:
    # кожен трикутник (a,b,c) -> (a,b),(b,c),(c,a); дублікати між гранями не прибираємо
    tris = indices.reshape(-1, 3)
    return tris[:, [0, 1, 1, 2, 2, 0]].reshape(-1)


def assemble_smooth(faces: Sequence[Face], points: Iterable[ControlPoint]) -> MeshBuffers:
    """
    Одна вершина на керуючу точку; нормаль = normalize(сума нормалей суміжних граней),
    для точок без граней (внутрішніх) — UP.
    """
    normal_sum: Dict[int, Pt] = {}
    for f in faces:
        for vid in f.vertices:
            normal_sum[vid] = add(normal_sum.get(vid, ZERO), f.normal)

    index_of: Dict[int, int] = {}
    positions: List[Pt] = []
    normals: List[Pt] = []
    colors: List[tuple] = []
    for cp in points:
        index_of[cp.id] = len(positions)
        positions.append(cp.position)
        n = normalize(normal_sum.get(cp.id, ZERO))
        normals.append(n if n != ZERO else UP)
        colors.append(cp.color)

    indices = np.array([index_of[v] for f in faces for v in f.vertices], dtype=np.uint32)
    return MeshBuffers(
        positions=np.array([tuple(p) for p in positions], dtype=np.float32).reshape(-1, 3),
        normals=np.array([tuple(n) for n in normals], dtype=np.float32).reshape(-1, 3),
        colors=np.array(colors, dtype=np.float32).reshape(-1, 4),
        indices=indices,
        wire_indices=_wire_from_triangles(indices),
        smooth=True,
    )


def assemble_flat(faces: Sequence[Face], points: Iterable[ControlPoint]) -> MeshBuffers:
    """Три окремі вершини на грань, усі з нормаллю грані (точне пласке затінення)."""
    by_id = {cp.id: cp for cp in points}
    positions = np.empty((3 * len(faces), 3), dtype=np.float32)
    normals = np.empty((3 * len(faces), 3), dtype=np.float32)
    colors = np.empty((3 * len(faces), 4), dtype=np.float32)
    for fi, f in enumerate(faces):
        for k, vid in enumerate(f.vertices):
            cp = by_id[vid]
            row = 3 * fi + k
            positions[row] = tuple(cp.position)
            normals[row] = tuple(f.normal)
            colors[row] = cp.color
    indices = np.arange(3 * len(faces), dtype=np.uint32)
    return MeshBuffers(positions, normals, colors, indices, _wire_from_triangles(indices), smooth=False)


def assemble_mesh(faces: Sequence[Face], points: Iterable[ControlPoint], smooth: bool = True) -> MeshBuffers:
    if not faces:
        return MeshBuffers.empty(smooth)
    if smooth:
        return assemble_smooth(faces, points)
    return assemble_flat(faces, points)
