# blob3d/surface.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence, Set, Tuple

from .geom import Pt, add, scale, is_finite
from .predicates import outward_normal
from .delaunay import Tetrahedron

FaceKey = Tuple[int, int, int]  # відсортована трійка id вершин грані
UEdge = Tuple[int, int]         # неорієнтоване ребро (min(u,v), max(u,v))


@dataclass(frozen=True, eq=False)
class Face:
    """
    Трикутна гранична грань.
    vertices: id вершин в обході, узгодженому з нормаллю назовні.
    Рівність і хеш — лише за відсортованою трійкою (key), як у facemap.
    """
    vertices: Tuple[int, int, int]
    normal: Pt
    centroid: Pt

    @property
    def key(self) -> FaceKey:
        return tuple(sorted(self.vertices))

    def edges(self) -> Tuple[UEdge, UEdge, UEdge]:
        a, b, c = self.vertices
        return tuple((min(u, v), max(u, v)) for u, v in ((a, b), (b, c), (c, a)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Face):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)


def _tet_faces(t: Tetrahedron) -> Tuple[Tuple[Tuple[int, int, int], int], ...]:
    """Чотири грані тетри разом з індексом протилежної вершини."""
    a, b, c, d = t.vertices
    return (
        ((b, c, d), 0),
        ((a, c, d), 1),
        ((a, b, d), 2),
        ((a, b, c), 3),
    )


def extract_surface_faces(tetrahedra: Sequence[Tetrahedron], positions: Mapping[int, Pt]) -> List[Face]:
    """
    Граничні грані тетра-сітки (face має рівно 1 інцидентну тетру), з нормалями назовні.

    Для кожної грані беремо вихідний (невідсортований) порядок із її тетри,
    нормаль = normalize((p1−p0)×(p2−p0)); якщо вона дивиться на протилежну вершину,
    міняємо обхід і знак нормалі. Результат упорядкований за key.
    """
    if not tetrahedra:
        return []

    facemap: Dict[FaceKey, List[Tuple[int, int]]] = {}  # key -> [(tet_idx, opp_idx), ...]
    for ti, t in enumerate(tetrahedra):
        for tri, opp in _tet_faces(t):
            facemap.setdefault(tuple(sorted(tri)), []).append((ti, opp))

    out: List[Face] = []
    for key in sorted(facemap):
        inc = facemap[key]
        if len(inc) != 1:
            continue
        ti, opp = inc[0]
        t = tetrahedra[ti]
        v0, v1, v2 = _tet_faces(t)[opp][0]
        p0, p1, p2 = positions[v0], positions[v1], positions[v2]
        normal, flip = outward_normal(p0, p1, p2, positions[t.vertices[opp]])
        verts = (v0, v2, v1) if flip else (v0, v1, v2)
        out.append(Face(verts, normal, scale(add(add(p0, p1), p2), 1.0 / 3.0)))
    return out


# ---------- валідація поверхні ----------
def surface_edges(faces: Sequence[Face]) -> Set[UEdge]:
    return {e for f in faces for e in f.edges()}

def euler_characteristic(faces: Sequence[Face]) -> int:
    """V − E + F для граничної поверхні (2 для замкненої поверхні роду 0)."""
    verts = {v for f in faces for v in f.vertices}
    return len(verts) - len(surface_edges(faces)) + len(faces)

def validate_surface(faces: Sequence[Face]) -> dict:
    """
    Перевірка граничної поверхні:
      - кожне неорієнтоване ребро має належати рівно двом граням (замкненість);
      - кожне орієнтоване ребро — рівно одній (узгодженість обходу);
      - нормалі скінченні;
      - ейлерова характеристика.
    Повертає словник із діагностикою (порожні списки = все ок).
    """
    edge_count: Dict[UEdge, int] = {}
    directed: Dict[Tuple[int, int], int] = {}
    for f in faces:
        a, b, c = f.vertices
        for u, v in ((a, b), (b, c), (c, a)):
            key = (min(u, v), max(u, v))
            edge_count[key] = edge_count.get(key, 0) + 1
            directed[(u, v)] = directed.get((u, v), 0) + 1
    bad_edges = [(e, k) for e, k in edge_count.items() if k != 2]
    bad_winding = [e for e, k in directed.items() if k != 1]
    bad_normals = [i for i, f in enumerate(faces) if not is_finite(f.normal)]
    n_verts = len({v for f in faces for v in f.vertices})

    return {
        "faces": len(faces),
        "unique_vertices": n_verts,
        "edges": len(edge_count),
        "bad_edges": bad_edges,
        "bad_winding": bad_winding,
        "bad_normals": bad_normals,
        "euler": n_verts - len(edge_count) + len(faces),
    }
