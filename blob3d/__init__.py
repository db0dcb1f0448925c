"""
blob3d — інкрементальна 3D Делоне-тетраедралізація для деформовного «блоба» (Py 3.10+).
Керуючі точки зі стабільними id -> Bowyer–Watson -> граничні грані -> вершинні/індексні буфери.
"""

__version__ = "0.2.0"

from blob3d.geom import Pt, EPS, centroid
from blob3d.predicates import orient3d, circumsphere, in_circumsphere
from blob3d.points import ControlPoint, ControlPointStore, PointSnapshot
from blob3d.delaunay import (
    VertexKind, VertexRef, Tetrahedron, BowyerWatson,
    build_super_tetrahedron, tetrahedralize, validate_tetrahedra,
)
from blob3d.surface import Face, extract_surface_faces, euler_characteristic, validate_surface
from blob3d.assembly import MeshBuffers, assemble_mesh
from blob3d.pipeline import MeshSnapshot, recompute
from blob3d.blob import BlobConfig, DelaunayBlob, RenderMode

__all__ = [
    "Pt", "EPS", "centroid",
    "orient3d", "circumsphere", "in_circumsphere",
    "ControlPoint", "ControlPointStore", "PointSnapshot",
    "VertexKind", "VertexRef", "Tetrahedron", "BowyerWatson",
    "build_super_tetrahedron", "tetrahedralize", "validate_tetrahedra",
    "Face", "extract_surface_faces", "euler_characteristic", "validate_surface",
    "MeshBuffers", "assemble_mesh",
    "MeshSnapshot", "recompute",
    "BlobConfig", "DelaunayBlob", "RenderMode",
    "__version__",
]
