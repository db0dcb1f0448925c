import math

import pytest

from blob3d.geom import Pt, centroid, dot, sub, norm
from blob3d.delaunay import Tetrahedron, tetrahedralize
from blob3d.surface import (
    Face, extract_surface_faces, euler_characteristic, surface_edges, validate_surface,
)

from conftest import sphere_points


def _items(points):
    return [(i, p) for i, p in enumerate(points)]


def test_empty_tetrahedra_give_no_faces():
    assert extract_surface_faces([], {}) == []


def test_single_tetrahedron_has_four_outward_faces(unit_tet):
    items = _items(unit_tet)
    pos = dict(items)
    tets = tetrahedralize(items)
    faces = extract_surface_faces(tets, pos)
    assert len(faces) == 4

    c = centroid(unit_tet)
    for f in faces:
        assert len(set(f.vertices)) == 3
        assert set(f.vertices) <= {0, 1, 2, 3}
        assert norm(f.normal) == pytest.approx(1.0)
        assert dot(f.normal, sub(f.centroid, c)) > 0


def test_winding_matches_normal(unit_tet):
    pos = dict(_items(unit_tet))
    tet = Tetrahedron((3, 2, 1, 0), Pt(0.5, 0.5, 0.5), 0.75)
    for f in extract_surface_faces([tet], pos):
        a, b, c = (pos[v] for v in f.vertices)
        ab, ac = sub(b, a), sub(c, a)
        cr = Pt(ab.y * ac.z - ab.z * ac.y, ab.z * ac.x - ab.x * ac.z, ab.x * ac.y - ab.y * ac.x)
        assert dot(cr, f.normal) > 0


def test_shared_face_is_interior():
    pos = {0: Pt(0, 0, 0), 1: Pt(1, 0, 0), 2: Pt(0, 1, 0), 3: Pt(0, 0, 1), 4: Pt(0, 0, -1)}
    tets = [
        Tetrahedron((0, 1, 2, 3), Pt(0, 0, 0), 1.0),
        Tetrahedron((0, 1, 2, 4), Pt(0, 0, 0), 1.0),
    ]
    faces = extract_surface_faces(tets, pos)
    keys = [f.key for f in faces]
    assert (0, 1, 2) not in keys
    assert len(faces) == 6
    assert keys == sorted(keys)
    assert euler_characteristic(faces) == 2


def test_face_equality_ignores_winding():
    n = Pt(0, 0, 1)
    c = Pt(0, 0, 0)
    assert Face((1, 2, 3), n, c) == Face((3, 2, 1), n, c)
    assert hash(Face((1, 2, 3), n, c)) == hash(Face((2, 3, 1), n, c))
    assert Face((1, 2, 3), n, c).key == (1, 2, 3)
    assert Face((1, 2, 3), n, c) != Face((1, 2, 4), n, c)


def test_random_cloud_surface_is_closed_and_consistent(cloud_30):
    items = _items(cloud_30)
    faces = extract_surface_faces(tetrahedralize(items), dict(items))
    report = validate_surface(faces)
    assert report["faces"] >= 4
    assert report["bad_edges"] == []
    assert report["bad_winding"] == []
    assert report["bad_normals"] == []
    assert report["euler"] == 2


def test_blob_scenario_200_points_euler(blob_cloud_200):
    items = _items(blob_cloud_200)
    faces = extract_surface_faces(tetrahedralize(items), dict(items))
    assert len(faces) >= 4
    verts = {v for f in faces for v in f.vertices}
    assert len(verts) - len(surface_edges(faces)) + len(faces) == 2


def test_normals_point_away_from_cloud_centroid(cloud_30):
    items = _items(cloud_30)
    pos = dict(items)
    faces = extract_surface_faces(tetrahedralize(items), pos)
    c = centroid(cloud_30)
    for f in faces:
        assert dot(f.normal, sub(f.centroid, c)) >= 0


def test_degenerate_face_gets_zero_normal_not_nan():
    pos = {0: Pt(0, 0, 0), 1: Pt(1, 0, 0), 2: Pt(2, 0, 0), 3: Pt(0, 1, 0)}
    faces = extract_surface_faces([Tetrahedron((0, 1, 2, 3), Pt(0, 0, 0), 1e6)], pos)
    assert len(faces) == 4
    for f in faces:
        assert all(math.isfinite(x) for x in f.normal)
