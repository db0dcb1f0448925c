import random

import pytest

from blob3d.geom import Pt


def sphere_points(n, radius=5.0, seed=0, center=(0.0, 0.0, 0.0)):
    rng = random.Random(seed)
    cx, cy, cz = center
    out = []
    while len(out) < n:
        x, y, z = rng.uniform(-1, 1), rng.uniform(-1, 1), rng.uniform(-1, 1)
        if x * x + y * y + z * z <= 1.0:
            out.append(Pt(cx + x * radius, cy + y * radius, cz + z * radius))
    return out


@pytest.fixture
def unit_tet():
    return [Pt(0, 0, 0), Pt(1, 0, 0), Pt(0, 1, 0), Pt(0, 0, 1)]


@pytest.fixture
def cloud_30():
    return sphere_points(30, seed=7)


@pytest.fixture
def blob_cloud_200():
    return sphere_points(200, radius=5.0, seed=2024)
