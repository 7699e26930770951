import numpy as np
import pytest

from planar_homography.geometry.primitives import Point

# Photographed 80 x 60 rectangle and its rectified corners
QUAD_SOURCE = [(148.0, 337.0), (131.0, 516.0), (321.0, 486.0), (332.0, 370.0)]
QUAD_TARGET = [(0.0, 0.0), (0.0, 60.0), (80.0, 60.0), (80.0, 0.0)]

# Well-scaled ground truth used where exact recovery is checked
H_TRUE = np.array([
    [1.2, 0.1, 0.5],
    [-0.2, 0.9, 0.3],
    [0.01, 0.02, 1.0],
])


@pytest.fixture
def quad_points():
    return [Point(*p) for p in QUAD_SOURCE], [Point(*p) for p in QUAD_TARGET]


@pytest.fixture
def h_true():
    return H_TRUE.copy()


def map_point(H, p):
    v = H @ np.array([p.x, p.y, 1.0])
    return Point(v[0] / v[2], v[1] / v[2])
