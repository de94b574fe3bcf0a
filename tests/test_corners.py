import math

import numpy as np

from roomseg import SegmentationConfig
from roomseg.corners import detect_corners, sparse_points, threshold_points

from conftest import make_square_plan


def test_sparse_set_is_returned_unchanged():
    points = [(0.0, 0.0), (0.0, 10.0), (10.0, 0.0), (10.0, 10.0)]

    assert sparse_points(points, 2.0) == points
    assert sparse_points(sparse_points(points, 2.0), 2.0) == points


def test_chained_points_collapse_to_centroid():
    points = [(0.0, 0.0), (1.0, 0.0), (2.0, 0.0), (10.0, 10.0)]

    assert sparse_points(points, 1.5) == [(1.0, 0.0), (10.0, 10.0)]


def test_sparsing_ignores_input_order():
    points = [(3.0, 4.0), (4.0, 4.0), (20.0, 1.0), (21.0, 2.0), (40.0, 40.0), (3.0, 5.0)]

    forward = sparse_points(points, 2.0)
    backward = sparse_points(list(reversed(points)), 2.0)

    assert forward == backward
    assert len(forward) == 3


def test_sparsing_empty_input():
    assert sparse_points([], 2.0) == []


def test_threshold_points_are_x_y():
    normalized = np.zeros((4, 6), dtype=np.float32)
    normalized[1, 4] = 200
    normalized[3, 0] = 171
    normalized[2, 2] = 170

    assert threshold_points(normalized, 170) == [(4.0, 1.0), (0.0, 3.0)]


def test_corners_of_a_square():
    plan = make_square_plan(size=40, margin=10)
    config = SegmentationConfig()

    response, scaled, points = detect_corners(plan, config)

    assert response.dtype == np.float32
    assert response.shape == plan.shape
    assert scaled.shape == plan.shape + (3,)
    assert scaled.dtype == np.uint8
    assert points

    corners = [(9.5, 9.5), (29.5, 9.5), (9.5, 29.5), (29.5, 29.5)]
    for x, y in points:
        assert min(math.hypot(x - cx, y - cy) for cx, cy in corners) < 4
    for cx, cy in corners:
        assert min(math.hypot(x - cx, y - cy) for x, y in points) < 4


def test_blank_image_has_no_corners():
    plan = np.zeros((20, 20), dtype=np.uint8)

    _, _, points = detect_corners(plan, SegmentationConfig())

    assert points == []


def test_points_exactly_radius_apart_merge():
    assert sparse_points([(0.0, 0.0), (2.0, 0.0)], 2.0) == [(1.0, 0.0)]
    assert sparse_points([(0.0, 0.0), (2.5, 0.0)], 2.0) == [(0.0, 0.0), (2.5, 0.0)]
