import math

import numpy as np
import pytest

from roomseg import SegmentationConfig
from roomseg.doors import (
    DoorBox,
    angle_matrix,
    angle_to_x_axis,
    as_door_boxes,
    close_doors,
    find_door_rectangles,
    is_approximate,
    is_perpendicular,
    select_door_points,
)

from conftest import DOOR, JAMBS, make_two_room_plan

EPS = SegmentationConfig().door_angle_tolerance


def test_horizontal_angle_is_zero():
    assert angle_to_x_axis((0, 0), (1, 0)) == 0


def test_vertical_angle_is_defined():
    assert angle_to_x_axis((0, 0), (0, 1)) == pytest.approx(math.pi / 2)
    assert angle_to_x_axis((0, 1), (0, 0)) == pytest.approx(math.pi / 2)
    assert angle_to_x_axis((3, 3), (3, 3)) == pytest.approx(math.pi / 2)


def test_angle_follows_image_orientation():
    # y grows downwards, so a line to the lower right descends
    assert angle_to_x_axis((0, 0), (1, 1)) == pytest.approx(-math.pi / 4)
    assert angle_to_x_axis((0, 1), (1, 0)) == pytest.approx(math.pi / 4)


def test_perpendicular_within_tolerance():
    assert is_perpendicular(0.0, math.pi / 2, EPS)
    assert is_perpendicular(0.3, 0.3 + math.pi / 2, EPS)
    assert is_perpendicular(0.3, 0.3 - math.pi / 2 + EPS / 2, EPS)
    assert not is_perpendicular(0.3, 0.3 + math.pi / 2 + 3 * EPS, EPS)
    assert not is_perpendicular(0.3, 0.3, EPS)


def test_approximate_treats_lines_as_undirected():
    assert is_approximate(0.5, 0.5 + EPS / 2, EPS)
    assert is_approximate(math.pi / 2, -math.pi / 2 + EPS / 2, EPS)
    assert not is_approximate(0.5, 0.5 + 3 * EPS, EPS)
    assert not is_approximate(float("nan"), 0.0, EPS)


def test_door_boxes_from_tuples_and_arrays():
    boxes = as_door_boxes(np.array([[1, 2, 3, 4], [5, 6, 7, 8]]))

    assert boxes == [DoorBox(1, 2, 3, 4), DoorBox(5, 6, 7, 8)]
    assert as_door_boxes(None) == []
    assert as_door_boxes(()) == []
    with pytest.raises(ValueError):
        as_door_boxes([(1, 2, 3)])


def test_select_door_points_uses_expanded_window():
    door = DoorBox(10, 10, 20, 8)
    points = [(5.1, 12.0), (5.0, 12.0), (34.9, 17.9), (20.0, 20.0), (20.0, 7.9)]

    # x in (5, 35), y in (8, 20)
    assert select_door_points(points, door, 0.25) == [(5.1, 12.0), (34.9, 17.9)]


def test_angle_matrix_is_symmetric():
    angles = angle_matrix(JAMBS)

    assert angles.shape == (4, 4)
    assert np.all(np.isnan(np.diag(angles)))
    off_diagonal = ~np.eye(4, dtype=bool)
    assert np.allclose(angles[off_diagonal], angles.T[off_diagonal])


def test_door_frame_is_found():
    door = DoorBox(*DOOR)

    rectangles = find_door_rectangles(JAMBS, angle_matrix(JAMBS), door, SegmentationConfig())

    assert rectangles == [((50.0, 22.0), (59.0, 37.0))]


def test_rectangle_larger_than_door_is_rejected():
    diamond = [(0.0, 10.0), (10.0, 0.0), (10.0, 20.0), (20.0, 10.0)]
    angles = angle_matrix(diamond)
    config = SegmentationConfig()

    assert find_door_rectangles(diamond, angles, DoorBox(0, 0, 4, 4), config) == []
    assert find_door_rectangles(diamond, angles, DoorBox(0, 0, 20, 20), config) == [
        ((0.0, 10.0), (20.0, 10.0))
    ]


def test_skewed_points_are_not_a_frame():
    points = [(50.0, 22.0), (50.0, 37.0), (59.0, 22.0), (62.0, 40.0)]

    rectangles = find_door_rectangles(
        points, angle_matrix(points), DoorBox(*DOOR), SegmentationConfig()
    )

    assert rectangles == []


def test_door_with_three_points_is_left_open():
    working = np.dstack([make_two_room_plan()] * 3)

    closed, painted = close_doors(working, JAMBS[:3], [DoorBox(*DOOR)], SegmentationConfig())

    assert painted == []
    assert np.array_equal(closed, working)


def test_close_doors_paints_gap_black():
    working = np.dstack([make_two_room_plan()] * 3)
    before = working.copy()

    closed, painted = close_doors(working, JAMBS, [DoorBox(*DOOR)], SegmentationConfig())

    assert painted == [((50.0, 22.0), (59.0, 37.0))]
    assert not closed[22:38, 50:60].any()
    assert np.array_equal(working, before)
    assert np.array_equal(closed[:, :50], working[:, :50])
    assert np.array_equal(closed[:, 60:], working[:, 60:])


def test_points_outside_door_window_are_ignored():
    working = np.dstack([make_two_room_plan()] * 3)
    far_door = DoorBox(0, 0, 5, 5)

    closed, painted = close_doors(working, JAMBS, [far_door], SegmentationConfig())

    assert painted == []
    assert np.array_equal(closed, working)
