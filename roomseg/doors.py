"""
Door closing.

A door opening connects two rooms through a gap in the wall. The frame of
that gap usually shows up as four corner points forming a small rectangle
around the door box. Painting that rectangle in the wall color seals the
gap on the flooding surface so the watershed keeps both rooms apart.
"""

import logging
import math
from itertools import combinations
from typing import Iterable, Iterator, List, NamedTuple, Sequence, Tuple

import numpy as np
import cv2

from .config import SegmentationConfig

log = logging.getLogger(__name__)

Point = Tuple[float, float]
Rectangle = Tuple[Point, Point]


class DoorBox(NamedTuple):
    """Axis-aligned door bounding box."""

    x: float
    y: float
    width: float
    height: float


def as_door_boxes(doors: Iterable) -> List[DoorBox]:
    """
    Convert door boxes given as 4-tuples or an (N, 4) array.

    Raises:
        ValueError: If a box does not have exactly four values
    """
    if doors is None:
        return []

    boxes = []
    for door in doors:
        values = [float(v) for v in np.ravel(door)]
        if len(values) != 4:
            raise ValueError(f"Door box needs (x, y, width, height), got {door!r}")
        boxes.append(DoorBox(*values))
    return boxes


def angle_to_x_axis(point1: Point, point2: Point) -> float:
    """
    Angle of the line through two points relative to the horizontal axis.

    Image y grows downwards, hence the sign flip. A vertical line (zero
    horizontal delta, coincident points included) is pi / 2.
    """
    dx = point1[0] - point2[0]
    dy = point1[1] - point2[1]
    if dx == 0:
        return math.pi / 2
    return -math.atan(dy / dx)


def _line_difference(angle1: float, angle2: float) -> float:
    # Lines have no direction: fold into [0, pi)
    return (angle1 - angle2) % math.pi


def is_approximate(angle1: float, angle2: float, tolerance: float) -> bool:
    """True if both line angles agree within ``tolerance``."""
    diff = _line_difference(angle1, angle2)
    return min(diff, math.pi - diff) <= tolerance


def is_perpendicular(angle1: float, angle2: float, tolerance: float) -> bool:
    """True if the lines meet at a right angle within ``tolerance``."""
    diff = _line_difference(angle1, angle2)
    return abs(diff - math.pi / 2) <= tolerance


def select_door_points(
    points: Sequence[Point],
    door: DoorBox,
    expand_ratio: float,
) -> List[Point]:
    """Points strictly inside the door box grown by ``expand_ratio`` per side."""
    pad_x = door.width * expand_ratio
    pad_y = door.height * expand_ratio
    return [
        (x, y)
        for x, y in points
        if door.x - pad_x < x < door.x + door.width + pad_x
        and door.y - pad_y < y < door.y + door.height + pad_y
    ]


def angle_matrix(points: Sequence[Point]) -> np.ndarray:
    """Symmetric (N, N) matrix of pairwise line angles, NaN on the diagonal."""
    n = len(points)
    angles = np.full((n, n), np.nan)
    for j, k in combinations(range(n), 2):
        angles[j, k] = angles[k, j] = angle_to_x_axis(points[j], points[k])
    return angles


def _inner_pairs(j: int, k: int, n: int) -> Iterator[Tuple[int, int]]:
    for inner_j in range(j + 1, n):
        if inner_j == k:
            continue
        for inner_k in range(inner_j + 1, n):
            if inner_k == k:
                continue
            yield inner_j, inner_k


def _is_door_frame(
    points: Sequence[Point],
    angles: np.ndarray,
    quad: Tuple[int, int, int, int],
    door: DoorBox,
    config: SegmentationConfig,
) -> bool:
    j, k, inner_j, inner_k = quad
    eps = config.door_angle_tolerance
    max_width = config.door_size_factor * door.width
    max_height = config.door_size_factor * door.height

    if not is_approximate(angles[j, k], angles[inner_j, inner_k], eps):
        return False

    width = abs(points[j][0] - points[k][0])

    if is_approximate(angles[j, inner_j], angles[k, inner_k], eps) and is_perpendicular(
        angles[j, inner_j], angles[j, k], eps
    ):
        height = abs(points[j][1] - points[inner_j][1])
        return width < max_width and height < max_height

    if is_approximate(angles[j, inner_k], angles[k, inner_j], eps) and is_perpendicular(
        angles[j, inner_k], angles[j, k], eps
    ):
        height = abs(points[j][1] - points[inner_k][1])
        return width < max_width and height < max_height

    return False


def find_door_rectangles(
    points: Sequence[Point],
    angles: np.ndarray,
    door: DoorBox,
    config: SegmentationConfig,
) -> List[Rectangle]:
    """
    Search the candidate points for quadruples forming a door frame.

    Quadruples ``(j, k, inner_j, inner_k)`` are visited in lexicographic
    order. For every ``(j, k)`` pair only the first matching quadruple is
    kept; it yields the rectangle spanned by ``points[j]`` and
    ``points[inner_k]``. Identical rectangles are reported once.

    Args:
        points: Candidate points around one door
        angles: Output of ``angle_matrix(points)``
        door: The door box, used for the size plausibility gate
        config: Segmentation configuration

    Returns:
        List of (corner, opposite corner) rectangles in discovery order
    """
    n = len(points)
    rectangles: List[Rectangle] = []
    if n < 4:
        return rectangles

    for j, k in combinations(range(n), 2):
        for inner_j, inner_k in _inner_pairs(j, k, n):
            if _is_door_frame(points, angles, (j, k, inner_j, inner_k), door, config):
                rectangle = (tuple(points[j]), tuple(points[inner_k]))
                if rectangle not in rectangles:
                    rectangles.append(rectangle)
                break

    return rectangles


def close_doors(
    working: np.ndarray,
    points: Sequence[Point],
    doors: Iterable[DoorBox],
    config: SegmentationConfig,
) -> Tuple[np.ndarray, List[Rectangle]]:
    """
    Paint every detected door frame in the wall color.

    Args:
        working: 3-channel uint8 flooding surface; left untouched
        points: Sparse corner points of the whole plan
        doors: Door boxes
        config: Segmentation configuration

    Returns:
        Tuple of (door-closed copy of ``working``, painted rectangles)
    """
    closed = working.copy()
    painted: List[Rectangle] = []
    color = (config.black, config.black, config.black)

    for door in doors:
        door_points = select_door_points(points, door, config.door_expand_ratio)
        if len(door_points) < 4:
            log.debug("Door %s: only %d corner points, left open", door, len(door_points))
            continue

        rectangles = find_door_rectangles(
            door_points, angle_matrix(door_points), door, config
        )
        if not rectangles:
            log.debug("Door %s: no door frame found, left open", door)

        for first, second in rectangles:
            cv2.rectangle(
                closed,
                (int(round(first[0])), int(round(first[1]))),
                (int(round(second[0])), int(round(second[1]))),
                color,
                cv2.FILLED,
            )
        painted.extend(rectangles)

    return closed, painted
