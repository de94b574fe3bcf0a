"""Shared synthetic floor plans."""

from dataclasses import replace

import numpy as np
import pytest

from roomseg import SegmentationConfig

# Two 40x40 rooms joined by a 16 px opening in a 10 px wall
DOOR = (50, 22, 10, 16)
JAMBS = [(50.0, 22.0), (50.0, 37.0), (59.0, 22.0), (59.0, 37.0)]


def make_two_room_plan(with_gap: bool = True) -> np.ndarray:
    plan = np.zeros((60, 110), dtype=np.uint8)
    plan[10:50, 10:50] = 255
    plan[10:50, 60:100] = 255
    if with_gap:
        plan[22:38, 50:60] = 255
    return plan


def make_square_plan(size: int = 40, margin: int = 10) -> np.ndarray:
    plan = np.zeros((size, size), dtype=np.uint8)
    plan[margin:size - margin, margin:size - margin] = 255
    return plan


@pytest.fixture
def two_room_plan():
    return make_two_room_plan()


@pytest.fixture
def config():
    """Small plans need a lower dome height than full-size drawings."""
    return replace(SegmentationConfig(), difference_scalar=15.0, geodesic_dilate_size=60)
