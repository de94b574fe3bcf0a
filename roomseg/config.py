"""
Configuration for the watershed room segmentation pipeline.

All tunables live in one immutable dataclass so callers (and tests) can
derive variants with ``dataclasses.replace`` instead of touching module state.
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class SegmentationConfig:
    """Configuration for room segmentation."""

    # Colors
    black: float = 0.0
    gray: float = 128.0
    light_gray: float = 200.0
    white: float = 255.0

    # Marker inversion threshold
    threshold: float = 128.0
    max_value: float = 255.0

    # Geodesic marker extraction
    difference_scalar: float = 70.0
    geodesic_dilate_size: int = 60

    # Harris corner detection
    block_size: int = 3
    aperture_size: int = 5
    harris_k: float = 0.04
    normalize_alpha: float = 0.0
    normalize_beta: float = 255.0
    corner_threshold: float = 170.0

    # Sparse points
    sparse_radius: float = 2.0
    marker_radius: int = 8

    # Door closing
    door_angle_tolerance: float = 2 * math.pi / 180
    door_expand_ratio: float = 0.25
    door_size_factor: float = 1.25

    @property
    def background_label(self) -> int:
        """Label the background layer assigns to walls."""
        return int(self.gray)

    @property
    def foreground_label(self) -> int:
        """First label handed out to foreground contours."""
        return int(self.light_gray)
