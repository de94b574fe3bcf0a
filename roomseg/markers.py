"""
Marker construction for marker-controlled watershed.

Room seeds are found as the "domes" of the distance transform: regions that
rise at least ``difference_scalar`` above their surroundings. They are
isolated with a geodesic dilation that approximates morphological
reconstruction, then turned into labeled contours. Walls form a separate,
flat background layer.
"""

from typing import List, Optional, Tuple

import numpy as np
import cv2

from .config import SegmentationConfig


def geodesic_dilate(
    marker: np.ndarray,
    mask: np.ndarray,
    iterations: int,
) -> np.ndarray:
    """
    Dilate ``marker`` repeatedly while never exceeding ``mask``.

    Args:
        marker: Seed signal (H, W), pixel-wise <= mask
        mask: Reference signal (H, W) bounding the growth
        iterations: Number of 3x3 dilation steps

    Returns:
        Reconstructed signal with the dtype of ``marker``
    """
    kernel = np.ones((3, 3), np.uint8)
    result = np.minimum(marker, mask)

    for _ in range(iterations):
        dilated = cv2.dilate(result, kernel)
        np.minimum(dilated, mask, out=result)

    return result


def extract_markers(
    distance: np.ndarray,
    config: SegmentationConfig,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Locate pixels that are not part of a distance-field dome.

    Args:
        distance: Distance transform (H, W)
        config: Segmentation configuration

    Returns:
        Tuple of (geodesic transform, marker image). The marker image is
        uint8 with 255 wherever ``distance <= geodesic``.
    """
    lowered = cv2.subtract(
        distance, np.full_like(distance, config.difference_scalar)
    )
    geodesic = geodesic_dilate(lowered, distance, config.geodesic_dilate_size)
    markers = cv2.compare(distance, geodesic, cv2.CMP_LE)
    return geodesic, markers


def _contour_labels(count: int, config: SegmentationConfig) -> List[int]:
    # Skip values the canvas and the background layer already use
    reserved = {int(config.black), config.background_label, int(config.white)}
    labels = []
    label = config.foreground_label
    while len(labels) < count:
        if label not in reserved:
            labels.append(label)
        label += 1
    return labels


def build_foreground(
    markers: np.ndarray,
    open_mask: Optional[np.ndarray],
    config: SegmentationConfig,
) -> Tuple[np.ndarray, np.ndarray, int]:
    """
    Turn the marker image into labeled foreground seeds.

    Args:
        markers: Marker image from ``extract_markers``
        open_mask: Boolean (H, W), False where the flooding surface is wall.
            Seeds are cleared there so they never overlap the background layer.
        config: Segmentation configuration

    Returns:
        Tuple of (foreground mask, int32 contour markers, contour count)
    """
    _, foreground = cv2.threshold(
        markers, config.threshold, config.max_value, cv2.THRESH_BINARY_INV
    )
    if open_mask is not None:
        foreground[~open_mask] = 0

    contours, _ = cv2.findContours(
        foreground.copy(), cv2.RETR_TREE, cv2.CHAIN_APPROX_SIMPLE
    )

    white = int(config.white)
    contour_markers = np.full(foreground.shape, white, dtype=np.int32)
    for contour, label in zip(contours, _contour_labels(len(contours), config)):
        cv2.drawContours(contour_markers, [contour], 0, label, cv2.FILLED)

    contour_markers[contour_markers == white] = int(config.black)
    # Filled child contours would paint over holes in their parent
    contour_markers[foreground == 0] = int(config.black)

    return foreground, contour_markers, len(contours)


def build_background(gray: np.ndarray, config: SegmentationConfig) -> np.ndarray:
    """
    Flatten the grayscale plan into a background layer.

    Black (walls) becomes gray, white (floor) becomes black.
    """
    background = gray.copy()
    black = gray == config.black
    white = gray == config.white
    background[black] = config.gray
    background[white] = config.black
    return background


def combine_markers(foreground: np.ndarray, background: np.ndarray) -> np.ndarray:
    """Pixel-wise sum of both marker layers as int32."""
    return foreground.astype(np.int32) + background.astype(np.int32)
