"""
Post-processing utilities for watershed room labels.

This module turns the label image produced by the segmentation pipeline into
room records with polygons, and renders label images and history buffers for
inspection.
"""

import numpy as np
from typing import List, Dict, Any, Iterable, Optional, Tuple
import cv2

from .config import SegmentationConfig
from .history import HistoryEntry

WATERSHED_BOUNDARY = -1
UNKNOWN = 0


def room_labels(labels: np.ndarray, config: Optional[SegmentationConfig] = None) -> List[int]:
    """
    Room label values present in a watershed label image.

    Ridge pixels, unknown pixels and the wall background label are excluded.

    Args:
        labels: int32 label image (H, W)
        config: Segmentation configuration providing the background label

    Returns:
        Sorted list of room labels
    """
    config = config or SegmentationConfig()
    excluded = {WATERSHED_BOUNDARY, UNKNOWN, config.background_label}
    return [int(v) for v in np.unique(labels) if int(v) not in excluded]


def mask_to_polygon(
    mask: np.ndarray,
    epsilon_ratio: float = 0.01,
) -> Optional[np.ndarray]:
    """
    Convert a binary room mask to its outline polygon.

    Only the largest external contour is kept; watershed rooms are a single
    connected region.

    Args:
        mask: Binary mask array (H, W)
        epsilon_ratio: Approximation accuracy as ratio of perimeter

    Returns:
        Nx2 array of (x, y) points, or None for an empty mask
    """
    mask_uint8 = (mask > 0).astype(np.uint8) * 255

    contours, _ = cv2.findContours(
        mask_uint8,
        cv2.RETR_EXTERNAL,
        cv2.CHAIN_APPROX_SIMPLE
    )
    if not contours:
        return None

    contour = max(contours, key=cv2.contourArea)
    perimeter = cv2.arcLength(contour, True)
    approx = cv2.approxPolyDP(contour, epsilon_ratio * perimeter, True)

    return approx.reshape(-1, 2)


def labels_to_rooms(
    labels: np.ndarray,
    config: Optional[SegmentationConfig] = None,
    epsilon_ratio: float = 0.01,
    min_area: float = 0.0,
) -> List[Dict[str, Any]]:
    """
    Convert a watershed label image to room records.

    Args:
        labels: int32 label image (H, W)
        config: Segmentation configuration
        epsilon_ratio: Polygon approximation accuracy
        min_area: Minimum room area in pixels

    Returns:
        List of room dictionaries with label, polygon, bbox and area
    """
    rooms = []

    for label in room_labels(labels, config):
        mask = labels == label
        area = int(np.count_nonzero(mask))
        if area < min_area:
            continue

        polygon = mask_to_polygon(mask, epsilon_ratio=epsilon_ratio)
        if polygon is None:
            continue

        ys, xs = np.nonzero(mask)
        bbox = [int(xs.min()), int(ys.min()), int(xs.max()), int(ys.max())]

        rooms.append({
            "id": len(rooms) + 1,
            "label": label,
            "polygon": polygon.tolist(),
            "bbox": bbox,
            "area_pixels": area,
            "num_vertices": len(polygon)
        })

    return rooms


def label_colors(labels: Iterable[int], seed: int = 42) -> Dict[int, Tuple[int, int, int]]:
    """Stable random color per label."""
    labels = list(labels)
    rng = np.random.RandomState(seed)
    colors = rng.randint(50, 255, size=(len(labels), 3))
    return {label: tuple(map(int, color)) for label, color in zip(labels, colors)}


def visualize_labels(
    image: np.ndarray,
    labels: np.ndarray,
    config: Optional[SegmentationConfig] = None,
    alpha: float = 0.5,
    show_labels: bool = True,
) -> np.ndarray:
    """
    Visualize watershed rooms on a floor plan.

    Args:
        image: Floor plan (H, W) or (H, W, 3)
        labels: int32 label image from the pipeline
        config: Segmentation configuration
        alpha: Transparency of the overlay
        show_labels: Whether to write the room id at each room centroid

    Returns:
        Image (H, W, 3) with room overlays and black ridge lines
    """
    if image.ndim == 2:
        image = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)

    overlay = image.copy()
    rooms = room_labels(labels, config)
    colors = label_colors(rooms)

    for label in rooms:
        overlay[labels == label] = colors[label]

    result = cv2.addWeighted(overlay, alpha, image, 1 - alpha, 0)
    result[labels == WATERSHED_BOUNDARY] = (0, 0, 0)

    if show_labels:
        for room_id, label in enumerate(rooms, start=1):
            ys, xs = np.nonzero(labels == label)
            cx, cy = int(xs.mean()), int(ys.mean())
            text = f"R{room_id}"
            cv2.putText(
                result, text, (cx - 10, cy + 5),
                cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 2
            )
            cv2.putText(
                result, text, (cx - 10, cy + 5),
                cv2.FONT_HERSHEY_SIMPLEX, 0.5, (0, 0, 0), 1
            )

    return result


def to_display_image(buffer: np.ndarray) -> np.ndarray:
    """
    Scale any pipeline buffer to a displayable uint8 image.

    uint8 buffers are returned as they are; everything else is min-max
    scaled to [0, 255].
    """
    if buffer.dtype == np.uint8:
        return buffer
    return cv2.normalize(buffer.astype(np.float32), None, 0, 255, cv2.NORM_MINMAX, cv2.CV_8U)


def history_to_images(history: Iterable[HistoryEntry]) -> List[Tuple[str, np.ndarray]]:
    """Displayable (name, image) pairs for every recorded buffer."""
    return [(entry.name, to_display_image(entry.image)) for entry in history]
