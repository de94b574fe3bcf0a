"""
Harris corner extraction and point sparsification.
"""

import logging
from typing import List, Sequence, Tuple

import numpy as np
import cv2
from sklearn.cluster import DBSCAN

from .config import SegmentationConfig

log = logging.getLogger(__name__)

Point = Tuple[float, float]


def harris_response(gray: np.ndarray, config: SegmentationConfig) -> np.ndarray:
    """Raw Harris corner response as float32 (H, W)."""
    return cv2.cornerHarris(
        gray, config.block_size, config.aperture_size, config.harris_k
    )


def normalize_response(
    response: np.ndarray,
    config: SegmentationConfig,
) -> np.ndarray:
    """Min-max normalize a corner response to [alpha, beta] as float32."""
    return cv2.normalize(
        response,
        None,
        config.normalize_alpha,
        config.normalize_beta,
        cv2.NORM_MINMAX,
        cv2.CV_32F,
    )


def threshold_points(normalized: np.ndarray, threshold: float) -> List[Point]:
    """
    Collect every pixel whose normalized response exceeds ``threshold``.

    Points are returned as (x, y) in row-major scan order.
    """
    ys, xs = np.nonzero(normalized > threshold)
    return [(float(x), float(y)) for x, y in zip(xs, ys)]


def sparse_points(points: Sequence[Point], radius: float) -> List[Point]:
    """
    Collapse clusters of nearby points into their centroids.

    Two points closer than or equal to ``radius`` end up in the same cluster,
    and clusters chain (DBSCAN with one sample per core point is single
    linkage), so the result only depends on the set of input points, not on
    their order.

    Args:
        points: Candidate (x, y) points
        radius: Linking distance

    Returns:
        Cluster centroids sorted by (x, y)
    """
    if len(points) == 0:
        return []

    coords = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    cluster_labels = DBSCAN(eps=radius, min_samples=1).fit_predict(coords)

    centroids = []
    for label in np.unique(cluster_labels):
        center = coords[cluster_labels == label].mean(axis=0)
        centroids.append((float(center[0]), float(center[1])))

    return sorted(centroids)


def detect_corners(
    gray: np.ndarray,
    config: SegmentationConfig,
) -> Tuple[np.ndarray, np.ndarray, List[Point]]:
    """
    Detect sparse corner points of a floor plan.

    Args:
        gray: Single-channel uint8 floor plan
        config: Segmentation configuration

    Returns:
        Tuple of (raw response, BGR visualization of the normalized response
        with the sparse points circled, sparse points)
    """
    response = harris_response(gray, config)
    normalized = normalize_response(response, config)

    points = threshold_points(normalized, config.corner_threshold)
    log.debug("Found %d corner candidates", len(points))

    sparse = sparse_points(points, config.sparse_radius)
    log.debug("Sparsed corner candidates to %d points", len(sparse))

    scaled = cv2.cvtColor(cv2.convertScaleAbs(normalized), cv2.COLOR_GRAY2BGR)
    red = (config.black, config.black, config.white)
    for x, y in sparse:
        cv2.circle(scaled, (int(round(x)), int(round(y))), config.marker_radius, red)

    return response, scaled, sparse
