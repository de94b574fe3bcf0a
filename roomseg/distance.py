"""
Grayscale conversion and Euclidean distance transform.
"""

import numpy as np
import cv2


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """
    Convert an image to single-channel 8-bit intensity.

    Args:
        image: Input image (H, W), (H, W, 3) in BGR or (H, W, 4) in BGRA

    Returns:
        New uint8 array (H, W)
    """
    if image.size == 0:
        raise ValueError("Input image has zero area")

    if image.ndim == 3 and image.shape[2] == 3:
        gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    elif image.ndim == 3 and image.shape[2] == 4:
        gray = cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    elif image.ndim == 3 and image.shape[2] == 1:
        gray = image[:, :, 0].copy()
    elif image.ndim == 2:
        gray = image.copy()
    else:
        raise ValueError(f"Unsupported image shape {image.shape}")

    if gray.dtype != np.uint8:
        gray = np.clip(gray, 0, 255).astype(np.uint8)
    return gray


def distance_transform(gray: np.ndarray) -> np.ndarray:
    """
    Precise Euclidean distance of every foreground pixel to the nearest zero pixel.

    Args:
        gray: Single-channel uint8 image, rooms non-zero and walls zero

    Returns:
        float32 array (H, W)
    """
    if gray.size == 0:
        raise ValueError("Input image has zero area")

    return cv2.distanceTransform(gray, cv2.DIST_L2, cv2.DIST_MASK_PRECISE)


def binarize(gray: np.ndarray) -> np.ndarray:
    """Map every non-zero pixel to 255 so floor is exactly white."""
    _, binary = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY)
    return binary
