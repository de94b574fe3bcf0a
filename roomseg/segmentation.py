"""
Floorplan room segmentation pipeline.

This module provides a high-level API for splitting a pre-cleaned binary
floor plan into rooms with a marker-controlled watershed, closing door gaps
first so adjoining rooms stay apart, and exporting results as JSON.
"""

import json
import logging
import time
from dataclasses import dataclass, field, asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import numpy as np
import cv2

from . import history as names
from .config import SegmentationConfig
from .corners import Point, detect_corners
from .distance import binarize, distance_transform, to_grayscale
from .doors import Rectangle, as_door_boxes, close_doors
from .history import HistoryRecorder
from .markers import build_background, build_foreground, combine_markers, extract_markers
from .postprocessing import labels_to_rooms, room_labels

log = logging.getLogger(__name__)

MORPH_ATTRIBUTE = "morph"
DOOR_ATTRIBUTE = "doors"


class MissingAttributeError(KeyError):
    """A required input attribute is absent from the image."""


@dataclass
class FloorplanImage:
    """An image together with the attributes earlier processing steps attached."""

    image: Optional[np.ndarray] = None
    attributes: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SegmentationResult:
    """Complete segmentation result for a floor plan."""

    labels: np.ndarray
    history: HistoryRecorder
    room_labels: List[int]
    contour_count: int
    corner_points: List[Point]
    door_rectangles: List[Rectangle]
    image_width: int
    image_height: int
    config: Dict[str, Any]
    timestamp: str

    @property
    def total_rooms(self) -> int:
        return len(self.room_labels)


class RoomSegmenter:
    """
    Watershed room segmentation with door closing.

    Usage:
        segmenter = RoomSegmenter()
        result = segmenter.segment(binary_plan, doors=[(120, 40, 30, 12)])
        segmenter.save_json(result, "rooms.json")
    """

    def __init__(self, config: Optional[SegmentationConfig] = None):
        """
        Initialize the segmenter.

        Args:
            config: Segmentation configuration
        """
        self.config = config or SegmentationConfig()

    @staticmethod
    def _require(image: FloorplanImage, name: str) -> Any:
        if name not in image.attributes or image.attributes[name] is None:
            raise MissingAttributeError(f"Image attribute '{name}' is required")
        return image.attributes[name]

    def run(
        self,
        image: FloorplanImage,
        history: Optional[HistoryRecorder] = None,
    ) -> SegmentationResult:
        """
        Segment a floor plan carrying its inputs as attributes.

        Args:
            image: Image with ``MORPH_ATTRIBUTE`` (binary plan) and
                ``DOOR_ATTRIBUTE`` (door boxes) set
            history: Recorder receiving the intermediate buffers

        Returns:
            SegmentationResult

        Raises:
            MissingAttributeError: If either attribute is missing
        """
        binary = self._require(image, MORPH_ATTRIBUTE)
        doors = self._require(image, DOOR_ATTRIBUTE)
        return self.segment(binary, doors, history)

    def segment(
        self,
        binary: np.ndarray,
        doors: Iterable,
        history: Optional[HistoryRecorder] = None,
    ) -> SegmentationResult:
        """
        Segment a binary floor plan into rooms.

        Args:
            binary: Pre-cleaned plan (H, W) or (H, W, 3), floor white and
                walls black. Never modified.
            doors: Door boxes as (x, y, width, height)
            history: Recorder receiving the intermediate buffers

        Returns:
            SegmentationResult
        """
        config = self.config
        history = history if history is not None else HistoryRecorder()
        door_boxes = as_door_boxes(doors)
        start = time.perf_counter()

        def elapsed() -> str:
            return f"{time.perf_counter() - start:.3f}s"

        gray = binarize(to_grayscale(binary))
        distance = distance_transform(gray)
        log.debug("[%s] distance transform", elapsed())

        geodesic, markers = extract_markers(distance, config)
        log.debug("[%s] geodesic dilation", elapsed())

        response, response_scaled, points = detect_corners(gray, config)
        log.debug("[%s] corner detection: %d points", elapsed(), len(points))

        working = cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)
        closed, rectangles = close_doors(working, points, door_boxes, config)
        closed_gray = to_grayscale(closed)
        log.debug("[%s] closed %d door frames", elapsed(), len(rectangles))

        foreground, contour_markers, contour_count = build_foreground(
            markers, closed_gray != config.black, config
        )
        background = build_background(closed_gray, config)
        summed = combine_markers(contour_markers, background)

        labels = summed.copy()
        cv2.watershed(closed, labels)
        found = room_labels(labels, config)
        log.debug("[%s] watershed", elapsed())

        history.add(names.CORNERS, response)
        history.add(names.CORNERS_SCALED, response_scaled)
        history.add(names.DISTANCE, distance)
        history.add(names.GEODESIC, geodesic)
        history.add(names.MARKERS, markers)
        history.add(names.FOREGROUND, foreground)
        history.add(names.CONTOUR_MARKERS, contour_markers)
        history.add(names.BACKGROUND, background)
        history.add(names.SUMMED, summed)
        history.add(names.DOOR_CLOSING, closed)
        history.add(names.WATERSHED, labels)

        log.info(
            "Segmented %d rooms from %d seeds and %d doors in %s",
            len(found), contour_count, len(door_boxes), elapsed(),
        )

        height, width = gray.shape
        return SegmentationResult(
            labels=labels,
            history=history,
            room_labels=found,
            contour_count=contour_count,
            corner_points=points,
            door_rectangles=rectangles,
            image_width=width,
            image_height=height,
            config=asdict(config),
            timestamp=datetime.now().isoformat(),
        )

    def rooms(self, result: SegmentationResult, **kwargs) -> List[Dict[str, Any]]:
        """Room records (polygon, bbox, area) for a result."""
        return labels_to_rooms(result.labels, self.config, **kwargs)

    def save_json(
        self,
        result: SegmentationResult,
        output_path: Union[str, Path],
        indent: int = 2,
    ) -> None:
        """
        Save a segmentation summary to a JSON file.

        Args:
            result: Segmentation result
            output_path: Path to output JSON file
            indent: JSON indentation
        """
        with open(output_path, 'w') as f:
            json.dump(result_to_dict(result, self.rooms(result)), f, indent=indent)

        log.info("Results saved to: %s", output_path)


def result_to_dict(
    result: SegmentationResult,
    rooms: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """Convert SegmentationResult to a JSON-serializable dictionary."""
    return {
        "image_width": result.image_width,
        "image_height": result.image_height,
        "rooms": rooms if rooms is not None else labels_to_rooms(
            result.labels, SegmentationConfig(**result.config)
        ),
        "door_rectangles": [
            [list(first), list(second)] for first, second in result.door_rectangles
        ],
        "metadata": {
            "total_rooms": result.total_rooms,
            "contour_count": result.contour_count,
            "corner_count": len(result.corner_points),
            "timestamp": result.timestamp,
            "segmentation_config": result.config,
        }
    }


def load_json(json_path: Union[str, Path]) -> Dict[str, Any]:
    """Load a segmentation summary written by ``RoomSegmenter.save_json``."""
    with open(json_path, 'r') as f:
        return json.load(f)


def segment_rooms(
    binary: np.ndarray,
    doors: Iterable = (),
    config: Optional[SegmentationConfig] = None,
    history: Optional[HistoryRecorder] = None,
) -> SegmentationResult:
    """Shortcut for ``RoomSegmenter(config).segment(binary, doors, history)``."""
    return RoomSegmenter(config).segment(binary, doors, history)


def attach_inputs(
    binary: np.ndarray,
    doors: Iterable,
    attributes: Optional[Mapping[str, Any]] = None,
) -> FloorplanImage:
    """Wrap a binary plan and its doors into a FloorplanImage."""
    merged = dict(attributes or {})
    merged[MORPH_ATTRIBUTE] = binary
    merged[DOOR_ATTRIBUTE] = list(doors)
    return FloorplanImage(image=binary, attributes=merged)
