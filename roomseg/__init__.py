# Watershed room segmentation for floor plans
from .config import SegmentationConfig
from .history import HistoryEntry, HistoryRecorder, HISTORY_NAMES
from .doors import DoorBox
from .postprocessing import (
    room_labels,
    labels_to_rooms,
    visualize_labels,
    history_to_images,
)
from .segmentation import (
    DOOR_ATTRIBUTE,
    MORPH_ATTRIBUTE,
    FloorplanImage,
    MissingAttributeError,
    RoomSegmenter,
    SegmentationResult,
    segment_rooms,
)

__all__ = [
    "SegmentationConfig",
    "HistoryEntry",
    "HistoryRecorder",
    "HISTORY_NAMES",
    "DoorBox",
    "room_labels",
    "labels_to_rooms",
    "visualize_labels",
    "history_to_images",
    "DOOR_ATTRIBUTE",
    "MORPH_ATTRIBUTE",
    "FloorplanImage",
    "MissingAttributeError",
    "RoomSegmenter",
    "SegmentationResult",
    "segment_rooms",
]
