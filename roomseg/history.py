"""
Diagnostic history of intermediate pipeline buffers.
"""

from dataclasses import dataclass, field
from typing import Iterator, List

import numpy as np


# Fixed names, in recording order
CORNERS = "Cornerdet"
CORNERS_SCALED = "CornerdetScaled"
DISTANCE = "Distance transform"
GEODESIC = "Geodesic transform"
MARKERS = "Markers"
FOREGROUND = "Foreground"
CONTOUR_MARKERS = "Contour markers"
BACKGROUND = "Background"
SUMMED = "Summed up"
DOOR_CLOSING = "Door closing"
WATERSHED = "Watershed"

HISTORY_NAMES = (
    CORNERS,
    CORNERS_SCALED,
    DISTANCE,
    GEODESIC,
    MARKERS,
    FOREGROUND,
    CONTOUR_MARKERS,
    BACKGROUND,
    SUMMED,
    DOOR_CLOSING,
    WATERSHED,
)


@dataclass
class HistoryEntry:
    """A named intermediate buffer."""

    name: str
    image: np.ndarray


@dataclass
class HistoryRecorder:
    """
    Append-only record of named buffers.

    The pipeline only ever calls ``add``; reading entries back is left to
    callers (export, visualization, tests).
    """

    entries: List[HistoryEntry] = field(default_factory=list)

    def add(self, name: str, image: np.ndarray) -> None:
        self.entries.append(HistoryEntry(name=name, image=image))

    @property
    def names(self) -> List[str]:
        return [entry.name for entry in self.entries]

    def get(self, name: str) -> np.ndarray:
        """Return the most recent buffer recorded under ``name``."""
        for entry in reversed(self.entries):
            if entry.name == name:
                return entry.image
        raise KeyError(name)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)
