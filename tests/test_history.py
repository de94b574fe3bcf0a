from dataclasses import FrozenInstanceError, replace

import numpy as np
import pytest

from roomseg import HISTORY_NAMES, HistoryRecorder, SegmentationConfig


def test_recorder_keeps_order():
    history = HistoryRecorder()
    first = np.zeros((2, 2))
    second = np.ones((2, 2))

    history.add("first", first)
    history.add("second", second)

    assert history.names == ["first", "second"]
    assert len(history) == 2
    assert history.get("second") is second
    with pytest.raises(KeyError):
        history.get("third")


def test_eleven_fixed_history_names():
    assert len(HISTORY_NAMES) == 11
    assert HISTORY_NAMES[0] == "Cornerdet"
    assert HISTORY_NAMES[-1] == "Watershed"


def test_config_is_immutable():
    config = SegmentationConfig()

    with pytest.raises(FrozenInstanceError):
        config.difference_scalar = 1.0

    changed = replace(config, difference_scalar=1.0)
    assert changed.difference_scalar == 1.0
    assert config.difference_scalar == 70.0
    assert config.background_label == 128
    assert config.foreground_label == 200
