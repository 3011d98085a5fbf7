from __future__ import annotations

import pytest

from timer import ANIMATION_TICK, AnimationTimer


def test_interval_from_fps():
    assert AnimationTimer(30).interval_ms == 33
    assert AnimationTimer(60).interval_ms == 17


def test_rejects_non_positive_fps():
    with pytest.raises(ValueError):
        AnimationTimer(0)


def test_start_and_invalidate():
    timer = AnimationTimer(30)
    assert timer.event_type == ANIMATION_TICK
    assert not timer.is_valid
    timer.start()
    assert timer.is_valid
    timer.start()
    assert timer.is_valid
    timer.invalidate()
    assert not timer.is_valid
    timer.invalidate()
    assert not timer.is_valid
