from __future__ import annotations

import pytest

from autocast import EventClock


class ManualClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def test_stamp_returns_delta_and_advances() -> None:
    source = ManualClock()
    clock = EventClock(source)
    source.now = 100.5
    assert clock.stamp() == pytest.approx(0.5)
    source.now = 100.75
    assert clock.stamp() == pytest.approx(0.25)


def test_since_last_does_not_advance() -> None:
    source = ManualClock()
    clock = EventClock(source)
    source.now = 101.0
    assert clock.since_last() == pytest.approx(1.0)
    assert clock.since_last() == pytest.approx(1.0)
    assert clock.stamp() == pytest.approx(1.0)
    assert clock.since_last() == 0.0


def test_reset_rebases_cursor() -> None:
    source = ManualClock()
    clock = EventClock(source)
    source.now = 105.0
    clock.reset()
    source.now = 105.2
    assert clock.stamp() == pytest.approx(0.2)


def test_deltas_never_negative() -> None:
    source = ManualClock()
    clock = EventClock(source)
    source.now = 99.0
    assert clock.since_last() == 0.0
    assert clock.stamp() == 0.0
