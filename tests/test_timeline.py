from __future__ import annotations

import itertools

import pytest

from autocast import Event, EventKind, Fragment, assemble


def _cumulative(events: list[Event]) -> list[float]:
    return list(itertools.accumulate(event.time for event in events))


def test_empty_script_has_prompt_and_line_break() -> None:
    events = assemble([], prompt="$ ", type_speed=0.1)
    assert [(event.time, event.data) for event in events] == [(0.0, "$ "), (0.1, "\r\n")]


def test_wait_debt_is_added_to_next_event() -> None:
    fragments = [Fragment(wait=1.5), Fragment(wait=0.25), Fragment.of(Event.marker(0.0, "x"))]
    events = assemble(fragments, prompt="$ ", type_speed=0.1)

    marker = events[1]
    assert marker.kind is EventKind.MARKER
    assert marker.time == pytest.approx(1.75)
    assert events[-1].time == pytest.approx(0.1)


def test_wait_debt_survives_fragments_without_events() -> None:
    fragments = [Fragment(wait=1.0), Fragment(), Fragment.of(Event.output(0.2, "a"))]
    events = assemble(fragments, prompt="$ ", type_speed=0.1)
    assert events[1].data == "a"
    assert events[1].time == pytest.approx(1.2)


def test_only_first_event_of_fragment_carries_debt() -> None:
    fragments = [
        Fragment(wait=2.0),
        Fragment.of(Event.output(0.1, "a"), Event.output(0.1, "b")),
    ]
    events = assemble(fragments, prompt="$ ", type_speed=0.1)
    assert [event.time for event in events[1:3]] == [pytest.approx(2.1), pytest.approx(0.1)]


def test_trailing_wait_lands_on_final_event() -> None:
    fragments = [Fragment.of(Event.marker(0.0, "end")), Fragment(wait=3.0)]
    events = assemble(fragments, prompt="$ ", type_speed=0.1)
    assert events[-1].data == "\r\n"
    assert events[-1].time == pytest.approx(3.1)


def test_times_stay_deltas_and_cumulative_time_is_monotonic() -> None:
    fragments = [
        Fragment.of(Event.output(0.1, "a"), Event.output(0.3, "b")),
        Fragment(wait=1.0),
        Fragment.of(Event.output(0.2, "c")),
    ]
    events = assemble(fragments, prompt="$ ", type_speed=0.1)

    assert all(event.time >= 0 for event in events)
    assert [event.time for event in events] == [
        0.0,
        pytest.approx(0.1),
        pytest.approx(0.3),
        pytest.approx(1.2),
        pytest.approx(0.1),
    ]
    totals = _cumulative(events)
    assert totals == sorted(totals)
    assert totals[-1] == pytest.approx(1.7)
