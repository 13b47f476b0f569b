from __future__ import annotations

from typing import Iterable

from .interpreter import Fragment
from .recording import Event


def assemble(fragments: Iterable[Fragment], *, prompt: str, type_speed: float) -> list[Event]:
    """Fold per-instruction fragments into one delta-timed event list.

    Time from wait fragments accumulates until some later fragment records
    an event, and is added to that event's delta. The result opens with the
    prompt and closes with a line break ``type_speed`` later; wait time left
    over at the end lands on that final event.
    """

    events = [Event.output(0.0, prompt)]
    wait_debt = 0.0
    for fragment in fragments:
        wait_debt += fragment.wait
        first = next(fragment.events, None)
        if first is None:
            continue
        first.time += wait_debt
        wait_debt = 0.0
        events.append(first)
        events.extend(fragment.events)

    events.append(Event.outputln(type_speed))
    events[-1].time += wait_debt
    return events
