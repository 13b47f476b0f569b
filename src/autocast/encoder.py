"""Turn commands and keys into simulated keystrokes and shell input.

The typed events describe the pace a viewer sees; they are produced
independently of how quickly the shell really echoes anything.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from .recording import Event
from .script import (
    CharKey,
    Command,
    Control,
    ControlKey,
    Key,
    MultiLine,
    SingleLine,
    StringKey,
    WaitKey,
)
from .session import ShellSession


def type_line(chars: Iterable[str], type_speed: float) -> Iterator[Event]:
    """One event per character, ``type_speed`` apart, then a line break."""

    for char in chars:
        yield Event.output(type_speed, char)
    yield Event.outputln(type_speed)


def command_events(
    command: Command,
    type_speed: float,
    secondary_prompt: str,
    line_split: str,
) -> Iterator[Event]:
    if isinstance(command, SingleLine):
        yield from type_line(command.text, type_speed)
    elif isinstance(command, MultiLine):
        last = len(command.lines) - 1
        for number, line in enumerate(command.lines):
            if number:
                yield Event.output(type_speed, secondary_prompt)
            chars = line + line_split if number < last else line
            yield from type_line(chars, type_speed)
    elif isinstance(command, Control):
        yield from type_line(command.code.caret, type_speed)
    else:  # pragma: no cover
        msg = f"Unsupported command type: {type(command)!r}"
        raise TypeError(msg)


def send_command(session: ShellSession, command: Command) -> None:
    session.reset_clock()
    if isinstance(command, SingleLine):
        session.send_line(command.text)
    elif isinstance(command, MultiLine):
        session.send_line(" ".join(command.lines))
    elif isinstance(command, Control):
        session.send(command.code.byte)
    else:  # pragma: no cover
        msg = f"Unsupported command type: {type(command)!r}"
        raise TypeError(msg)


def send_key(session: ShellSession, key: Key) -> None:
    if isinstance(key, CharKey):
        session.send(key.char.encode("utf-8"))
    elif isinstance(key, StringKey):
        for char in key.text:
            session.send(char.encode("utf-8"))
    elif isinstance(key, ControlKey):
        session.send(key.code.byte)
    elif isinstance(key, WaitKey):
        return
    else:  # pragma: no cover
        msg = f"Unsupported key type: {type(key)!r}"
        raise TypeError(msg)
