from __future__ import annotations

import itertools
import logging
import time
from dataclasses import dataclass, field
from typing import Iterator, Sequence

from .encoder import command_events, send_command, send_key
from .errors import AutocastError, InstructionError
from .recording import Event
from .script import (
    ClearInstruction,
    CommandInstruction,
    Instruction,
    InteractiveInstruction,
    Key,
    MarkerInstruction,
    WaitInstruction,
    WaitKey,
)
from .session import DEFAULT_POLL_INTERVAL, ShellSession

logger = logging.getLogger(__name__)

CLEAR_SEQUENCE = "\r\x1b[H\x1b[2J\x1b[3J"


@dataclass(slots=True)
class Fragment:
    """Events produced by a single instruction, timed relative to each other.

    A fragment from a wait instruction carries no events, only ``wait``
    seconds to be added in front of whatever is recorded next.
    """

    events: Iterator[Event] = field(default_factory=lambda: iter(()))
    wait: float = 0.0

    @classmethod
    def of(cls, *events: Event) -> "Fragment":
        return cls(events=iter(events))


class InstructionInterpreter:
    """Execute instructions against a shell session, one fragment each."""

    def __init__(
        self,
        session: ShellSession,
        *,
        prompt: str,
        secondary_prompt: str,
        type_speed: float,
        line_split: str,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self._session = session
        self._prompt = prompt
        self._secondary_prompt = secondary_prompt
        self._type_speed = type_speed
        self._line_split = line_split
        self._poll_interval = poll_interval

    def run_all(self, instructions: Sequence[Instruction]) -> list[Fragment]:
        fragments: list[Fragment] = []
        total = len(instructions)
        for index, instruction in enumerate(instructions):
            logger.info("Instruction %d/%d: %s", index + 1, total, type(instruction).__name__)
            try:
                fragments.append(self.run(instruction))
            except AutocastError as exc:
                raise InstructionError(index, exc) from exc
        return fragments

    def run(self, instruction: Instruction) -> Fragment:
        if isinstance(instruction, CommandInstruction):
            return self._run_command(instruction)
        if isinstance(instruction, InteractiveInstruction):
            return self._run_interactive(instruction)
        if isinstance(instruction, WaitInstruction):
            return Fragment(wait=instruction.duration)
        if isinstance(instruction, MarkerInstruction):
            return Fragment.of(Event.marker(0.0, instruction.label))
        if isinstance(instruction, ClearInstruction):
            return Fragment.of(
                Event.output(self._type_speed, CLEAR_SEQUENCE),
                Event.output(self._type_speed, self._prompt),
            )
        msg = f"Unsupported instruction type: {type(instruction)!r}"
        raise TypeError(msg)

    def _run_command(self, instruction: CommandInstruction) -> Fragment:
        send_command(self._session, instruction.command)
        output = self._session.read_until_prompt()
        if instruction.hidden:
            return Fragment()

        output.append(self._session.new_event(self._prompt))
        type_speed = self._resolve_type_speed(instruction.type_speed)
        typed = command_events(
            instruction.command, type_speed, self._secondary_prompt, self._line_split
        )
        return Fragment(events=itertools.chain(typed, output))

    def _run_interactive(self, instruction: InteractiveInstruction) -> Fragment:
        send_command(self._session, instruction.command)
        type_speed = self._resolve_type_speed(instruction.type_speed)
        output = self._press_keys(instruction.keys, type_speed)
        output.append(self._session.new_event(self._prompt))
        typed = command_events(
            instruction.command, type_speed, self._secondary_prompt, self._line_split
        )
        return Fragment(events=itertools.chain(typed, output))

    def _press_keys(self, keys: Sequence[Key], type_speed: float) -> list[Event]:
        """Send keys one at a time, ``type_speed`` apart, capturing output.

        Output is polled between key presses. The prompt showing up ends the
        instruction early; otherwise the remaining output is read once every
        key has been sent.
        """

        events: list[Event] = []
        pending = iter(keys)
        next_key_at = time.monotonic() + type_speed
        while True:
            wait = max(next_key_at - time.monotonic(), 0.0)
            event, prompt_seen = self._session.read_once(timeout=min(self._poll_interval, wait))
            if event is not None:
                events.append(event)
            if prompt_seen:
                return events
            if time.monotonic() < next_key_at:
                continue

            key = next(pending, None)
            if key is None:
                events.extend(self._session.read_until_prompt())
                return events
            send_key(self._session, key)
            if isinstance(key, WaitKey):
                next_key_at += key.duration
            next_key_at += type_speed

    def _resolve_type_speed(self, override: float | None) -> float:
        return self._type_speed if override is None else override
