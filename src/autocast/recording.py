from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, TextIO

VERSION = 2
LINE_BREAK = "\r\n"


class EventKind(str, enum.Enum):
    INPUT = "i"
    OUTPUT = "o"
    MARKER = "m"


@dataclass(slots=True)
class Event:
    """One recorded event; ``time`` is seconds since the previous event."""

    time: float
    kind: EventKind
    data: str

    @classmethod
    def input(cls, time: float, data: str) -> "Event":
        return cls(time, EventKind.INPUT, data)

    @classmethod
    def output(cls, time: float, data: str) -> "Event":
        return cls(time, EventKind.OUTPUT, data)

    @classmethod
    def outputln(cls, time: float) -> "Event":
        return cls(time, EventKind.OUTPUT, LINE_BREAK)

    @classmethod
    def marker(cls, time: float, label: str) -> "Event":
        return cls(time, EventKind.MARKER, label)

    def to_json(self) -> str:
        return f"[{_float(self.time)}, {_json(self.kind.value)}, {_json(self.data)}]"


@dataclass(slots=True)
class Header:
    width: int
    height: int
    timestamp: int | None = None
    duration: float | None = None
    idle_time_limit: float | None = None
    command: str | None = None
    title: str | None = None
    env: dict[str, str] = field(default_factory=dict)

    def to_json(self) -> str:
        fields = [
            ("version", str(VERSION)),
            ("width", str(self.width)),
            ("height", str(self.height)),
        ]
        if self.timestamp is not None:
            fields.append(("timestamp", str(int(self.timestamp))))
        if self.duration is not None:
            fields.append(("duration", _float(self.duration)))
        if self.idle_time_limit is not None:
            fields.append(("idle_time_limit", _float(self.idle_time_limit)))
        if self.command is not None:
            fields.append(("command", _json(self.command)))
        if self.title is not None:
            fields.append(("title", _json(self.title)))
        if self.env:
            fields.append(("env", _json(self.env)))
        body = ", ".join(f"{_json(key)}: {value}" for key, value in fields)
        return "{" + body + "}"


@dataclass(slots=True)
class Recording:
    """Header plus delta-timed events, in the order they are written."""

    header: Header
    events: list[Event] = field(default_factory=list)

    @property
    def total_duration(self) -> float:
        return sum(event.time for event in self.events)

    def lines(self) -> Iterable[str]:
        yield self.header.to_json()
        for event in self.events:
            yield event.to_json()

    def write(self, stream: TextIO) -> None:
        for line in self.lines():
            stream.write(line)
            stream.write("\n")
        stream.flush()

    def save(self, path: Path, *, overwrite: bool = False) -> None:
        mode = "w" if overwrite else "x"
        with path.open(mode, encoding="utf-8", newline="\n") as handle:
            self.write(handle)


def _float(value: float) -> str:
    return f"{value:.6f}"


def _json(value: object) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(", ", ": "))
