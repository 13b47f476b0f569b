from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .errors import InvalidControlCode

DEFAULT_TYPE_SPEED = 0.1
DEFAULT_PROMPT = "$ "
DEFAULT_SECONDARY_PROMPT = "> "
DEFAULT_TIMEOUT = 30.0

_CONTROL_SYMBOLS = {"@": 0x00, "[": 0x1B, "\\": 0x1C, "]": 0x1D, "^": 0x1E, "_": 0x1F, "?": 0x7F}


@dataclass(frozen=True, slots=True)
class ControlCode:
    """A C0 control character, written in caret notation (``^C``)."""

    value: int

    @classmethod
    def from_char(cls, char: str) -> "ControlCode":
        if len(char) != 1:
            msg = f"expected a single control char, got {char!r}"
            raise InvalidControlCode(msg)
        if char in _CONTROL_SYMBOLS:
            return cls(_CONTROL_SYMBOLS[char])
        if char.isascii() and char.isalpha():
            return cls(ord(char.upper()) - 0x40)
        msg = f"{char!r} is not a valid control char"
        raise InvalidControlCode(msg)

    @property
    def caret(self) -> str:
        if self.value == 0x7F:
            return "^?"
        return "^" + chr(self.value + 0x40)

    @property
    def byte(self) -> bytes:
        return bytes([self.value])


@dataclass(slots=True)
class SingleLine:
    text: str


@dataclass(slots=True)
class MultiLine:
    lines: list[str]


@dataclass(slots=True)
class Control:
    code: ControlCode


Command = SingleLine | MultiLine | Control


@dataclass(slots=True)
class CharKey:
    char: str


@dataclass(slots=True)
class StringKey:
    text: str


@dataclass(slots=True)
class ControlKey:
    code: ControlCode


@dataclass(slots=True)
class WaitKey:
    duration: float


Key = CharKey | StringKey | ControlKey | WaitKey


@dataclass(slots=True)
class CommandInstruction:
    command: Command
    hidden: bool = False
    type_speed: float | None = None


@dataclass(slots=True)
class InteractiveInstruction:
    command: Command
    keys: list[Key]
    type_speed: float | None = None


@dataclass(slots=True)
class WaitInstruction:
    duration: float


@dataclass(slots=True)
class MarkerInstruction:
    label: str


@dataclass(slots=True)
class ClearInstruction:
    pass


Instruction = (
    CommandInstruction
    | InteractiveInstruction
    | WaitInstruction
    | MarkerInstruction
    | ClearInstruction
)


@dataclass(frozen=True, slots=True)
class BashShell:
    pass


@dataclass(frozen=True, slots=True)
class PythonShell:
    pass


@dataclass(frozen=True, slots=True)
class CustomShell:
    program: str
    prompt: str
    line_split: str
    args: tuple[str, ...] = ()
    quit_command: str | None = None
    echo: bool = False


Shell = BashShell | PythonShell | CustomShell


@dataclass(slots=True)
class Settings:
    width: int | None = None
    height: int | None = None
    title: str | None = None
    shell: Shell = field(default_factory=BashShell)
    environment: list[tuple[str, str]] = field(default_factory=list)
    environment_capture: list[str] = field(default_factory=list)
    type_speed: float = DEFAULT_TYPE_SPEED
    prompt: str = DEFAULT_PROMPT
    secondary_prompt: str = DEFAULT_SECONDARY_PROMPT
    timeout: float = DEFAULT_TIMEOUT

    def merge(self, other: "Settings") -> None:
        """Merge ``other`` into these settings, ignoring its defaults.

        Optional values replace when set, lists are extended, and plain
        values replace only when they differ from the default.
        """

        if other.width is not None:
            self.width = other.width
        if other.height is not None:
            self.height = other.height
        if other.title is not None:
            self.title = other.title
        if other.shell != BashShell():
            self.shell = other.shell
        self.environment.extend(other.environment)
        self.environment_capture.extend(other.environment_capture)
        if other.type_speed != DEFAULT_TYPE_SPEED:
            self.type_speed = other.type_speed
        if other.prompt != DEFAULT_PROMPT:
            self.prompt = other.prompt
        if other.secondary_prompt != DEFAULT_SECONDARY_PROMPT:
            self.secondary_prompt = other.secondary_prompt
        if other.timeout != DEFAULT_TIMEOUT:
            self.timeout = other.timeout


@dataclass(slots=True)
class Script:
    instructions: Sequence[Instruction]
    settings: Settings = field(default_factory=Settings)
