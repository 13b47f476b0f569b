from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .recording import Recording


class AutocastError(Exception):
    """Base class for every failure raised while producing a recording."""


class SpawnError(AutocastError):
    """The shell process or its pseudo-terminal could not be created."""


class ReadTimeout(AutocastError, TimeoutError):
    """The prompt was not observed within the session timeout."""


class PromptTimeout(ReadTimeout):
    """The first prompt never appeared after spawning the shell."""


class ShellExited(AutocastError, EOFError):
    """The shell closed its terminal before printing the prompt."""


class WriteError(AutocastError, OSError):
    """Sending input to the shell failed."""


class QuitTimeout(AutocastError, TimeoutError):
    """The shell did not exit after the quit command.

    All events were captured before shutdown, so the finished recording is
    attached and may still be written.
    """

    def __init__(self, message: str, recording: Recording | None = None) -> None:
        super().__init__(message)
        self.recording = recording


class TerminalSizeUnavailable(AutocastError):
    """Neither the settings nor the invoking terminal provide a size."""


class EncodingError(AutocastError, ValueError):
    """Shell output was not valid UTF-8."""


class ScriptError(AutocastError, ValueError):
    """The script document is well-formed YAML but semantically invalid."""


class InvalidControlCode(ScriptError):
    """A control character does not map to a C0 control code."""


class DurationError(ScriptError):
    """A duration string could not be parsed."""


class InstructionError(AutocastError):
    """Wraps a failure with the position of the instruction that caused it."""

    def __init__(self, index: int, cause: AutocastError) -> None:
        super().__init__(f"error running instruction {index}: {cause}")
        self.index = index
        self.cause = cause
