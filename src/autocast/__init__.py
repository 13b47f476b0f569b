"""Scripted terminal sessions recorded as asciicast files."""

from .clock import EventClock
from .encoder import command_events, send_command, send_key, type_line
from .errors import (
    AutocastError,
    DurationError,
    EncodingError,
    InstructionError,
    InvalidControlCode,
    PromptTimeout,
    QuitTimeout,
    ReadTimeout,
    ScriptError,
    ShellExited,
    SpawnError,
    TerminalSizeUnavailable,
    WriteError,
)
from .interpreter import Fragment, InstructionInterpreter
from .orchestrator import ExecutionOrchestrator, record
from .pty_runner import PosixPtyProcess, ProcessControl, PtyExitStatus, PtySize, open_process
from .recording import Event, EventKind, Header, Recording
from .script import (
    BashShell,
    CharKey,
    ClearInstruction,
    CommandInstruction,
    Control,
    ControlCode,
    ControlKey,
    CustomShell,
    InteractiveInstruction,
    MarkerInstruction,
    MultiLine,
    PythonShell,
    Script,
    Settings,
    SingleLine,
    StringKey,
    WaitInstruction,
    WaitKey,
)
from .session import ShellSession
from .timeline import assemble

__all__ = [
    "AutocastError",
    "BashShell",
    "CharKey",
    "ClearInstruction",
    "CommandInstruction",
    "Control",
    "ControlCode",
    "ControlKey",
    "CustomShell",
    "DurationError",
    "EncodingError",
    "Event",
    "EventClock",
    "EventKind",
    "ExecutionOrchestrator",
    "Fragment",
    "Header",
    "InstructionError",
    "InstructionInterpreter",
    "InteractiveInstruction",
    "InvalidControlCode",
    "MarkerInstruction",
    "MultiLine",
    "PosixPtyProcess",
    "ProcessControl",
    "PromptTimeout",
    "PtyExitStatus",
    "PtySize",
    "PythonShell",
    "QuitTimeout",
    "ReadTimeout",
    "Recording",
    "Script",
    "ScriptError",
    "Settings",
    "ShellExited",
    "ShellSession",
    "SingleLine",
    "SpawnError",
    "StringKey",
    "TerminalSizeUnavailable",
    "WaitInstruction",
    "WaitKey",
    "WriteError",
    "assemble",
    "command_events",
    "open_process",
    "record",
    "send_command",
    "send_key",
    "type_line",
]
