from __future__ import annotations

from .duration import parse_duration
from .model import (
    ScriptLoader,
    load_script,
    parse_command,
    parse_instruction,
    parse_key,
    parse_settings,
    parse_shell,
)
from .schema import SCRIPT_SCHEMA, validate_script

__all__ = [
    "SCRIPT_SCHEMA",
    "ScriptLoader",
    "load_script",
    "parse_command",
    "parse_duration",
    "parse_instruction",
    "parse_key",
    "parse_settings",
    "parse_shell",
    "validate_script",
]
