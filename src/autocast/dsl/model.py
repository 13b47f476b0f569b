from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from ..errors import ScriptError
from ..script import (
    BashShell,
    CharKey,
    ClearInstruction,
    Command,
    CommandInstruction,
    Control,
    ControlCode,
    ControlKey,
    CustomShell,
    Instruction,
    InteractiveInstruction,
    Key,
    MarkerInstruction,
    MultiLine,
    PythonShell,
    Script,
    Settings,
    Shell,
    SingleLine,
    StringKey,
    WaitInstruction,
    WaitKey,
)
from .duration import parse_duration
from .schema import validate_script

logger = logging.getLogger(__name__)

_STRING_KEY_PREFIX = "!Str "
_UNIT_TAGS = frozenset({"Clear", "Bash", "Python"})


class ScriptLoader(yaml.SafeLoader):
    """Safe YAML loader turning ``!Tag value`` into ``{"Tag": value}``."""


def _construct_tagged(loader: ScriptLoader, suffix: str, node: yaml.Node) -> dict[str, Any]:
    if isinstance(node, yaml.MappingNode):
        value: Any = loader.construct_mapping(node, deep=True)
    elif isinstance(node, yaml.SequenceNode):
        value = loader.construct_sequence(node, deep=True)
    else:
        value = loader.construct_scalar(node)
        if suffix in _UNIT_TAGS and value == "":
            value = None
    return {suffix: value}


ScriptLoader.add_multi_constructor("!", _construct_tagged)


def load_script(source: Path | str | dict[str, Any]) -> Script:
    """Load a script from a YAML file, YAML text, or an already parsed mapping."""

    if isinstance(source, Path):
        data = yaml.load(source.read_text(encoding="utf-8"), Loader=ScriptLoader)
    elif isinstance(source, str):
        data = yaml.load(source, Loader=ScriptLoader)
    else:
        data = source
    if not isinstance(data, dict):
        msg = "script must be a mapping with an 'instructions' list"
        raise ScriptError(msg)
    validate_script(data)

    settings = parse_settings(data.get("settings") or {})
    instructions = [parse_instruction(raw) for raw in data["instructions"]]
    logger.debug("Loaded script with %d instructions", len(instructions))
    return Script(instructions=instructions, settings=settings)


def parse_settings(payload: dict[str, Any]) -> Settings:
    settings = Settings()
    if "width" in payload:
        settings.width = int(payload["width"])
    if "height" in payload:
        settings.height = int(payload["height"])
    settings.title = payload.get("title")
    if "shell" in payload:
        settings.shell = parse_shell(payload["shell"])
    settings.environment = [
        (str(item["name"]), _scalar_text(item["value"])) for item in payload.get("environment", [])
    ]
    settings.environment_capture = [str(name) for name in payload.get("environment_capture", [])]
    if "type_speed" in payload:
        settings.type_speed = parse_duration(payload["type_speed"])
    if "prompt" in payload:
        settings.prompt = payload["prompt"]
    if "secondary_prompt" in payload:
        settings.secondary_prompt = payload["secondary_prompt"]
    if "timeout" in payload:
        settings.timeout = parse_duration(payload["timeout"])
    return settings


def parse_shell(payload: str | dict[str, Any]) -> Shell:
    if isinstance(payload, str):
        name = payload.lower()
        if name == "bash":
            return BashShell()
        if name == "python":
            return PythonShell()
        msg = f"unsupported shell {payload!r}, expected bash, python or a custom shell"
        raise ScriptError(msg)
    if "Bash" in payload:
        return BashShell()
    if "Python" in payload:
        return PythonShell()
    custom = payload.get("Custom", payload)
    quit_command = custom.get("quit_command")
    return CustomShell(
        program=custom["program"],
        prompt=custom["prompt"],
        line_split=custom["line_split"],
        args=tuple(custom.get("args", ())),
        quit_command=quit_command,
        echo=bool(custom.get("echo", False)),
    )


def parse_instruction(payload: str | dict[str, Any]) -> Instruction:
    if payload == "Clear":
        return ClearInstruction()
    [(kind, body)] = payload.items()
    if kind == "Command":
        return CommandInstruction(
            command=parse_command(body["command"]),
            hidden=bool(body.get("hidden", False)),
            type_speed=_optional_duration(body.get("type_speed")),
        )
    if kind == "Interactive":
        return InteractiveInstruction(
            command=parse_command(body["command"]),
            keys=[parse_key(key) for key in body["keys"]],
            type_speed=_optional_duration(body.get("type_speed")),
        )
    if kind == "Wait":
        return WaitInstruction(duration=parse_duration(body))
    if kind == "Marker":
        return MarkerInstruction(label=body)
    if kind == "Clear":
        return ClearInstruction()
    msg = f"Unsupported instruction kind: {kind}"
    raise ScriptError(msg)


def parse_command(payload: str | list[str] | dict[str, Any]) -> Command:
    """Parse a command given as text, a list of lines, or a tagged mapping.

    ``^C`` style text is a control code, text with line breaks is a
    multi-line command, anything else is a single line.
    """

    if isinstance(payload, str):
        if payload.startswith("^"):
            return Control(ControlCode.from_char(payload[1:]))
        if "\n" in payload:
            return MultiLine(payload.splitlines())
        return SingleLine(payload)
    if isinstance(payload, list):
        return MultiLine([str(line) for line in payload])

    [(tag, value)] = payload.items()
    if tag == "SingleLine":
        if "\n" in value:
            msg = f"expected a single line string, got {value!r}"
            raise ScriptError(msg)
        return SingleLine(value)
    if tag == "MultiLine":
        return MultiLine([str(line) for line in value])
    return Control(ControlCode.from_char(value))


def parse_key(payload: str | int | dict[str, Any]) -> Key:
    """Parse one key of an interactive instruction.

    Accepts a single character, ``^X`` control codes, ``!Str text`` strings,
    durations (``500ms``) and their tagged forms.
    """

    if isinstance(payload, int):
        payload = str(payload)
    if isinstance(payload, str):
        if payload.startswith("^") and len(payload) > 1:
            return ControlKey(ControlCode.from_char(payload[1:]))
        if payload.startswith(_STRING_KEY_PREFIX):
            return StringKey(payload[len(_STRING_KEY_PREFIX):])
        if len(payload) == 1:
            return CharKey(payload)
        return WaitKey(parse_duration(payload))

    [(tag, value)] = payload.items()
    if tag == "Char":
        value = str(value)
        if len(value) != 1:
            msg = f"expected a single character key, got {value!r}"
            raise ScriptError(msg)
        return CharKey(value)
    if tag in ("Str", "String"):
        return StringKey(value)
    if tag == "Control":
        return ControlKey(ControlCode.from_char(value))
    return WaitKey(parse_duration(value))


def _optional_duration(value: str | None) -> float | None:
    return None if value is None else parse_duration(value)


def _scalar_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
