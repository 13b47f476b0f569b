from __future__ import annotations

from pathlib import Path

import jsonschema
import pytest

from autocast import (
    BashShell,
    CharKey,
    ClearInstruction,
    CommandInstruction,
    Control,
    ControlCode,
    ControlKey,
    CustomShell,
    DurationError,
    InteractiveInstruction,
    InvalidControlCode,
    MarkerInstruction,
    MultiLine,
    PythonShell,
    ScriptError,
    Settings,
    SingleLine,
    StringKey,
    WaitInstruction,
    WaitKey,
)
from autocast.dsl import load_script, parse_command, parse_duration, parse_key, parse_shell

FULL_SCRIPT = """\
settings:
  width: 80
  height: 24
  title: full example
  shell:
    program: bash
    args:
      - --norc
    prompt: AUTOCAST_PROMPT
    line_split: ' \\'
    quit_command: exit
  environment:
    - name: HELLO
      value: Hello autocast!
  environment_capture:
    - TERM
  type_speed: 50ms
  prompt: "$ "
  secondary_prompt: "> "
  timeout: 10s

instructions:
  - !Command
    command: echo $HELLO
  - !Command
    command: cargo build
    hidden: true
    type_speed: 1ms
  - !Interactive
    command: nano
    keys:
      - h
      - 2s
      - ^X
      - !Str hi
      - 1
  - !Wait 3s
  - !Marker Hello
  - !Clear
"""


def test_load_full_script(artifact_dir: Path) -> None:
    artifact_dir.mkdir(parents=True)
    path = artifact_dir / "script.yaml"
    path.write_text(FULL_SCRIPT, encoding="utf-8")

    script = load_script(path)
    settings = script.settings

    assert (settings.width, settings.height, settings.title) == (80, 24, "full example")
    assert settings.shell == CustomShell(
        program="bash",
        prompt="AUTOCAST_PROMPT",
        line_split=" \\",
        args=("--norc",),
        quit_command="exit",
    )
    assert settings.environment == [("HELLO", "Hello autocast!")]
    assert settings.environment_capture == ["TERM"]
    assert settings.type_speed == pytest.approx(0.05)
    assert settings.timeout == pytest.approx(10.0)

    command, hidden, interactive, wait, marker, clear = script.instructions
    assert command == CommandInstruction(SingleLine("echo $HELLO"))
    assert hidden.hidden and hidden.type_speed == pytest.approx(0.001)
    assert isinstance(interactive, InteractiveInstruction)
    assert interactive.keys == [
        CharKey("h"),
        WaitKey(2.0),
        ControlKey(ControlCode.from_char("X")),
        StringKey("hi"),
        CharKey("1"),
    ]
    assert wait == WaitInstruction(3.0)
    assert marker == MarkerInstruction("Hello")
    assert isinstance(clear, ClearInstruction)


def test_defaults_when_settings_missing() -> None:
    script = load_script("instructions:\n  - !Marker start\n")
    assert script.settings == Settings()
    assert script.settings.shell == BashShell()


@pytest.mark.parametrize(
    ("text", "seconds"),
    [("1s", 1.0), ("150ms", 0.15), ("900us", 0.0009), (" 2s ", 2.0)],
)
def test_parse_duration(text: str, seconds: float) -> None:
    assert parse_duration(text) == pytest.approx(seconds)


@pytest.mark.parametrize("text", ["1 s", "10", "1m", "ms", "-1s", "1.5s", "²s", "١٠ms"])
def test_parse_duration_rejects_bad_input(text: str) -> None:
    with pytest.raises(DurationError):
        parse_duration(text)


def test_parse_command_shapes() -> None:
    assert parse_command("ls -la") == SingleLine("ls -la")
    assert parse_command("echo a &&\necho b\n") == MultiLine(["echo a &&", "echo b"])
    assert parse_command(["one", "two"]) == MultiLine(["one", "two"])
    assert parse_command("^m") == Control(ControlCode(0x0D))
    assert parse_command({"SingleLine": "ls"}) == SingleLine("ls")
    assert parse_command({"MultiLine": ["a", "b"]}) == MultiLine(["a", "b"])
    assert parse_command({"Control": "C"}) == Control(ControlCode(0x03))


def test_parse_command_errors() -> None:
    with pytest.raises(InvalidControlCode):
        parse_command("^test")
    with pytest.raises(ScriptError):
        parse_command({"SingleLine": "a\nb"})


def test_parse_key_shapes() -> None:
    assert parse_key("t") == CharKey("t")
    assert parse_key("^") == CharKey("^")
    assert parse_key("^m") == ControlKey(ControlCode(0x0D))
    assert parse_key("500ms") == WaitKey(0.5)
    assert parse_key("!Str hello") == StringKey("hello")
    assert parse_key({"Char": "t"}) == CharKey("t")
    assert parse_key({"Control": "m"}) == ControlKey(ControlCode(0x0D))
    assert parse_key({"Wait": "1s"}) == WaitKey(1.0)
    with pytest.raises(DurationError):
        parse_key("hello")


def test_tagged_yaml_forms() -> None:
    script = load_script(
        """\
settings:
  shell: !Python
instructions:
  - !Command
    command: !MultiLine
      - echo a
      - echo b
  - !Command
    command: !Control C
  - !Interactive
    command: !SingleLine vim
    keys:
      - !Char i
      - !Control "["
      - !Wait 10ms
  - Clear
"""
    )
    assert script.settings.shell == PythonShell()
    first, second, third, fourth = script.instructions
    assert first.command == MultiLine(["echo a", "echo b"])
    assert second.command == Control(ControlCode(0x03))
    assert third.command == SingleLine("vim")
    assert third.keys == [CharKey("i"), ControlKey(ControlCode(0x1B)), WaitKey(0.01)]
    assert isinstance(fourth, ClearInstruction)


def test_parse_shell_shapes() -> None:
    assert parse_shell("bash") == BashShell()
    assert parse_shell("Python") == PythonShell()
    assert parse_shell({"Bash": None}) == BashShell()
    custom = parse_shell({"Custom": {"program": "zsh", "prompt": "% ", "line_split": " \\"}})
    assert custom == CustomShell(program="zsh", prompt="% ", line_split=" \\")
    with pytest.raises(ScriptError):
        parse_shell("fish")


def test_invalid_control_code_in_script() -> None:
    with pytest.raises(InvalidControlCode):
        load_script("instructions:\n  - !Command\n    command: ^1\n")


def test_invalid_script_raises_validation_error() -> None:
    with pytest.raises(jsonschema.ValidationError):
        load_script({"settings": {"width": "wide"}, "instructions": []})
    with pytest.raises(jsonschema.ValidationError):
        load_script("instructions:\n  - !Launch rocket\n")
    with pytest.raises(jsonschema.ValidationError):
        load_script("settings:\n  shell:\n    program: zsh\ninstructions: []\n")


def test_settings_merge_prefers_non_default_overrides() -> None:
    base = Settings(width=80, title="base", environment=[("A", "1")], timeout=10.0)
    base.merge(
        Settings(
            height=30,
            shell=PythonShell(),
            environment=[("B", "2")],
            environment_capture=["TERM"],
            prompt="% ",
        )
    )
    assert (base.width, base.height, base.title) == (80, 30, "base")
    assert base.shell == PythonShell()
    assert base.environment == [("A", "1"), ("B", "2")]
    assert base.environment_capture == ["TERM"]
    assert base.prompt == "% "
    assert base.timeout == 10.0

    base.merge(Settings(shell=BashShell()))
    assert base.shell == PythonShell()


def test_empty_tagged_scalars() -> None:
    script = load_script(
        """\
settings:
  shell: !Bash
instructions:
  - !Marker ''
  - !Interactive
    command: cat
    keys:
      - !Str ''
  - !Clear
"""
    )
    marker, interactive, clear = script.instructions
    assert script.settings.shell == BashShell()
    assert marker == MarkerInstruction("")
    assert interactive.keys == [StringKey("")]
    assert isinstance(clear, ClearInstruction)
