"""Command-line entry point: ``autocast script.yaml demo.cast``."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

import jsonschema
import yaml

from .dsl import parse_duration
from .errors import AutocastError, DurationError, QuitTimeout
from .orchestrator import ExecutionOrchestrator
from .recording import Recording
from .script import BashShell, PythonShell, Settings

logger = logging.getLogger("autocast")

DEFAULT_ENVIRONMENT_CAPTURE = ["TERM"]


def _duration(text: str) -> float:
    try:
        return parse_duration(text)
    except DurationError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _env_var(text: str) -> tuple[str, str]:
    name, _, value = text.partition("=")
    return name, value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autocast",
        description="Automate terminal demos: run a YAML script in a shell and write an asciicast.",
    )
    parser.add_argument("in_file", type=Path, help="Input file to create the asciicast file with")
    parser.add_argument("out_file", type=Path, help="Output asciicast file")
    parser.add_argument(
        "--overwrite", action="store_true", help="Overwrite output file if it already exists"
    )
    parser.add_argument("--width", type=int, help="Terminal width (default: current terminal)")
    parser.add_argument("--height", type=int, help="Terminal height (default: current terminal)")
    parser.add_argument("-t", "--title", help="Title of the asciicast")
    parser.add_argument(
        "--shell", choices=["bash", "python"], help="Shell to use for running commands"
    )
    parser.add_argument(
        "-e",
        "--environment",
        action="append",
        type=_env_var,
        default=[],
        metavar="NAME=VALUE",
        help="Environment variable for the shell process (repeatable)",
    )
    parser.add_argument(
        "--environment-capture",
        "--env-cap",
        action="append",
        metavar="ENV_VAR",
        help="Environment variable to list in the header (repeatable, default: TERM)",
    )
    parser.add_argument(
        "-d",
        "--type-speed",
        "--delay",
        type=_duration,
        help="Time between key presses, e.g. 100ms",
    )
    parser.add_argument("--prompt", help="Shell prompt shown in the asciicast output")
    parser.add_argument(
        "--secondary-prompt", help="Secondary prompt shown for multi-line commands"
    )
    parser.add_argument(
        "--timeout", type=_duration, help="Maximum time to wait for the shell prompt, e.g. 30s"
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="Increase log verbosity"
    )
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    settings = Settings(
        width=args.width,
        height=args.height,
        title=args.title,
        environment=list(args.environment),
        environment_capture=list(args.environment_capture or DEFAULT_ENVIRONMENT_CAPTURE),
    )
    if args.shell == "python":
        settings.shell = PythonShell()
    elif args.shell == "bash":
        settings.shell = BashShell()
    if args.type_speed is not None:
        settings.type_speed = args.type_speed
    if args.prompt is not None:
        settings.prompt = args.prompt
    if args.secondary_prompt is not None:
        settings.secondary_prompt = args.secondary_prompt
    if args.timeout is not None:
        settings.timeout = args.timeout
    return settings


def _configure_logging(verbosity: int) -> None:
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbosity, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    out_file: Path = args.out_file
    if out_file.exists() and not args.overwrite:
        logger.error("%s already exists, use --overwrite to replace it", out_file)
        return 1

    try:
        recording = ExecutionOrchestrator().execute(args.in_file, settings=settings_from_args(args))
    except QuitTimeout as exc:
        if exc.recording is None:
            logger.error("could not exit shell: %s", exc)
            return 1
        if _save(exc.recording, out_file, overwrite=args.overwrite):
            logger.warning("recording written, but could not exit shell: %s", exc)
        return 1
    except jsonschema.ValidationError as exc:
        logger.error("could not parse input file as a script: %s", exc.message)
        return 1
    except (AutocastError, yaml.YAMLError, OSError) as exc:
        logger.error("error running script: %s", exc)
        return 1

    return 0 if _save(recording, out_file, overwrite=args.overwrite) else 1


def _save(recording: Recording, out_file: Path, *, overwrite: bool) -> bool:
    try:
        recording.save(out_file, overwrite=overwrite)
    except OSError as exc:
        logger.error("could not write to output file: %s", exc)
        return False
    return True


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
