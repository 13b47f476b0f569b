from __future__ import annotations

import logging
import os
import sys
import time
from pathlib import Path
from typing import Any, Mapping

from .dsl import load_script
from .errors import QuitTimeout, TerminalSizeUnavailable
from .interpreter import InstructionInterpreter
from .pty_runner import PtySize
from .recording import Header, Recording
from .script import Script, Settings
from .shells import line_split, resolve_shell_path, spawn_shell
from .timeline import assemble

logger = logging.getLogger(__name__)


def terminal_size(width: int | None, height: int | None) -> PtySize:
    """Fill in whichever dimension is missing from the invoking terminal."""

    if width is not None and height is not None:
        return PtySize(rows=height, cols=width)
    try:
        size = os.get_terminal_size(sys.stdout.fileno())
    except (OSError, ValueError) as exc:
        msg = "terminal width or height not provided and could not get terminal size"
        raise TerminalSizeUnavailable(msg) from exc
    return PtySize(
        rows=height if height is not None else size.lines,
        cols=width if width is not None else size.columns,
    )


def header_env(settings: Settings, environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Environment listed in the header: overrides, captures, then ``SHELL``."""

    environ = os.environ if environ is None else environ
    env = dict(settings.environment)
    for name in settings.environment_capture:
        env.setdefault(name, environ.get(name, ""))
    env["SHELL"] = resolve_shell_path(settings.shell)
    return env


def record(script: Script) -> Recording:
    """Run ``script`` in a fresh shell and return the finished recording.

    Raises :class:`QuitTimeout` with the recording attached when the shell
    does not exit afterwards; every other failure leaves nothing behind.
    """

    settings = script.settings
    size = terminal_size(settings.width, settings.height)
    started = time.time()

    logger.info("Starting %s (%dx%d)", resolve_shell_path(settings.shell), size.cols, size.rows)
    with spawn_shell(
        settings.shell,
        environment=dict(settings.environment),
        size=size,
        timeout=settings.timeout,
    ) as session:
        interpreter = InstructionInterpreter(
            session,
            prompt=settings.prompt,
            secondary_prompt=settings.secondary_prompt,
            type_speed=settings.type_speed,
            line_split=line_split(settings.shell),
        )
        fragments = interpreter.run_all(script.instructions)
        events = assemble(fragments, prompt=settings.prompt, type_speed=settings.type_speed)
        recording = Recording(
            header=Header(
                width=size.cols,
                height=size.rows,
                timestamp=int(started),
                title=settings.title,
                env=header_env(settings),
            ),
            events=events,
        )
        recording.header.duration = recording.total_duration

        try:
            session.quit()
        except QuitTimeout as exc:
            exc.recording = recording
            raise

    logger.info("Recorded %d events (%.3fs)", len(events), recording.total_duration)
    return recording


class ExecutionOrchestrator:
    """High-level runner that ties script loading with recording."""

    def execute(
        self,
        source: Path | str | dict[str, Any],
        *,
        settings: Settings | None = None,
    ) -> Recording:
        script = load_script(source)
        if settings is not None:
            script.settings.merge(settings)
        return record(script)
