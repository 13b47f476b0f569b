from __future__ import annotations

import contextlib
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Iterator, Mapping

from .pty_runner import PtySize
from .script import BashShell, CustomShell, PythonShell, Shell
from .session import ShellSession

logger = logging.getLogger(__name__)

BASH_PROMPT = "AUTOCAST_PROMPT"
BASH_RC = f"""\
PS1='{BASH_PROMPT}'
PS2=''
unset PROMPT_COMMAND
bind 'set enable-bracketed-paste off' 2>/dev/null
"""
PYTHON_PROMPT = ">>> "
DEFAULT_LINE_SPLIT = " \\"


def shell_program(shell: Shell) -> str:
    if isinstance(shell, BashShell):
        return "bash"
    if isinstance(shell, PythonShell):
        return "python"
    return shell.program


def resolve_shell_path(shell: Shell) -> str:
    """Full path of the shell's program, or its bare name if not on ``PATH``."""

    program = shell_program(shell)
    return shutil.which(program) or program


def line_split(shell: Shell) -> str:
    if isinstance(shell, CustomShell):
        return shell.line_split
    return DEFAULT_LINE_SPLIT


@contextlib.contextmanager
def bash_rcfile() -> Iterator[Path]:
    """A temporary bash init file that exists only inside the block."""

    fd, name = tempfile.mkstemp(prefix="autocast-", suffix=".bashrc")
    path = Path(name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(BASH_RC)
        yield path
    finally:
        path.unlink(missing_ok=True)


def spawn_shell(
    shell: Shell,
    *,
    environment: Mapping[str, str],
    size: PtySize,
    timeout: float,
) -> ShellSession:
    """Start ``shell`` and return a session that has already seen its prompt."""

    env = dict(environment)
    if isinstance(shell, BashShell):
        with bash_rcfile() as rcfile:
            logger.debug("Starting bash with rc file %s", rcfile)
            return ShellSession.spawn(
                ["bash", "--rcfile", str(rcfile), "-i"],
                prompt=BASH_PROMPT,
                env=env,
                size=size,
                quit_command="exit",
                timeout=timeout,
            )
    if isinstance(shell, PythonShell):
        env.setdefault("PYTHON_BASIC_REPL", "1")
        return ShellSession.spawn(
            ["python", "-q"],
            prompt=PYTHON_PROMPT,
            env=env,
            size=size,
            quit_command="exit()",
            timeout=timeout,
        )
    if isinstance(shell, CustomShell):
        return ShellSession.spawn(
            [shell.program, *shell.args],
            prompt=shell.prompt,
            env=env,
            size=size,
            quit_command=shell.quit_command,
            timeout=timeout,
            echo=shell.echo,
        )
    msg = f"Unsupported shell type: {type(shell)!r}"
    raise TypeError(msg)
