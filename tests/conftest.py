from __future__ import annotations

import shutil
from collections import deque
from pathlib import Path
from typing import Iterable, Mapping

import pytest

from autocast import EventClock, PtyExitStatus, PtySize, ShellSession

PROMPT = "<PROMPT>"


class FakeProcess:
    """Scripted stand-in for a PTY child process.

    ``replies`` maps an exact write to the output chunks it produces.
    Writing ``quit_input`` makes the process exit.
    """

    def __init__(
        self,
        chunks: Iterable[bytes] = (),
        replies: Mapping[bytes, Iterable[bytes]] | None = None,
        *,
        quit_input: bytes | None = b"exit\n",
    ) -> None:
        self.pending: deque[bytes] = deque(chunks)
        self.replies = {key: list(value) for key, value in (replies or {}).items()}
        self.quit_input = quit_input
        self.written: list[bytes] = []
        self.running = True
        self.closed = False
        self.size: PtySize | None = None

    def read(self, timeout: float | None = None) -> bytes:
        if self.pending:
            return self.pending.popleft()
        if not self.running:
            raise EOFError("PTY closed")
        return b""

    def write(self, data: bytes) -> int:
        if not self.running:
            raise BrokenPipeError("process exited")
        self.written.append(data)
        self.pending.extend(self.replies.get(data, ()))
        if data == self.quit_input:
            self.running = False
        return len(data)

    def set_window_size(self, size: PtySize) -> None:
        self.size = size

    def wait_with_timeout(self, timeout: float) -> PtyExitStatus:
        if self.running:
            raise TimeoutError("Subprocess did not exit within timeout")
        return PtyExitStatus(returncode=0, signal=None)

    def is_running(self) -> bool:
        return self.running

    def close(self) -> None:
        self.closed = True
        self.running = False


class StepClock:
    """Clock advancing by a fixed step each time it is read."""

    def __init__(self, step: float = 0.01) -> None:
        self.step = step
        self.now = 0.0

    def __call__(self) -> float:
        self.now += self.step
        return self.now


@pytest.fixture()
def artifact_dir(tmp_path: Path) -> Path:
    return tmp_path / "artifacts"


@pytest.fixture()
def make_session():
    def factory(
        process: FakeProcess,
        *,
        prompt: str = PROMPT,
        timeout: float = 0.2,
        quit_command: str | None = "exit",
    ) -> ShellSession:
        return ShellSession(
            process,
            prompt=prompt,
            quit_command=quit_command,
            timeout=timeout,
            poll_interval=0.0,
            clock=EventClock(StepClock()),
        )

    return factory


requires_sh = pytest.mark.skipif(shutil.which("sh") is None, reason="sh is not installed")
requires_bash = pytest.mark.skipif(shutil.which("bash") is None, reason="bash is not installed")
