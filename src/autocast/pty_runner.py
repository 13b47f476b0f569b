from __future__ import annotations

import fcntl
import logging
import os
import pty
import selectors
import struct
import subprocess
import termios
import time
from dataclasses import dataclass
from typing import Iterable, Mapping, MutableMapping, Protocol

from .errors import SpawnError

logger = logging.getLogger(__name__)

_DRAIN_INTERVAL = 0.05


@dataclass(slots=True)
class PtySize:
    """Rows and columns of the pseudo-terminal."""

    rows: int = 24
    cols: int = 80


@dataclass(slots=True)
class PtyExitStatus:
    """How the shell process ended."""

    returncode: int | None
    signal: int | None

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0 and self.signal is None


class ProcessControl(Protocol):
    """Platform capabilities a shell session needs from its child process."""

    def read(self, timeout: float | None = None) -> bytes: ...

    def write(self, data: bytes) -> int: ...

    def set_window_size(self, size: PtySize) -> None: ...

    def wait_with_timeout(self, timeout: float) -> PtyExitStatus: ...

    def is_running(self) -> bool: ...

    def close(self) -> None: ...


class PosixPtyProcess:
    """A subprocess attached to the slave side of a fresh PTY."""

    def __init__(
        self,
        command: Iterable[str],
        *,
        env: Mapping[str, str] | None = None,
        size: PtySize | None = None,
        echo: bool = False,
        read_chunk_size: int = 4096,
    ) -> None:
        command = list(command)
        if not command:
            msg = "Command must not be empty"
            raise ValueError(msg)

        self._command = command
        self._env = self._prepare_env(env)
        self._size = size or PtySize()
        self._echo = echo
        self._chunk_size = read_chunk_size

        self._master_fd: int | None = None
        self._slave_fd: int | None = None
        self._process: subprocess.Popen[bytes] | None = None
        self._selector = selectors.DefaultSelector()

    def start(self) -> "PosixPtyProcess":
        try:
            master_fd, slave_fd = pty.openpty()
        except OSError as exc:
            msg = f"could not open a pseudo-terminal: {exc}"
            raise SpawnError(msg) from exc
        self._master_fd = master_fd
        self._slave_fd = slave_fd

        os.set_blocking(master_fd, False)
        self._selector.register(master_fd, selectors.EVENT_READ)
        self.set_window_size(self._size)
        if not self._echo:
            self._disable_echo(slave_fd)

        try:
            self._process = subprocess.Popen(
                self._command,
                stdin=slave_fd,
                stdout=slave_fd,
                stderr=slave_fd,
                env=self._env,
                start_new_session=True,
                preexec_fn=_acquire_controlling_terminal,
                close_fds=True,
            )
        except OSError as exc:
            self.close()
            msg = f"could not spawn {self._command[0]!r}: {exc}"
            raise SpawnError(msg) from exc

        logger.debug("Spawned %s (pid %d)", self._command, self._process.pid)
        # The child holds its own copy of the slave.
        os.close(slave_fd)
        self._slave_fd = None
        return self

    def __enter__(self) -> "PosixPtyProcess":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        self.close()

    def close(self) -> None:
        try:
            if self._process and self._process.poll() is None:
                self._process.terminate()
                try:
                    self._process.wait(timeout=1)
                except subprocess.TimeoutExpired:
                    self._process.kill()
        finally:
            if self._process is not None:
                try:
                    self._process.wait(timeout=1)
                except subprocess.TimeoutExpired:  # pragma: no cover
                    pass
            if self._master_fd is not None:
                self._selector.unregister(self._master_fd)
                os.close(self._master_fd)
            if self._slave_fd is not None:
                os.close(self._slave_fd)

            self._master_fd = None
            self._slave_fd = None
            self._process = None

    @property
    def master_fd(self) -> int:
        if self._master_fd is None:
            msg = "Master FD is not initialised"
            raise RuntimeError(msg)
        return self._master_fd

    @property
    def process(self) -> subprocess.Popen[bytes]:
        if self._process is None:
            msg = "Process is not running"
            raise RuntimeError(msg)
        return self._process

    def read(self, timeout: float | None = None) -> bytes:
        """Read a chunk from the PTY master side.

        Returns ``b""`` when nothing arrives before ``timeout`` and raises
        ``EOFError`` once the child side of the terminal is gone.
        """

        if not self._selector.select(timeout):
            return b""
        try:
            data = os.read(self.master_fd, self._chunk_size)
        except BlockingIOError:
            return b""
        except OSError as exc:
            # Linux reports a closed slave as EIO.
            raise EOFError("PTY closed") from exc
        if not data:
            raise EOFError("PTY closed")
        return data

    def write(self, data: bytes) -> int:
        """Write all of ``data`` to the PTY master."""

        written = 0
        view = memoryview(data)
        while written < len(data):
            try:
                written += os.write(self.master_fd, view[written:])
            except BlockingIOError:
                self._wait_writable()
        return written

    def wait_with_timeout(self, timeout: float) -> PtyExitStatus:
        """Wait for the subprocess to finish, discarding any output it writes."""

        proc = self.process
        deadline = time.monotonic() + timeout
        while proc.poll() is None:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise TimeoutError("Subprocess did not exit within timeout")
            try:
                self.read(timeout=min(remaining, _DRAIN_INTERVAL))
            except EOFError:
                try:
                    proc.wait(timeout=max(deadline - time.monotonic(), 0))
                except subprocess.TimeoutExpired as exc:
                    raise TimeoutError("Subprocess did not exit within timeout") from exc

        returncode = proc.returncode
        if returncode < 0:
            return PtyExitStatus(returncode=None, signal=abs(returncode))
        return PtyExitStatus(returncode=returncode, signal=None)

    def is_running(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def set_window_size(self, size: PtySize) -> None:
        """Adjust the underlying PTY window size."""

        if self._master_fd is None:
            msg = "PTY not initialised"
            raise RuntimeError(msg)

        self._size = size
        packed = struct.pack("HHHH", size.rows, size.cols, 0, 0)
        fcntl.ioctl(self._master_fd, termios.TIOCSWINSZ, packed)
        if self._slave_fd is not None:
            fcntl.ioctl(self._slave_fd, termios.TIOCSWINSZ, packed)

    def _wait_writable(self) -> None:
        with selectors.DefaultSelector() as selector:
            selector.register(self.master_fd, selectors.EVENT_WRITE)
            selector.select(_DRAIN_INTERVAL)

    @staticmethod
    def _disable_echo(fd: int) -> None:
        attrs = termios.tcgetattr(fd)
        attrs[3] &= ~termios.ECHO
        termios.tcsetattr(fd, termios.TCSANOW, attrs)

    @staticmethod
    def _prepare_env(env: Mapping[str, str] | None) -> MutableMapping[str, str]:
        merged: MutableMapping[str, str] = dict(os.environ)
        if env is not None:
            merged.update(env)
        return merged


def _acquire_controlling_terminal() -> None:
    # Runs in the child after setsid(); stdin is the PTY slave.
    fcntl.ioctl(0, termios.TIOCSCTTY, 0)


def open_process(
    command: Iterable[str],
    *,
    env: Mapping[str, str] | None = None,
    size: PtySize | None = None,
    echo: bool = False,
) -> ProcessControl:
    """Start ``command`` on a new PTY using this platform's implementation."""

    if os.name != "posix":
        msg = f"pseudo-terminals are not supported on {os.name!r}"
        raise SpawnError(msg)
    return PosixPtyProcess(command, env=env, size=size, echo=echo).start()
