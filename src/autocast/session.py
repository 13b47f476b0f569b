from __future__ import annotations

import codecs
import logging
import sys
import time
from typing import Iterable, Mapping

from .clock import EventClock
from .errors import (
    EncodingError,
    PromptTimeout,
    QuitTimeout,
    ReadTimeout,
    ShellExited,
    SpawnError,
    WriteError,
)
from .pty_runner import ProcessControl, PtyExitStatus, PtySize, open_process
from .recording import Event

logger = logging.getLogger(__name__)

LINE_ENDING = "\r\n" if sys.platform == "win32" else "\n"
DEFAULT_POLL_INTERVAL = 0.05


class ShellSession:
    """A shell or REPL on a PTY, read and written in terms of its prompt.

    Every read goes through :meth:`read_once`; output is turned into
    ``Output`` events whose times are deltas from the previous event.
    """

    def __init__(
        self,
        process: ProcessControl,
        *,
        prompt: str,
        quit_command: str | None = None,
        timeout: float = 30.0,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        clock: EventClock | None = None,
    ) -> None:
        if not prompt:
            msg = "Prompt must not be empty"
            raise ValueError(msg)

        self._process = process
        self._prompt = prompt
        self._quit_command = quit_command
        self._timeout = timeout
        self._poll_interval = poll_interval
        self._clock = clock or EventClock()
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="strict")
        self._pending = ""
        self._closed = False

    @classmethod
    def spawn(
        cls,
        command: Iterable[str],
        *,
        prompt: str,
        env: Mapping[str, str] | None = None,
        size: PtySize | None = None,
        quit_command: str | None = None,
        timeout: float = 30.0,
        echo: bool = False,
    ) -> "ShellSession":
        """Start ``command`` and block until its prompt is first printed."""

        process = open_process(command, env=env, size=size, echo=echo)
        session = cls(process, prompt=prompt, quit_command=quit_command, timeout=timeout)
        try:
            session.read_until_prompt()
        except ReadTimeout as exc:
            session.close()
            msg = f"prompt {prompt!r} not detected within {timeout:g}s of starting the shell"
            raise PromptTimeout(msg) from exc
        except ShellExited as exc:
            session.close()
            msg = "shell exited before printing its prompt"
            raise SpawnError(msg) from exc
        except BaseException:
            session.close()
            raise
        logger.debug("Shell ready, prompt %r detected", prompt)
        return session

    def __enter__(self) -> "ShellSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        self.close()

    @property
    def closed(self) -> bool:
        """Whether the child side of the terminal has gone away."""

        return self._closed

    def new_event(self, data: str) -> Event:
        return Event.output(self._clock.stamp(), data)

    def reset_clock(self) -> None:
        """Measure the next event from now instead of from the last event."""

        self._clock.reset()

    def send(self, data: bytes) -> None:
        try:
            self._process.write(data)
        except OSError as exc:
            msg = f"could not write to shell: {exc}"
            raise WriteError(msg) from exc

    def send_line(self, line: str) -> None:
        self.send((line + LINE_ENDING).encode("utf-8"))

    def read_once(self, timeout: float | None = None) -> tuple[Event | None, bool]:
        """Perform one bounded read.

        Returns the output event (if any text arrived) and whether the
        text ended with the prompt. The prompt itself is never part of the
        event.
        """

        if timeout is None:
            timeout = self._poll_interval
        try:
            raw = self._process.read(timeout)
        except EOFError:
            self._closed = True
            raw = b""

        text = self._pending + self._decode(raw)
        self._pending = ""
        if not text:
            return None, False

        if text.endswith(self._prompt):
            data = text[: -len(self._prompt)]
            return (self.new_event(data) if data else None), True

        if not self._closed:
            held = _partial_prompt_length(text, self._prompt)
            if held:
                self._pending = text[-held:]
                text = text[:-held]
                if not text:
                    return None, False

        return self.new_event(text), False

    def read_until_prompt(self) -> list[Event]:
        """Collect output events until the prompt shows up.

        Raises :class:`ReadTimeout` once the session timeout is exceeded.
        """

        start = time.monotonic()
        events: list[Event] = []
        while True:
            remaining = self._timeout - (time.monotonic() - start)
            event, prompt_seen = self.read_once(
                timeout=min(self._poll_interval, max(remaining, 0.0))
            )
            if event is not None:
                events.append(event)
            if prompt_seen:
                return events
            if self._closed:
                msg = "shell exited while waiting for the prompt"
                raise ShellExited(msg)
            if time.monotonic() - start > self._timeout:
                msg = f"prompt {self._prompt!r} not detected within {self._timeout:g}s"
                raise ReadTimeout(msg)

    def quit(self) -> PtyExitStatus:
        """Send the quit command (if any) and wait for the shell to exit."""

        if self._quit_command is not None:
            logger.debug("Sending quit command %r", self._quit_command)
            self.send_line(self._quit_command)
        try:
            return self._process.wait_with_timeout(self._timeout)
        except TimeoutError as exc:
            msg = f"shell did not exit within {self._timeout:g}s"
            raise QuitTimeout(msg) from exc

    def close(self) -> None:
        self._process.close()

    def _decode(self, raw: bytes) -> str:
        try:
            return self._decoder.decode(raw, final=self._closed)
        except UnicodeDecodeError as exc:
            msg = f"shell output is not valid UTF-8: {exc}"
            raise EncodingError(msg) from exc


def _partial_prompt_length(text: str, prompt: str) -> int:
    """Length of the longest proper prefix of ``prompt`` that ends ``text``."""

    for length in range(min(len(prompt) - 1, len(text)), 0, -1):
        if text.endswith(prompt[:length]):
            return length
    return 0
