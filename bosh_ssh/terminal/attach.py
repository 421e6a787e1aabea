"""Interactive attach: relay the controlling terminal to ``tmux attach-session``."""

from __future__ import annotations

import os
import queue
import shlex
import signal
import sys
import termios
import threading
import tty
from contextlib import AbstractContextManager, contextmanager
from typing import Callable, Iterator, Sequence

from loguru import logger

from bosh_ssh.errors import TerminalError
from bosh_ssh.terminal.backend import PTYBackend, build_backend

DEFAULT_SIZE = (80, 24)
EXIT_SIGNALS = (signal.SIGTERM, signal.SIGHUP)
_CLOSED = object()


class ResizeEvents:
    """
    Terminal resize notifications as a queue.

    Subscribes to SIGWINCH on enter and restores the previous handler on exit.
    Must be entered from the main thread.
    """

    def __init__(self, signum: int = signal.SIGWINCH) -> None:
        self.signum = signum
        self._queue: queue.Queue[object] = queue.Queue()
        self._previous: object = None
        self._subscribed = False

    def __enter__(self) -> "ResizeEvents":
        self._previous = signal.signal(self.signum, self._on_signal)
        self._subscribed = True
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._subscribed:
            previous = self._previous if self._previous is not None else signal.SIG_DFL
            signal.signal(self.signum, previous)
            self._subscribed = False
        self._queue.put(_CLOSED)

    def _on_signal(self, signum: int, frame: object) -> None:
        del frame
        self._queue.put(signum)

    def notify(self) -> None:
        """Queue a resize without a signal, used for the initial size."""
        self._queue.put(self.signum)

    def wait(self) -> bool:
        """Block for the next resize. False once the channel is closed."""
        return self._queue.get() is not _CLOSED


@contextmanager
def exit_on_signals(signums: Sequence[int] = EXIT_SIGNALS) -> Iterator[None]:
    """Raise ``SystemExit(128 + signum)`` on ``signums`` while active."""

    def _exit(signum: int, frame: object) -> None:
        del frame
        raise SystemExit(128 + signum)

    previous = {signum: signal.signal(signum, _exit) for signum in signums}
    try:
        yield
    finally:
        for signum, old in previous.items():
            signal.signal(signum, old if old is not None else signal.SIG_DFL)


@contextmanager
def raw_mode(fd: int) -> Iterator[None]:
    """Put ``fd`` in raw mode, restoring the saved attributes on exit."""
    try:
        saved = termios.tcgetattr(fd)
    except termios.error as exc:
        raise TerminalError(f"stdin is not a terminal: {exc}") from exc
    try:
        tty.setraw(fd)
    except termios.error as exc:
        termios.tcsetattr(fd, termios.TCSAFLUSH, saved)
        raise TerminalError(f"Failed to enter raw mode: {exc}") from exc
    try:
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSAFLUSH, saved)


def terminal_size(fd: int) -> tuple[int, int]:
    """Return ``(cols, rows)`` of the terminal on ``fd``."""
    try:
        size = os.get_terminal_size(fd)
    except OSError:
        return DEFAULT_SIZE
    return size.columns, size.lines


def attach_argv(session_name: str, tmux_command: str = "tmux") -> list[str]:
    return shlex.split(tmux_command or "tmux") + ["-2", "attach-session", "-t", session_name]


class SessionAttacher:
    """
    Bridges the controlling terminal to a tmux session through a PTY.

    One thread copies stdin to the PTY, one forwards resize events, and the calling
    thread copies PTY output to stdout until the attach command exits.
    """

    def __init__(
        self,
        tmux_command: str = "tmux",
        stdin_fd: int | None = None,
        stdout_fd: int | None = None,
        backend_factory: Callable[..., PTYBackend] = build_backend,
        terminal_mode: Callable[[int], AbstractContextManager] = raw_mode,
        resize_events: Callable[[], ResizeEvents] = ResizeEvents,
        get_size: Callable[[int], tuple[int, int]] = terminal_size,
        exit_signals: Sequence[int] = EXIT_SIGNALS,
    ) -> None:
        self.tmux_command = tmux_command
        self.stdin_fd = sys.stdin.fileno() if stdin_fd is None else stdin_fd
        self.stdout_fd = sys.stdout.fileno() if stdout_fd is None else stdout_fd
        self._backend_factory = backend_factory
        self._terminal_mode = terminal_mode
        self._resize_events = resize_events
        self._get_size = get_size
        self.exit_signals = tuple(exit_signals)

    def attach(self, session_name: str) -> int | None:
        """Attach until tmux exits. Returns the attach command's exit status."""
        argv = attach_argv(session_name, self.tmux_command)
        cols, rows = self._get_size(self.stdin_fd)
        with exit_on_signals(self.exit_signals):
            backend = self._backend_factory(argv, cols=cols, rows=rows)
            logger.debug(f"[attach] {shlex.join(argv)} ({cols}x{rows})")
            try:
                self._relay(backend)
            finally:
                backend.close()
        logger.debug(f"[attach] detached, status={backend.exitstatus}")
        return backend.exitstatus

    def _relay(self, backend: PTYBackend) -> None:
        with self._resize_events() as events, self._terminal_mode(self.stdin_fd):
            events.notify()
            threading.Thread(
                target=self._forward_resizes,
                args=(events, backend),
                name="bosh-ssh-resize",
                daemon=True,
            ).start()
            threading.Thread(
                target=self._copy_input,
                args=(backend,),
                name="bosh-ssh-stdin",
                daemon=True,
            ).start()
            self._copy_output(backend)

    def _forward_resizes(self, events: ResizeEvents, backend: PTYBackend) -> None:
        while events.wait():
            cols, rows = self._get_size(self.stdin_fd)
            try:
                backend.resize(cols, rows)
            except OSError as exc:
                logger.debug(f"[attach] error resizing pty: {exc}")

    def _copy_input(self, backend: PTYBackend) -> None:
        while True:
            try:
                data = os.read(self.stdin_fd, 1024)
            except OSError as exc:
                logger.debug(f"[attach] stdin closed: {exc}")
                return
            if not data:
                return
            try:
                backend.write(data)
            except (OSError, ValueError) as exc:
                logger.debug(f"[attach] pty closed for input: {exc}")
                return

    def _copy_output(self, backend: PTYBackend) -> None:
        while True:
            try:
                data = backend.read()
            except EOFError:
                return
            if data:
                _write_all(self.stdout_fd, data)


def _write_all(fd: int, data: bytes) -> None:
    view = memoryview(data)
    while view:
        written = os.write(fd, view)
        view = view[written:]
