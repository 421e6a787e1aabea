"""PTY backend for the tmux attach process."""

from __future__ import annotations

from typing import Protocol, Sequence

from loguru import logger

from bosh_ssh.errors import TerminalError


class PTYBackend(Protocol):
    """Minimal PTY backend contract."""

    def read(self) -> bytes:
        """Read an output chunk; ``b""`` when idle, ``EOFError`` at end of stream."""

    def write(self, data: bytes) -> None:
        """Write input bytes."""

    def resize(self, cols: int, rows: int) -> None:
        """Apply terminal resize."""

    def close(self) -> None:
        """Close process resources."""

    @property
    def exitstatus(self) -> int | None:
        """Exit status once the child has finished."""


class UnixPexpectBackend:
    """PTY backend for Unix-like systems via pexpect, raw bytes in both directions."""

    def __init__(
        self,
        argv: Sequence[str],
        cols: int = 80,
        rows: int = 24,
        read_timeout_s: float = 0.1,
    ) -> None:
        import pexpect

        if not argv:
            raise TerminalError("No command to run under the PTY")

        self._pexpect = pexpect
        self._read_timeout_s = read_timeout_s
        try:
            self._proc = pexpect.spawn(
                argv[0],
                list(argv[1:]),
                encoding=None,
                dimensions=(rows, cols),
            )
        except (pexpect.ExceptionPexpect, OSError) as exc:
            raise TerminalError(f"Failed to allocate PTY for {argv[0]}: {exc}") from exc

    def read(self) -> bytes:
        try:
            return self._proc.read_nonblocking(size=4096, timeout=self._read_timeout_s)
        except self._pexpect.TIMEOUT:
            return b""
        except self._pexpect.EOF as exc:
            raise EOFError("PTY closed") from exc

    def write(self, data: bytes) -> None:
        self._proc.send(data)

    def resize(self, cols: int, rows: int) -> None:
        self._proc.setwinsize(rows, cols)

    def close(self) -> None:
        if self._proc.isalive():
            self._proc.close(force=True)
        else:
            self._proc.close()

    @property
    def exitstatus(self) -> int | None:
        return self._proc.exitstatus


def build_backend(argv: Sequence[str], cols: int = 80, rows: int = 24) -> PTYBackend:
    """Start ``argv`` under a new PTY."""
    backend = UnixPexpectBackend(argv, cols=cols, rows=rows)
    logger.debug(f"[pty] Using UnixPexpectBackend for: {' '.join(argv)[:60]}")
    return backend
