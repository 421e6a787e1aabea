"""Bounded, typed tmux invocations."""

from __future__ import annotations

import enum
import shlex
import subprocess
from dataclasses import dataclass
from typing import Callable

from loguru import logger

from bosh_ssh.errors import TmuxCommandError


class CommandStatus(enum.Enum):
    """Outcome of one external command."""

    OK = "ok"
    EXIT = "exit"
    TIMEOUT = "timeout"
    SPAWN_ERROR = "spawn_error"


@dataclass(frozen=True)
class CommandResult:
    """Result of one tmux invocation."""

    args: tuple[str, ...]
    status: CommandStatus
    returncode: int | None = None
    stdout: str = ""
    stderr: str = ""
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status is CommandStatus.OK

    @property
    def command_line(self) -> str:
        return shlex.join(self.args)

    def describe(self) -> str:
        """One-line diagnostic for error output."""
        if self.status is CommandStatus.OK:
            return f"`{self.command_line}` succeeded"
        if self.status is CommandStatus.EXIT:
            detail = self.stderr.strip() or self.stdout.strip() or "no output"
            return f"`{self.command_line}` exited with status {self.returncode}: {detail}"
        if self.status is CommandStatus.TIMEOUT:
            return f"`{self.command_line}` timed out: {self.error}"
        return f"`{self.command_line}` could not be started: {self.error}"


RunFn = Callable[..., subprocess.CompletedProcess]


class TmuxRunner:
    """Runs tmux subcommands one at a time with a timeout."""

    def __init__(
        self,
        tmux_command: str = "tmux",
        timeout_s: float = 10.0,
        run: RunFn | None = None,
    ) -> None:
        self.tmux_command = (tmux_command or "tmux").strip()
        self.timeout_s = timeout_s
        self._run = run or subprocess.run

    def base_args(self) -> list[str]:
        return shlex.split(self.tmux_command)

    def run(self, *args: str) -> CommandResult:
        """Run ``tmux ARGS`` and return a typed result. Never raises for command failures."""
        argv = tuple(self.base_args() + list(args))
        logger.debug(f"[tmux] {shlex.join(argv)}")
        try:
            proc = self._run(
                list(argv),
                capture_output=True,
                text=True,
                timeout=self.timeout_s,
            )
        except subprocess.TimeoutExpired:
            result = CommandResult(
                args=argv,
                status=CommandStatus.TIMEOUT,
                error=f"no exit after {self.timeout_s:g}s",
            )
        except OSError as exc:
            result = CommandResult(args=argv, status=CommandStatus.SPAWN_ERROR, error=str(exc))
        else:
            status = CommandStatus.OK if proc.returncode == 0 else CommandStatus.EXIT
            result = CommandResult(
                args=argv,
                status=status,
                returncode=proc.returncode,
                stdout=proc.stdout or "",
                stderr=proc.stderr or "",
            )

        if not result.ok:
            logger.debug(f"[tmux] failed: {result.describe()}")
        return result

    def check(self, *args: str) -> CommandResult:
        """Run ``tmux ARGS`` and raise ``TmuxCommandError`` unless it succeeded."""
        result = self.run(*args)
        if not result.ok:
            raise TmuxCommandError(result)
        return result

    def has_session(self, name: str) -> bool:
        return self.run("has-session", "-t", f"={name}").ok

    def kill_session(self, name: str) -> CommandResult:
        return self.run("kill-session", "-t", f"={name}")
