"""Exception types raised by bosh-ssh."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bosh_ssh.tmux.runner import CommandResult


class BoshSSHError(Exception):
    """Base class for every fatal bosh-ssh error."""


class ConfigError(BoshSSHError):
    """Settings are missing or unusable."""


class DirectorError(BoshSSHError):
    """Director or UAA request failed."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class AuthenticationError(DirectorError):
    """UAA refused the client credentials."""


class DeploymentNotFoundError(DirectorError):
    """Director does not know the requested deployment."""


class NoMatchingInstancesError(BoshSSHError):
    """No instance matched the job-name prefixes."""

    def __init__(self, deployment: str, prefixes: list[str]) -> None:
        self.deployment = deployment
        self.prefixes = list(prefixes)
        joined = ", ".join(self.prefixes) or "<none>"
        super().__init__(f"No matching instances in deployment '{deployment}' for prefixes: {joined}")


class LayoutError(BoshSSHError, ValueError):
    """Pane count is outside the supported domain."""


class TmuxCommandError(BoshSSHError):
    """A tmux invocation did not succeed."""

    def __init__(self, result: CommandResult, message: str = "") -> None:
        self.result = result
        super().__init__(message or result.describe())


class SessionExistsError(BoshSSHError):
    """A tmux session with the requested name is already running."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"tmux session '{name}' already exists")


class TerminalError(BoshSSHError):
    """PTY allocation or raw-mode setup failed."""
