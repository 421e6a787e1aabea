"""PTY-level attach to the tmux session."""

from .attach import ResizeEvents, SessionAttacher, exit_on_signals, raw_mode
from .backend import PTYBackend, build_backend

__all__ = [
    "PTYBackend",
    "ResizeEvents",
    "SessionAttacher",
    "build_backend",
    "exit_on_signals",
    "raw_mode",
]
