"""tmux session construction."""

from bosh_ssh.tmux.builder import Pane, PaneBuilder, PaneSession, SplitKind, SplitStep, plan_panes, ssh_command
from bosh_ssh.tmux.layout import LAYOUTS, Layout, select_layout
from bosh_ssh.tmux.runner import CommandResult, CommandStatus, TmuxRunner

__all__ = [
    "CommandResult",
    "CommandStatus",
    "LAYOUTS",
    "Layout",
    "Pane",
    "PaneBuilder",
    "PaneSession",
    "SplitKind",
    "SplitStep",
    "TmuxRunner",
    "plan_panes",
    "select_layout",
    "ssh_command",
]
