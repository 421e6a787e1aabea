"""Builds the tiled, synchronized tmux session for a set of instances."""

from __future__ import annotations

import enum
import shlex
from dataclasses import dataclass, field
from typing import Callable, Sequence

from loguru import logger

from bosh_ssh.director.models import Instance
from bosh_ssh.errors import BoshSSHError, LayoutError, SessionExistsError, TmuxCommandError
from bosh_ssh.tmux.layout import Layout
from bosh_ssh.tmux.runner import CommandResult, TmuxRunner

PANE_ID_FORMAT = "#{pane_id}"


@dataclass(frozen=True)
class Pane:
    """One tmux pane running a remote shell on one instance."""

    pane_id: str
    row: int
    instance: Instance


@dataclass
class PaneSession:
    """A built tmux session, panes in creation order."""

    name: str
    layout: Layout
    panes: list[Pane] = field(default_factory=list)
    created: bool = False
    synchronized: bool = False
    tmux_command: str = "tmux"

    @property
    def attach_command(self) -> str:
        return shlex.join(shlex.split(self.tmux_command) + ["attach-session", "-t", self.name])


class SplitKind(enum.Enum):
    """How a pane comes into existence."""

    NEW = "new"
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"

    @property
    def flag(self) -> str:
        return {SplitKind.VERTICAL: "-v", SplitKind.HORIZONTAL: "-h"}.get(self, "")


@dataclass(frozen=True)
class SplitStep:
    """Creation of pane number ``i``: split ``target`` (a pane index) into ``row``."""

    kind: SplitKind
    row: int
    target: int | None = None


def plan_panes(count: int, layout: Layout) -> list[SplitStep]:
    """
    Split sequence giving exactly ``count`` panes in ``layout``, one step per pane.

    Rows come from vertical splits of the newest pane. Each row is then widened with
    horizontal splits of its newest pane, up to ``layout.columns - 1`` times.
    """
    if count < 1:
        raise LayoutError(f"Pane count must be at least 1, got {count}")
    if layout.capacity < count:
        raise LayoutError(f"Layout {layout} holds {layout.capacity} panes, need {count}")

    steps = [SplitStep(kind=SplitKind.NEW, row=0)]
    row_tails = [0]

    for _ in range(layout.rows - 1):
        if len(steps) >= count:
            break
        steps.append(SplitStep(kind=SplitKind.VERTICAL, row=len(row_tails), target=len(steps) - 1))
        row_tails.append(len(steps) - 1)

    y = 0
    while len(steps) < count and y < len(row_tails):
        for _ in range(layout.columns - 1):
            if len(steps) >= count:
                break
            steps.append(SplitStep(kind=SplitKind.HORIZONTAL, row=y, target=row_tails[y]))
            row_tails[y] = len(steps) - 1
        y += 1

    return steps


def ssh_command(
    deployment: str,
    instance: Instance,
    bosh_command: str = "bosh",
    environment: str = "",
) -> str:
    """Shell command a pane runs: ``bosh [-e ENV] -d DEPLOYMENT ssh GROUP/ID``."""
    argv = shlex.split(bosh_command or "bosh")
    if environment:
        argv += ["-e", environment]
    argv += ["-d", deployment, "ssh", instance.slug]
    return shlex.join(argv)


class PaneBuilder:
    """
    Realizes one pane per instance inside a single tmux window.

    Rows are created first with vertical splits, evened out, then each row is filled
    with horizontal splits. Every tmux call must succeed before the next one is issued.
    """

    def __init__(
        self,
        runner: TmuxRunner,
        session_name: str,
        command_for: Callable[[Instance], str],
        cleanup_on_error: bool = False,
    ) -> None:
        self.runner = runner
        self.session_name = session_name
        self.command_for = command_for
        self.cleanup_on_error = cleanup_on_error

    def build(self, instances: Sequence[Instance], layout: Layout) -> PaneSession:
        """Create the session and return it with one pane per instance, synchronized."""
        if not instances:
            raise LayoutError("Cannot build a tmux session without instances")
        steps = plan_panes(len(instances), layout)
        if self.runner.has_session(self.session_name):
            raise SessionExistsError(self.session_name)

        session = PaneSession(name=self.session_name, layout=layout, tmux_command=self.runner.tmux_command)
        try:
            self._build(session, instances, steps)
        except (BoshSSHError, KeyboardInterrupt):
            self._handle_failure(session)
            raise
        return session

    def _build(self, session: PaneSession, instances: Sequence[Instance], steps: list[SplitStep]) -> None:
        pane_ids: list[str] = []
        rebalanced = False

        for index, step in enumerate(steps):
            instance = instances[index]
            if step.kind is SplitKind.HORIZONTAL and not rebalanced:
                self._rebalance(pane_ids[0])
                rebalanced = True

            if step.kind is SplitKind.NEW:
                pane_id = self._new_session(session, instance)
            else:
                pane_id = self._split(step.kind.flag, pane_ids[step.target], instance)
            pane_ids.append(pane_id)
            session.panes.append(Pane(pane_id=pane_id, row=step.row, instance=instance))

        if not rebalanced:
            self._rebalance(pane_ids[0])
        self.runner.check("set-window-option", "-t", pane_ids[0], "synchronize-panes", "on")
        session.synchronized = True
        logger.info(f"[tmux] session {session.name}: {len(session.panes)} panes, layout {session.layout}, synchronized")

    def _rebalance(self, target: str) -> None:
        self.runner.check("select-layout", "-t", target, "even-vertical")

    def _new_session(self, session: PaneSession, instance: Instance) -> str:
        result = self.runner.check(
            "new-session", "-d",
            "-s", self.session_name,
            "-P", "-F", PANE_ID_FORMAT,
            self.command_for(instance),
        )
        session.created = True
        logger.info(f"[tmux] new session {self.session_name} -> {instance.slug}")
        return _pane_id(result)

    def _split(self, direction: str, target: str, instance: Instance) -> str:
        result = self.runner.check(
            "split-window", direction,
            "-t", target,
            "-P", "-F", PANE_ID_FORMAT,
            self.command_for(instance),
        )
        logger.info(f"[tmux] split-window {direction} -t {target} -> {instance.slug}")
        return _pane_id(result)

    def _handle_failure(self, session: PaneSession) -> None:
        if not session.created:
            return
        if self.cleanup_on_error:
            logger.warning(f"[tmux] killing partially built session {session.name}")
            self.runner.kill_session(session.name)
        else:
            logger.warning(f"[tmux] leaving partially built session {session.name} with {len(session.panes)} pane(s)")


def _pane_id(result: CommandResult) -> str:
    lines = result.stdout.strip().splitlines()
    if not lines or not lines[0].startswith("%"):
        raise TmuxCommandError(result, f"`{result.command_line}` did not report a pane id")
    return lines[0].strip()
