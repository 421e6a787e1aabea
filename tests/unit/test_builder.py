"""Unit tests for pane planning and the tmux pane builder."""

import pytest

from bosh_ssh.errors import LayoutError, SessionExistsError, TmuxCommandError
from bosh_ssh.tmux.builder import PaneBuilder, SplitKind, plan_panes, ssh_command
from bosh_ssh.tmux.layout import Layout, select_layout
from bosh_ssh.tmux.runner import CommandResult, CommandStatus
from tests.helpers import make_instances


class FakeRunner:
    """Records tmux invocations and hands out sequential pane ids."""

    tmux_command = "tmux"

    def __init__(self, fail_on=None, existing=False):
        self.calls = []
        self.killed = []
        self.fail_on = fail_on
        self.existing = existing
        self._next_pane = 0

    def has_session(self, name):
        return self.existing

    def kill_session(self, name):
        self.killed.append(name)
        return CommandResult(args=("tmux", "kill-session"), status=CommandStatus.OK, returncode=0)

    def check(self, *args):
        self.calls.append(args)
        if self.fail_on is not None and self.fail_on(args, len(self.calls)):
            raise TmuxCommandError(
                CommandResult(args=("tmux",) + args, status=CommandStatus.EXIT, returncode=1, stderr="boom")
            )
        stdout = ""
        if args[0] in ("new-session", "split-window"):
            stdout = f"%{self._next_pane}\n"
            self._next_pane += 1
        return CommandResult(args=("tmux",) + args, status=CommandStatus.OK, returncode=0, stdout=stdout)


def command_for(instance):
    return f"ssh {instance.slug}"


def subcommands(runner):
    return [call[0] for call in runner.calls]


def pane_commands(runner):
    return [call[-1] for call in runner.calls if call[0] in ("new-session", "split-window")]


@pytest.mark.parametrize("count", range(1, 26))
def test_plan_has_one_step_per_pane(count):
    steps = plan_panes(count, select_layout(count))

    assert len(steps) == count
    assert steps[0].kind is SplitKind.NEW
    assert all(s.kind is not SplitKind.NEW for s in steps[1:])
    # vertical splits come before horizontal ones
    kinds = [s.kind for s in steps[1:]]
    if SplitKind.HORIZONTAL in kinds:
        first_h = kinds.index(SplitKind.HORIZONTAL)
        assert SplitKind.VERTICAL not in kinds[first_h:]


@pytest.mark.parametrize("count", range(1, 26))
def test_plan_respects_layout(count):
    layout = select_layout(count)
    steps = plan_panes(count, layout)

    rows = {}
    for step in steps:
        rows[step.row] = rows.get(step.row, 0) + 1
    assert len(rows) <= layout.rows
    assert all(n <= layout.columns for n in rows.values())
    assert all(s.target is None or s.target < i for i, s in enumerate(steps))


def test_plan_for_three_instances():
    steps = plan_panes(3, Layout(rows=2, columns=2))

    assert [(s.kind, s.row, s.target) for s in steps] == [
        (SplitKind.NEW, 0, None),
        (SplitKind.VERTICAL, 1, 0),
        (SplitKind.HORIZONTAL, 0, 0),
    ]


def test_plan_splits_newest_pane_of_each_row():
    steps = plan_panes(6, Layout(rows=2, columns=3))

    assert [(s.kind, s.row, s.target) for s in steps] == [
        (SplitKind.NEW, 0, None),
        (SplitKind.VERTICAL, 1, 0),
        (SplitKind.HORIZONTAL, 0, 0),
        (SplitKind.HORIZONTAL, 0, 2),
        (SplitKind.HORIZONTAL, 1, 1),
        (SplitKind.HORIZONTAL, 1, 4),
    ]


def test_plan_rejects_small_layout():
    with pytest.raises(LayoutError):
        plan_panes(5, Layout(rows=2, columns=2))


def test_plan_rejects_zero():
    with pytest.raises(LayoutError):
        plan_panes(0, Layout(rows=1, columns=1))


def test_build_three_web_instances():
    """db/0 db/1 web/0 web/1 web/2 filtered by 'web' gives a 2x2 with three panes."""
    instances = make_instances("web/0", "web/1", "web/2")
    runner = FakeRunner()
    builder = PaneBuilder(runner, "bosh-ssh", command_for)

    session = builder.build(instances, select_layout(3))

    assert runner.calls == [
        ("new-session", "-d", "-s", "bosh-ssh", "-P", "-F", "#{pane_id}", "ssh web/0"),
        ("split-window", "-v", "-t", "%0", "-P", "-F", "#{pane_id}", "ssh web/1"),
        ("select-layout", "-t", "%0", "even-vertical"),
        ("split-window", "-h", "-t", "%0", "-P", "-F", "#{pane_id}", "ssh web/2"),
        ("set-window-option", "-t", "%0", "synchronize-panes", "on"),
    ]
    assert [p.instance.slug for p in session.panes] == ["web/0", "web/1", "web/2"]
    assert [p.row for p in session.panes] == [0, 1, 0]
    assert session.synchronized is True


@pytest.mark.parametrize("count", range(1, 14))
def test_build_pane_count_and_order(count):
    instances = make_instances(*[f"job/{i}" for i in range(count)])
    runner = FakeRunner()

    session = PaneBuilder(runner, "s", command_for).build(instances, select_layout(count))

    assert len(session.panes) == count
    assert [p.instance for p in session.panes] == instances
    assert pane_commands(runner) == [f"ssh job/{i}" for i in range(count)]


@pytest.mark.parametrize("count", range(1, 14))
def test_synchronize_once_and_last(count):
    instances = make_instances(*[f"job/{i}" for i in range(count)])
    runner = FakeRunner()

    PaneBuilder(runner, "s", command_for).build(instances, select_layout(count))

    names = subcommands(runner)
    assert names.count("set-window-option") == 1
    assert names[-1] == "set-window-option"
    assert names.count("select-layout") == 1


def test_single_instance():
    runner = FakeRunner()

    session = PaneBuilder(runner, "s", command_for).build(make_instances("db/0"), select_layout(1))

    assert subcommands(runner) == ["new-session", "select-layout", "set-window-option"]
    assert len(session.panes) == 1


def test_build_without_instances_runs_nothing():
    runner = FakeRunner()

    with pytest.raises(LayoutError):
        PaneBuilder(runner, "s", command_for).build([], select_layout(1))
    assert runner.calls == []


def test_existing_session_is_not_touched():
    runner = FakeRunner(existing=True)

    with pytest.raises(SessionExistsError):
        PaneBuilder(runner, "s", command_for).build(make_instances("db/0"), select_layout(1))
    assert runner.calls == []


def test_failure_leaves_session_by_default():
    """A failing split aborts the build; the partial session stays."""
    runner = FakeRunner(fail_on=lambda args, n: n == 3)
    instances = make_instances("a/0", "a/1", "a/2", "a/3")

    with pytest.raises(TmuxCommandError):
        PaneBuilder(runner, "s", command_for).build(instances, select_layout(4))

    assert len(runner.calls) == 3
    assert "set-window-option" not in subcommands(runner)
    assert runner.killed == []


def test_failure_with_cleanup_kills_session():
    runner = FakeRunner(fail_on=lambda args, n: args[0] == "select-layout")
    instances = make_instances("a/0", "a/1")

    with pytest.raises(TmuxCommandError):
        PaneBuilder(runner, "s", command_for, cleanup_on_error=True).build(instances, select_layout(2))

    assert runner.killed == ["s"]


def test_failed_new_session_needs_no_cleanup():
    runner = FakeRunner(fail_on=lambda args, n: n == 1)

    with pytest.raises(TmuxCommandError):
        PaneBuilder(runner, "s", command_for, cleanup_on_error=True).build(
            make_instances("a/0"), select_layout(1)
        )
    assert runner.killed == []


def test_ssh_command():
    instance = make_instances("web/abc-1")[0]

    assert ssh_command("cf", instance) == "bosh -d cf ssh web/abc-1"
    assert ssh_command("cf", instance, environment="prod") == "bosh -e prod -d cf ssh web/abc-1"
    assert ssh_command("my dep", instance, bosh_command="bosh2") == "bosh2 -d 'my dep' ssh web/abc-1"


def test_attach_command():
    runner = FakeRunner()

    session = PaneBuilder(runner, "bosh ssh", command_for).build(make_instances("a/0"), select_layout(1))

    assert session.attach_command == "tmux attach-session -t 'bosh ssh'"
