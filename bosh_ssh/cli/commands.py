"""CLI commands for bosh-ssh."""

from __future__ import annotations

import sys
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from bosh_ssh import __version__
from bosh_ssh.errors import BoshSSHError, NoMatchingInstancesError, TmuxCommandError

app = typer.Typer(
    name="bosh-ssh",
    help="bosh-ssh - open synchronized tmux ssh panes on BOSH deployment instances",
    no_args_is_help=True,
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    if value:
        console.print(f"bosh-ssh v{__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


@app.command()
def main(
    prefixes: list[str] = typer.Argument(
        ...,
        metavar="JOB_PREFIX...",
        help="Job-name prefixes matched against group/id, e.g. 'web' or 'db/0'.",
    ),
    deployment: str = typer.Option(..., "--deployment", "-d", help="Deployment name."),
    environment: str = typer.Option(
        "",
        "--environment",
        "-e",
        help="Environment alias passed to 'bosh ssh' in every pane.",
    ),
    session: str = typer.Option("", "--session", "-s", help="tmux session name (default: bosh-ssh)."),
    cleanup_on_error: Optional[bool] = typer.Option(
        None,
        "--cleanup-on-error/--keep-on-error",
        help="Kill a partially built tmux session when pane creation fails.",
    ),
    no_attach: bool = typer.Option(False, "--no-attach", help="Build the tmux session without attaching."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show matching instances and panes, run nothing."),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Open one 'bosh ssh' pane per matching instance in a synchronized tmux session."""
    del version
    configure_logging(verbose)

    try:
        run(
            deployment=deployment,
            prefixes=prefixes,
            environment=environment,
            session=session,
            cleanup_on_error=cleanup_on_error,
            attach=not no_attach,
            dry_run=dry_run,
        )
    except NoMatchingInstancesError as exc:
        err_console.print(f"[red]No matching instances[/red] in deployment [cyan]{exc.deployment}[/cyan]")
        err_console.print(f"Prefixes: {', '.join(exc.prefixes)}")
        raise typer.Exit(1)
    except TmuxCommandError as exc:
        err_console.print(f"[red]tmux failed:[/red] {exc}")
        if exc.result.stderr.strip():
            err_console.print(f"[dim]{exc.result.stderr.strip()}[/dim]")
        raise typer.Exit(1)
    except BoshSSHError as exc:
        logger.debug(f"{type(exc).__name__}: {exc}")
        err_console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        err_console.print("[yellow]Interrupted[/yellow]")
        raise typer.Exit(130)


def run(
    deployment: str,
    prefixes: list[str],
    environment: str = "",
    session: str = "",
    cleanup_on_error: bool | None = None,
    attach: bool = True,
    dry_run: bool = False,
) -> None:
    """Resolve matching instances, build the tmux session and attach to it."""
    from bosh_ssh.config import load_settings
    from bosh_ssh.director import build_director, build_uaa, uaa_mismatch
    from bosh_ssh.instances import filter_instances
    from bosh_ssh.terminal import SessionAttacher
    from bosh_ssh.tmux import PaneBuilder, TmuxRunner, plan_panes, select_layout, ssh_command

    settings = load_settings({"session_name": session, "cleanup_on_error": cleanup_on_error})

    uaa = build_uaa(settings)
    director = build_director(settings, uaa)

    info = director.info()
    console.print(f"Director: [cyan]{info.name}[/cyan]")
    if uaa_mismatch(info, settings.uaa_url):
        err_console.print(
            f"[yellow]Director advertises UAA {info.uaa_url}[/yellow], using UAA_URL={settings.uaa_url}"
        )

    instances = director.instances(deployment)
    matched = filter_instances(instances, prefixes)
    if not matched:
        raise NoMatchingInstancesError(deployment, prefixes)

    layout = select_layout(len(matched))
    console.print(f"Found {len(matched)} jobs: {', '.join(i.slug for i in matched)}")
    console.print(f"Layout: [cyan]{layout.rows}[/cyan] rows x [cyan]{layout.columns}[/cyan] columns")

    def command_for(instance) -> str:
        return ssh_command(deployment, instance, settings.bosh_command, environment)

    if dry_run:
        table = Table(title=f"tmux session {settings.session_name}")
        table.add_column("#", justify="right")
        table.add_column("Row", justify="right")
        table.add_column("Split")
        table.add_column("Instance", style="cyan")
        table.add_column("Command", style="dim")
        for index, step in enumerate(plan_panes(len(matched), layout)):
            target = "" if step.target is None else f" of #{step.target}"
            table.add_row(
                str(index),
                str(step.row),
                f"{step.kind.value}{target}",
                matched[index].slug,
                command_for(matched[index]),
            )
        console.print(table)
        return

    runner = TmuxRunner(settings.tmux_command, timeout_s=settings.tmux_timeout_s)
    builder = PaneBuilder(
        runner,
        session_name=settings.session_name,
        command_for=command_for,
        cleanup_on_error=settings.cleanup_on_error,
    )
    try:
        pane_session = builder.build(matched, layout)
    except TmuxCommandError:
        if not settings.cleanup_on_error and runner.has_session(settings.session_name):
            err_console.print(
                f"[yellow]Partially built session left running.[/yellow] "
                f"Remove it with: [cyan]tmux kill-session -t {settings.session_name}[/cyan]"
            )
        raise

    if not attach:
        console.print(f"[green]OK[/green] Session ready: [cyan]{pane_session.attach_command}[/cyan]")
        return

    SessionAttacher(tmux_command=settings.tmux_command).attach(pane_session.name)


if __name__ == "__main__":
    app()
