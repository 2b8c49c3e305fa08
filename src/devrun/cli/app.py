"""Typer CLI commands: run, list, why, doctor, config, version."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

import typer
from rich.logging import RichHandler

from devrun.cli.display import (
    console,
    err_console,
    get_version_string,
    print_dry_run,
    print_error,
    print_hint,
    print_script_not_found,
    print_timing,
)
from devrun.core.errors import DevrunError, ExitCode, RunnerNotFound, ScriptNotFound

app = typer.Typer(
    name="devrun",
    help="Run project scripts with whichever tool the project uses.",
    no_args_is_help=True,
)

logger = logging.getLogger(__name__)


def _version_callback(value: bool) -> None:
    if value:
        console.print(get_version_string())
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Run project scripts with whichever tool the project uses."""


def _configure_logging(verbose: bool, quiet: bool) -> None:
    """Route devrun's loggers through rich on stderr."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    root = logging.getLogger("devrun")
    root.handlers.clear()
    root.addHandler(RichHandler(console=err_console, show_time=False, show_path=verbose))
    root.setLevel(level)
    root.propagate = False


def _load(
    path: Path,
    levels: Optional[int],
    ignore: Optional[list[str]],
    verbose: bool,
    quiet: bool,
):
    """Merge CLI options over the config file and return the settings."""
    from devrun.config.loader import load_settings

    overrides: dict = {}
    if levels is not None:
        overrides.setdefault("search", {})["levels"] = levels
    if verbose:
        overrides.setdefault("output", {})["verbose"] = True
    if quiet:
        overrides.setdefault("output", {})["quiet"] = True

    settings = load_settings(project_path=path, overrides=overrides)
    # CLI ignores extend the configured ones instead of replacing them
    if ignore:
        settings.search.ignore_tools = [*settings.search.ignore_tools, *ignore]

    _configure_logging(settings.output.verbose, settings.output.quiet)
    return settings


def _fail(error: DevrunError) -> typer.Exit:
    print_error(str(error))
    if isinstance(error, RunnerNotFound):
        print_hint(
            "Use --levels=N to increase search depth or check if you're in the right directory."
        )
    return typer.Exit(int(error.exit_code))


@app.command(
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def run(
    command: str = typer.Argument(..., help="Script or target to run (aliases allowed)"),
    args: Optional[list[str]] = typer.Argument(None, help="Extra arguments passed to the tool"),
    path: Path = typer.Option(Path.cwd(), "--path", "-p", help="Directory to start searching from"),
    levels: Optional[int] = typer.Option(
        None, "--levels", "-l", min=0, max=255, help="Parent directories to search"
    ),
    ignore: Optional[list[str]] = typer.Option(
        None, "--ignore", "-i", help="Tool to skip during detection (repeatable)"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Show the command without running it"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detection details"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print errors"),
) -> None:
    """Run a project script through the detected tool."""
    from devrun.core.dispatch import dispatch
    from devrun.detection.detector import RunnerDetector

    settings = _load(path, levels, ignore, verbose, quiet)
    command = settings.resolve_alias(command)

    detector = RunnerDetector(settings.search.levels, settings.search.ignore_tools)
    try:
        info = detector.detect(path)
    except DevrunError as e:
        raise _fail(e)

    start_time = time.perf_counter()
    try:
        result = dispatch(info.runner, command, args or [], info.working_dir, dry_run=dry_run)
    except ScriptNotFound as e:
        print_script_not_found(e)
        raise typer.Exit(int(e.exit_code))
    except DevrunError as e:
        raise _fail(e)

    if result.dry_run:
        print_dry_run(result.command_line, result.working_dir)
        raise typer.Exit(ExitCode.SUCCESS)

    if settings.output.show_timing and not settings.output.quiet:
        print_timing(time.perf_counter() - start_time)

    raise typer.Exit(int(result.exit_code))


@app.command("list")
def list_scripts(
    path: Path = typer.Option(Path.cwd(), "--path", "-p", help="Directory to start searching from"),
    levels: Optional[int] = typer.Option(
        None, "--levels", "-l", min=0, max=255, help="Parent directories to search"
    ),
    ignore: Optional[list[str]] = typer.Option(
        None, "--ignore", "-i", help="Tool to skip during detection (repeatable)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detection details"),
) -> None:
    """List the scripts available in the current project."""
    from devrun.cli.display import print_scripts
    from devrun.detection.detector import RunnerDetector

    settings = _load(path, levels, ignore, verbose, False)
    detector = RunnerDetector(settings.search.levels, settings.search.ignore_tools)
    try:
        info = detector.detect(path)
    except DevrunError as e:
        raise _fail(e)

    print_scripts(info.runner, info.scripts)


@app.command()
def why(
    path: Path = typer.Option(Path.cwd(), "--path", "-p", help="Directory to start searching from"),
    levels: Optional[int] = typer.Option(
        None, "--levels", "-l", min=0, max=255, help="Parent directories to search"
    ),
    ignore: Optional[list[str]] = typer.Option(
        None, "--ignore", "-i", help="Tool to skip during detection (repeatable)"
    ),
) -> None:
    """Explain which runner would be used and why."""
    from devrun.cli.display import print_why
    from devrun.detection.detector import RunnerDetector
    from devrun.detection.registry import is_ignored
    from devrun.detection.resolver import select_runner

    settings = _load(path, levels, ignore, False, False)
    ignore_list = settings.search.ignore_tools
    detector = RunnerDetector(settings.search.levels, ignore_list)

    try:
        all_runners, directory, level = detector.detect_unfiltered(path)
    except DevrunError as e:
        raise _fail(e)

    usable = [r for r in all_runners if not is_ignored(r, ignore_list)]
    selected = select_runner(usable) if usable else None
    print_why(all_runners, selected, ignore_list, directory, level)


@app.command()
def doctor(
    path: Path = typer.Option(Path.cwd(), "--path", "-p", help="Directory to start searching from"),
    levels: Optional[int] = typer.Option(
        None, "--levels", "-l", min=0, max=255, help="Parent directories to search"
    ),
    ignore: Optional[list[str]] = typer.Option(
        None, "--ignore", "-i", help="Tool to skip during detection (repeatable)"
    ),
) -> None:
    """Diagnose the project: runners, installed tools, conflicts, scripts."""
    from devrun.cli.display import print_doctor
    from devrun.core.dispatch import get_tool_version, is_tool_installed
    from devrun.detection.detector import RunnerDetector
    from devrun.detection.registry import detect_all
    from devrun.detection.resolver import check_conflicts

    settings = _load(path, levels, ignore, False, False)
    detector = RunnerDetector(settings.search.levels, settings.search.ignore_tools)
    try:
        info = detector.detect(path)
    except DevrunError:
        err_console.print("[red]✗[/red] No project detected")
        raise typer.Exit(ExitCode.RUNNER_NOT_FOUND)

    all_runners = detect_all(info.working_dir)
    tool_status: dict[str, str | None] = {}
    for runner in all_runners:
        if runner.name in tool_status:
            continue
        if is_tool_installed(runner.name):
            tool_status[runner.name] = get_tool_version(runner.name) or "installed"
        else:
            tool_status[runner.name] = None

    print_doctor(info, all_runners, tool_status, check_conflicts(all_runners))


@app.command()
def config(
    path: Path = typer.Option(Path.cwd(), "--path", "-p", help="Project path"),
    save: bool = typer.Option(False, "--save", help="Write the effective settings to a config file"),
) -> None:
    """Show current configuration."""
    from devrun.cli.display import print_settings
    from devrun.config.loader import find_config_file, load_settings, save_settings

    settings = load_settings(project_path=path)
    if save:
        written = save_settings(settings, project_path=path)
        console.print(f"[green]Saved settings to[/green] [cyan]{written}[/cyan]")
        return

    print_settings(settings, find_config_file(path))


@app.command()
def version() -> None:
    """Show the installed devrun version."""
    console.print(get_version_string())
