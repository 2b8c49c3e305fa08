"""Rich output helpers: errors, script tables, runner analysis, diagnostics."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from devrun import __version__

if TYPE_CHECKING:
    from devrun.config.settings import DevrunSettings
    from devrun.core.errors import ScriptNotFound
    from devrun.detection.detector import ProjectInfo
    from devrun.detection.registry import DetectedRunner
    from devrun.detection.resolver import ConflictReport
    from devrun.detection.scripts import ScriptList

console = Console()
err_console = Console(stderr=True)


def get_version_string() -> str:
    """Return a version string like 'devrun 0.1.0 (commit abc1234, clean)'."""
    base = f"devrun {__version__}"
    try:
        import git

        project_root = Path(__file__).resolve().parents[3]
        repo = git.Repo(project_root)
        sha7 = repo.head.commit.hexsha[:7]
        state = "dirty" if repo.is_dirty() else "clean"
        return f"{base} (commit {sha7}, {state})"
    except Exception:
        return base


def print_error(message: str) -> None:
    err_console.print(f"[bold red]Error:[/bold red] {escape(message)}")


def print_hint(message: str) -> None:
    err_console.print(f"[dim]Hint: {escape(message)}[/dim]")


def print_script_not_found(error: ScriptNotFound) -> None:
    """Show the missing script, what is available, and a suggestion if any."""
    print_error(str(error))
    if error.available:
        console.print(f"\n[dim]Available scripts: {escape(', '.join(error.available))}[/dim]")
    else:
        console.print("\n[dim]No scripts are defined in this project.[/dim]")
    if error.suggestion:
        console.print(
            f"\nDid you mean: [cyan]devrun run[/cyan] [bold green]{escape(error.suggestion)}[/bold green]"
        )


def print_dry_run(command_line: str, working_dir: Path) -> None:
    console.print(f"[dim]Would run:[/dim] [bold]{escape(command_line)}[/bold]")
    console.print(f"[dim]      in:[/dim] {escape(str(working_dir))}")


def print_timing(seconds: float) -> None:
    """Print elapsed time as '1.23s' or '2m 5.0s'."""
    if seconds < 60.0:
        err_console.print(f"\n[green]✓[/green] Completed in {seconds:.2f}s")
    else:
        minutes = int(seconds // 60)
        err_console.print(f"\n[green]✓[/green] Completed in {minutes}m {seconds % 60:.1f}s")


def print_scripts(runner: DetectedRunner, scripts: ScriptList | None) -> None:
    """Display the detected runner and its scripts."""
    console.print(
        f"Detected: [bold green]{runner.name}[/bold green] [dim]({escape(runner.detected_file)})[/dim]\n"
    )
    if scripts is None or not scripts.scripts:
        console.print("[dim]No scripts found for this project type.[/dim]")
        return

    table = Table(title=f"Available scripts ({scripts.source_file})", border_style="blue")
    table.add_column("Script", style="cyan")
    table.add_column("Command", style="dim")
    for script in scripts.scripts:
        table.add_row(escape(script.name), escape(script.command))
    console.print(table)


def print_why(
    all_runners: list[DetectedRunner],
    selected: DetectedRunner | None,
    ignore_list: list[str],
    directory: Path,
    level: int,
) -> None:
    """Explain which runner was chosen and why the others were not."""
    ignored = {name.lower() for name in ignore_list}

    console.print("[bold underline]Runner Selection Analysis[/bold underline]\n")

    if selected is None:
        console.print("[red]All detected runners were ignored![/red]\n")
        console.print("[bold]Detected (but ignored):[/bold]")
        for runner in all_runners:
            console.print(f"  - {runner.name} - {escape(runner.detected_file)}")
        return

    console.print(f"[bold]Using:[/bold] [bold green]{selected.name}[/bold green]")
    console.print(
        f"  Found [cyan]{escape(selected.detected_file)}[/cyan] in "
        f"{escape(str(directory))} (level {level})"
    )
    console.print(f"  Priority: {selected.priority} (lower = higher priority)")

    others = [r for r in all_runners if r != selected]
    if others:
        console.print("\n[bold]Other detected runners:[/bold]")
        for runner in others:
            if runner.name.lower() in ignored:
                status = "[red](ignored)[/red]"
            else:
                status = f"[dim](priority {runner.priority})[/dim]"
            console.print(f"  - {runner.name} - {escape(runner.detected_file)} {status}")


def print_doctor(
    info: ProjectInfo,
    all_runners: list[DetectedRunner],
    tool_status: dict[str, str | None],
    report: ConflictReport,
) -> None:
    """Display the project diagnosis.

    ``tool_status`` maps tool name -> version string ("installed" when the
    version is unknown) or None when the tool is missing.
    """
    console.print("[bold underline]devrun Project Diagnosis[/bold underline]\n")
    console.print("[bold]Project Detection:[/bold]")
    console.print(f"  Project root: {escape(str(info.working_dir))}\n")

    table = Table(title="Detected Runners", border_style="blue")
    table.add_column("", width=1)
    table.add_column("Runner", style="bold")
    table.add_column("Marker")
    table.add_column("Priority", justify="right")
    table.add_column("Status")
    for runner in all_runners:
        version = tool_status.get(runner.name)
        if version is None:
            mark, status = "[red]✗[/red]", "[red]not installed[/red]"
        else:
            mark, status = "[green]✓[/green]", f"[dim]{escape(version)}[/dim]"
        table.add_row(mark, runner.name, escape(runner.detected_file), str(runner.priority), status)
    console.print(table)

    console.print("\n[bold]Conflict Analysis:[/bold]")
    if report.has_conflicts:
        for ecosystem, runners in report.same_ecosystem.items():
            names = ", ".join(r.name for r in runners)
            console.print(
                f"  [yellow]⚠[/yellow] {ecosystem.value} ecosystem has multiple lockfiles: "
                f"[yellow]{names}[/yellow]"
            )
    else:
        console.print("  [green]✓[/green] No lockfile conflicts detected")

    if info.scripts is not None:
        console.print(
            f"\n[green]✓[/green] {len(info.scripts.scripts)} scripts available in "
            f"{info.scripts.source_file}"
        )


def print_settings(settings: DevrunSettings, config_file: Path | None) -> None:
    if config_file:
        console.print(f"Config file: [cyan]{escape(str(config_file))}[/cyan]")
    else:
        console.print("[dim]No config file found (using defaults)[/dim]")

    console.print("\n[bold]Search:[/bold]")
    console.print(f"  Levels: {settings.search.levels}")
    console.print(f"  Ignore tools: {', '.join(settings.search.ignore_tools) or '-'}")

    console.print("\n[bold]Output:[/bold]")
    console.print(f"  Verbose: {settings.output.verbose}")
    console.print(f"  Quiet: {settings.output.quiet}")
    console.print(f"  Show timing: {settings.output.show_timing}")

    console.print("\n[bold]Aliases:[/bold]")
    if settings.aliases:
        for alias, target in settings.aliases.items():
            console.print(f"  {escape(alias)} -> {escape(target)}")
    else:
        console.print("  [dim]none[/dim]")
