"""Validate a requested script and run it through the detected tool."""

from __future__ import annotations

import logging
import re
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from devrun.core.errors import ExitCode, ScriptNotFound, SpawnFailure
from devrun.core.fuzzy import is_exact_match, suggest
from devrun.detection.registry import DetectedRunner, Ecosystem
from devrun.detection.scripts import get_scripts_for_runner

logger = logging.getLogger(__name__)

# Arguments placed between the tool and the script name, e.g. "npm run build".
# Tools not listed take the command directly ("cargo test", "make clean").
INVOCATION_PREFIXES: dict[str, tuple[str, ...]] = {
    "npm": ("run",),
    "pnpm": ("run",),
    "yarn": ("run",),
    "bun": ("run",),
    "deno": ("task",),
    "uv": ("run",),
    "poetry": ("run",),
    "pdm": ("run",),
    "pipenv": ("run",),
    "bundle": ("exec", "rake"),
    "zig": ("build",),
}

# Ecosystems whose script names are checked before dispatch
VALIDATED_ECOSYSTEMS = frozenset({Ecosystem.NODEJS})

VERSION_FLAGS: dict[str, str] = {
    "npm": "-v",
    "pnpm": "-v",
    "yarn": "-v",
    "bun": "-v",
    "go": "version",
}

_VERSION_RE = re.compile(r"\d+(?:\.\d+)+")

SpawnFn = Callable[[str, Sequence[str], Path], int]


@dataclass
class DispatchResult:
    """Outcome of a dispatch. A non-zero exit_code is the child's own status."""

    program: str
    args: list[str]
    working_dir: Path
    exit_code: int = ExitCode.SUCCESS
    dry_run: bool = False

    @property
    def command_line(self) -> str:
        return shlex.join([self.program, *self.args])


def build_invocation(
    runner: DetectedRunner, command: str, args: Sequence[str] = ()
) -> tuple[str, list[str]]:
    """Return (program, argv) for running ``command`` with ``runner``."""
    prefix = INVOCATION_PREFIXES.get(runner.name, ())
    return runner.name, [*prefix, command, *args]


def validate_script(runner: DetectedRunner, command: str, working_dir: Path) -> None:
    """Raise ScriptNotFound if the runner's project does not define ``command``.

    Only applies to ecosystems in VALIDATED_ECOSYSTEMS, and only when the
    project's scripts could be discovered at all.
    """
    if runner.ecosystem not in VALIDATED_ECOSYSTEMS:
        return

    script_list = get_scripts_for_runner(runner, working_dir)
    if script_list is None:
        return

    names = script_list.names
    if not is_exact_match(command, names):
        raise ScriptNotFound(command, names, suggest(command, names))


def run_process(program: str, args: Sequence[str], cwd: Path) -> int:
    """Run a program with inherited stdio and return its exit code.

    Raises SpawnFailure if the program cannot be started.
    """
    executable = shutil.which(program)
    if executable is None:
        raise SpawnFailure(program, "command not found on PATH", ExitCode.TOOL_NOT_FOUND)

    logger.debug("Running: %s (cwd=%s)", shlex.join([program, *args]), cwd)
    try:
        proc = subprocess.Popen([executable, *args], cwd=str(cwd))
    except PermissionError as exc:
        raise SpawnFailure(program, f"permission denied ({exc})", ExitCode.PERMISSION_DENIED) from exc
    except FileNotFoundError as exc:
        raise SpawnFailure(program, str(exc), ExitCode.TOOL_NOT_FOUND) from exc
    except OSError as exc:
        raise SpawnFailure(program, str(exc)) from exc

    try:
        try:
            returncode = proc.wait()
        except KeyboardInterrupt:
            # The terminal delivers SIGINT to the child as well; let it finish.
            returncode = proc.wait()
    finally:
        if proc.poll() is None:
            proc.kill()
            proc.wait()

    if returncode < 0:
        # Killed by a signal
        logger.debug("%s terminated by signal %d", program, -returncode)
        return ExitCode.GENERIC_ERROR
    return returncode


def dispatch(
    runner: DetectedRunner,
    command: str,
    args: Sequence[str],
    working_dir: Path,
    dry_run: bool = False,
    spawn: SpawnFn | None = None,
) -> DispatchResult:
    """Run ``command`` through ``runner`` in ``working_dir``.

    Raises ScriptNotFound for unknown Node.js scripts and SpawnFailure when
    the tool cannot be started. The child's exit code is returned unchanged.
    """
    validate_script(runner, command, working_dir)

    program, argv = build_invocation(runner, command, args)
    result = DispatchResult(program=program, args=argv, working_dir=working_dir, dry_run=dry_run)

    if dry_run:
        logger.info("Dry run: %s (cwd=%s)", result.command_line, working_dir)
        return result

    result.exit_code = (spawn or run_process)(program, argv, working_dir)
    return result


def is_tool_installed(tool: str) -> bool:
    return shutil.which(tool) is not None


def get_tool_version(tool: str, timeout: float = 10.0) -> str | None:
    """Best-effort version lookup (``tool --version`` or equivalent)."""
    executable = shutil.which(tool)
    if executable is None:
        return None

    flag = VERSION_FLAGS.get(tool, "--version")
    try:
        result = subprocess.run(
            [executable, flag],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        logger.debug("Could not get %s version: %s", tool, exc)
        return None

    if result.returncode != 0:
        return None

    output = result.stdout.strip()
    match = _VERSION_RE.search(output)
    if match:
        return match.group(0)
    return output.splitlines()[0] if output else None
