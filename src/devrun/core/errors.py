"""Error kinds raised by the dispatch engine, and the process exit codes they map to."""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Sequence


class ExitCode(enum.IntEnum):
    SUCCESS = 0
    GENERIC_ERROR = 1
    RUNNER_NOT_FOUND = 2
    PERMISSION_DENIED = 126
    TOOL_NOT_FOUND = 127


class DevrunError(Exception):
    """Base class for failures that end the current invocation."""

    exit_code: int = ExitCode.GENERIC_ERROR


class RunnerNotFound(DevrunError):
    """No detector matched from start_dir up through max_levels ancestors."""

    exit_code = ExitCode.RUNNER_NOT_FOUND

    def __init__(self, start_dir: Path, max_levels: int) -> None:
        self.start_dir = start_dir
        self.max_levels = max_levels
        super().__init__(
            f"No runner found in {start_dir} or {max_levels} parent "
            f"director{'y' if max_levels == 1 else 'ies'}"
        )


class NoRunnerAvailable(DevrunError):
    exit_code = ExitCode.RUNNER_NOT_FOUND

    def __init__(self, message: str = "No runner available to execute the command") -> None:
        super().__init__(message)


class ScriptNotFound(DevrunError):
    """The requested script is not defined by the project."""

    def __init__(
        self,
        script: str,
        available: Sequence[str],
        suggestion: str | None = None,
    ) -> None:
        self.script = script
        self.available = list(available)
        self.suggestion = suggestion
        super().__init__(f'Script "{script}" not found')


class SpawnFailure(DevrunError):
    """The tool could not be started at all (missing, not executable, ...)."""

    def __init__(self, program: str, reason: str, exit_code: int = ExitCode.GENERIC_ERROR) -> None:
        self.program = program
        self.reason = reason
        self.exit_code = exit_code
        super().__init__(f"Failed to run '{program}': {reason}")
