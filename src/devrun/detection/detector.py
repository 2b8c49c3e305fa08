"""RunnerDetector orchestrator - combines root search, runner selection, and script discovery."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from devrun.detection.registry import DetectedRunner
from devrun.detection.resolver import (
    DEFAULT_MAX_LEVELS,
    ConflictReport,
    check_conflicts,
    search_runners,
)
from devrun.detection.scripts import ScriptList, get_scripts_for_runner


@dataclass
class ProjectInfo:
    """Aggregated runner detection results for one invocation."""

    working_dir: Path
    report: ConflictReport
    scripts: ScriptList | None = None

    @property
    def runner(self) -> DetectedRunner:
        return self.report.selected

    @property
    def runners(self) -> list[DetectedRunner]:
        return self.report.runners


class RunnerDetector:
    """Finds the project root, selects its runner, and discovers its scripts.

    Nothing is cached: every call to detect() re-reads the filesystem.
    """

    def __init__(
        self,
        max_levels: int = DEFAULT_MAX_LEVELS,
        ignore_list: Iterable[str] = (),
    ) -> None:
        self.max_levels = max_levels
        self.ignore_list = list(ignore_list)

    def detect(self, start_dir: Path) -> ProjectInfo:
        """Raises RunnerNotFound / NoRunnerAvailable when nothing usable is found."""
        runners, working_dir = search_runners(start_dir, self.max_levels, self.ignore_list)
        report = check_conflicts(runners)
        return ProjectInfo(
            working_dir=working_dir,
            report=report,
            scripts=get_scripts_for_runner(report.selected, working_dir),
        )

    def detect_unfiltered(self, start_dir: Path) -> tuple[list[DetectedRunner], Path, int]:
        """Search without the ignore list, returning the matches, their directory,
        and how many levels above start_dir it is.
        """
        start_dir = Path(start_dir).resolve()
        runners, working_dir = search_runners(start_dir, self.max_levels, ())
        level = len(start_dir.parts) - len(working_dir.parts)
        return runners, working_dir, level
