"""Project root search and runner selection.

The search walks upward from the start directory and stops at the first
level with any (non-ignored) match, so a nearby generic Makefile beats a
more specific marker further up the tree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from devrun.core.errors import NoRunnerAvailable, RunnerNotFound
from devrun.detection.registry import DetectedRunner, Ecosystem, detect_all

logger = logging.getLogger(__name__)

DEFAULT_MAX_LEVELS = 3


def search_runners(
    start_dir: Path,
    max_levels: int = DEFAULT_MAX_LEVELS,
    ignore_list: Iterable[str] = (),
) -> tuple[list[DetectedRunner], Path]:
    """Find the nearest directory with a detectable runner.

    Checks start_dir, then each parent up to ``max_levels`` levels above it.
    Returns the matches and the directory they were found in.
    """
    ignore = list(ignore_list)
    start_dir = Path(start_dir).resolve()
    directory = start_dir

    for level in range(max_levels + 1):
        runners = detect_all(directory, ignore)
        logger.debug(
            "Level %d: %s -> %s",
            level,
            directory,
            ", ".join(f"{r.name} ({r.detected_file})" for r in runners) or "nothing",
        )
        if runners:
            return runners, directory

        parent = directory.parent
        if parent == directory:
            logger.debug("Reached filesystem root at %s", directory)
            break
        directory = parent

    raise RunnerNotFound(start_dir, max_levels)


def select_runner(runners: list[DetectedRunner]) -> DetectedRunner:
    """Pick the runner with the lowest priority number."""
    if not runners:
        raise NoRunnerAvailable()
    # sorted() is stable, so detection order breaks ties
    return sorted(runners, key=lambda r: r.priority)[0]


@dataclass
class ConflictReport:
    """Which runner was selected and what else matched alongside it.

    ``same_ecosystem`` only holds ecosystems with more than one match (e.g. two
    Node lockfiles); those are worth a warning. Matches from other ecosystems
    are informational.
    """

    selected: DetectedRunner
    runners: list[DetectedRunner]
    same_ecosystem: dict[Ecosystem, list[DetectedRunner]] = field(default_factory=dict)
    other_ecosystems: list[DetectedRunner] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.same_ecosystem)


def check_conflicts(runners: list[DetectedRunner]) -> ConflictReport:
    """Select a runner and classify the remaining matches."""
    selected = select_runner(runners)

    by_ecosystem: dict[Ecosystem, list[DetectedRunner]] = {}
    for runner in runners:
        by_ecosystem.setdefault(runner.ecosystem, []).append(runner)

    report = ConflictReport(
        selected=selected,
        runners=list(runners),
        same_ecosystem={eco: group for eco, group in by_ecosystem.items() if len(group) > 1},
        other_ecosystems=[r for r in runners if r.ecosystem != selected.ecosystem],
    )

    for ecosystem, group in report.same_ecosystem.items():
        logger.warning(
            "Multiple %s runners detected: %s",
            ecosystem.value,
            ", ".join(f"{r.name} ({r.detected_file})" for r in group),
        )

    return report
