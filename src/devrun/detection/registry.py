"""Runner detection based on marker files, in fixed priority order.

Each DetectorRule maps one tool to the marker files that identify it. Rules
only check for file existence in a single directory; they never read file
contents and never recurse.
"""

from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

logger = logging.getLogger(__name__)


class Ecosystem(str, enum.Enum):
    NODEJS = "nodejs"
    DENO = "deno"
    RUST = "rust"
    PYTHON = "python"
    GO = "go"
    RUBY = "ruby"
    JVM = "jvm"
    ELIXIR = "elixir"
    JUST = "just"
    SWIFT = "swift"
    ZIG = "zig"
    GENERIC = "generic"


@dataclass(frozen=True)
class DetectedRunner:
    """A tool found by one detector in one directory."""

    name: str
    detected_file: str
    ecosystem: Ecosystem
    priority: int


@dataclass(frozen=True)
class DetectorRule:
    """Declarative detector: the first present marker wins.

    ``excludes`` lets a fallback rule (bare package.json, bare pyproject.toml)
    stay silent when a more specific marker for the same tool family exists.
    """

    name: str
    ecosystem: Ecosystem
    priority: int
    markers: tuple[str, ...]
    excludes: tuple[str, ...] = ()

    def detect(self, directory: Path, entries: set[str] | None = None) -> list[DetectedRunner]:
        if entries is None:
            entries = list_entries(directory)
        if any(name in entries for name in self.excludes):
            return []
        for marker in self.markers:
            if marker in entries:
                return [DetectedRunner(self.name, marker, self.ecosystem, self.priority)]
        return []


NODE_LOCKFILES = ("bun.lockb", "bun.lock", "pnpm-lock.yaml", "yarn.lock", "package-lock.json")
PYTHON_LOCKFILES = ("uv.lock", "poetry.lock", "pdm.lock", "Pipfile.lock", "Pipfile")

# Lower priority number wins. Specific lockfiles come first, generic
# build systems last; Makefile is the catch-all.
DETECTORS: tuple[DetectorRule, ...] = (
    DetectorRule("bun", Ecosystem.NODEJS, 1, ("bun.lockb", "bun.lock")),
    DetectorRule("pnpm", Ecosystem.NODEJS, 2, ("pnpm-lock.yaml",)),
    DetectorRule("yarn", Ecosystem.NODEJS, 3, ("yarn.lock",)),
    DetectorRule("npm", Ecosystem.NODEJS, 4, ("package-lock.json",)),
    DetectorRule("npm", Ecosystem.NODEJS, 5, ("package.json",), excludes=NODE_LOCKFILES),
    DetectorRule("deno", Ecosystem.DENO, 6, ("deno.json", "deno.jsonc")),
    DetectorRule("cargo", Ecosystem.RUST, 7, ("Cargo.toml",)),
    DetectorRule("uv", Ecosystem.PYTHON, 8, ("uv.lock",)),
    DetectorRule("poetry", Ecosystem.PYTHON, 9, ("poetry.lock",)),
    DetectorRule("pdm", Ecosystem.PYTHON, 10, ("pdm.lock",)),
    DetectorRule("pipenv", Ecosystem.PYTHON, 11, ("Pipfile.lock", "Pipfile")),
    DetectorRule("uv", Ecosystem.PYTHON, 12, ("pyproject.toml",), excludes=PYTHON_LOCKFILES),
    DetectorRule("go", Ecosystem.GO, 13, ("go.mod",)),
    DetectorRule("bundle", Ecosystem.RUBY, 14, ("Gemfile",)),
    DetectorRule("gradle", Ecosystem.JVM, 15, ("build.gradle.kts", "build.gradle")),
    DetectorRule("mvn", Ecosystem.JVM, 16, ("pom.xml",)),
    DetectorRule("mix", Ecosystem.ELIXIR, 17, ("mix.exs",)),
    DetectorRule("just", Ecosystem.JUST, 18, ("justfile", "Justfile")),
    DetectorRule("swift", Ecosystem.SWIFT, 19, ("Package.swift",)),
    DetectorRule("zig", Ecosystem.ZIG, 20, ("build.zig",)),
    DetectorRule("make", Ecosystem.GENERIC, 21, ("Makefile", "makefile")),
)


def validate_registry(rules: Sequence[DetectorRule]) -> None:
    """Check the ordering invariants of a detector table.

    Priorities must be unique, and the Makefile catch-all must sort last.
    """
    seen: dict[int, str] = {}
    for rule in rules:
        if rule.priority < 0:
            raise ValueError(f"Detector '{rule.name}' has negative priority {rule.priority}")
        if rule.priority in seen:
            raise ValueError(
                f"Detectors '{seen[rule.priority]}' and '{rule.name}' "
                f"share priority {rule.priority}"
            )
        seen[rule.priority] = rule.name

    catch_all = [rule for rule in rules if rule.name == "make"]
    if catch_all and any(rule.priority > catch_all[0].priority for rule in rules):
        raise ValueError("The make detector must have the highest priority number")


validate_registry(DETECTORS)


def list_entries(directory: Path) -> set[str]:
    """Exact-case names of a directory's immediate entries (empty on I/O errors)."""
    try:
        return set(os.listdir(directory))
    except OSError as exc:
        logger.debug("Cannot list %s: %s", directory, exc)
        return set()


def is_ignored(runner: DetectedRunner, ignore_list: Iterable[str]) -> bool:
    return any(runner.name.lower() == ignored.lower() for ignored in ignore_list)


def detect_all(
    directory: Path,
    ignore_list: Iterable[str] = (),
    rules: Sequence[DetectorRule] = DETECTORS,
) -> list[DetectedRunner]:
    """Run every detector against one directory, in priority order."""
    ignore = list(ignore_list)
    entries = list_entries(directory)

    runners: list[DetectedRunner] = []
    for rule in sorted(rules, key=lambda r: r.priority):
        for runner in rule.detect(directory, entries):
            if is_ignored(runner, ignore):
                logger.debug("Ignoring %s (%s)", runner.name, runner.detected_file)
                continue
            runners.append(runner)
    return runners
