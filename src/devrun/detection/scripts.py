"""Script/target discovery from per-ecosystem config files.

Every parser returns None (never raises) when its config file is missing,
unreadable, or malformed, so callers can fall back to a generic message.
"""

from __future__ import annotations

import json
import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

from devrun.detection.registry import DetectedRunner, Ecosystem, list_entries

logger = logging.getLogger(__name__)

CARGO_COMMANDS = ("build", "test", "run", "check", "clippy", "fmt", "doc", "bench")

MAKEFILE_NAMES = ("Makefile", "makefile")


@dataclass(frozen=True)
class ProjectScript:
    name: str
    command: str


@dataclass
class ScriptList:
    """Scripts read from a single config file, in discovery order."""

    source_file: str
    scripts: list[ProjectScript] = field(default_factory=list)

    @property
    def names(self) -> list[str]:
        return [script.name for script in self.scripts]


def parse_package_json_scripts(project_dir: Path) -> ScriptList | None:
    """Read the ``scripts`` object from package.json.

    An empty ``scripts`` object gives an empty ScriptList; a missing one gives None.
    """
    path = project_dir / "package.json"
    if not path.is_file():
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.debug("Failed to parse %s: %s", path, exc)
        return None

    if not isinstance(data, dict):
        return None
    scripts = data.get("scripts")
    if not isinstance(scripts, dict):
        return None

    return ScriptList(
        source_file="package.json",
        scripts=[
            ProjectScript(name=name, command=cmd if isinstance(cmd, str) else "")
            for name, cmd in scripts.items()
        ],
    )


def parse_cargo_targets(project_dir: Path) -> ScriptList | None:
    """Conventional cargo subcommands; Cargo.toml itself is not parsed."""
    if not (project_dir / "Cargo.toml").is_file():
        return None

    return ScriptList(
        source_file="Cargo.toml",
        scripts=[ProjectScript(name=name, command=f"cargo {name}") for name in CARGO_COMMANDS],
    )


def parse_pyproject_scripts(project_dir: Path) -> ScriptList | None:
    """Collect [tool.poetry.scripts] then [project.scripts] entries.

    Names present in both tables are listed twice.
    """
    path = project_dir / "pyproject.toml"
    if not path.is_file():
        return None

    try:
        with open(path, "rb") as fh:
            data = tomllib.load(fh)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.debug("Failed to parse %s: %s", path, exc)
        return None

    poetry_scripts = _table(_table(data.get("tool")).get("poetry")).get("scripts")
    project_scripts = _table(data.get("project")).get("scripts")

    scripts: list[ProjectScript] = []
    for table in (poetry_scripts, project_scripts):
        for name, value in _table(table).items():
            scripts.append(ProjectScript(name=name, command=_script_target(value)))

    if not scripts:
        return None

    return ScriptList(source_file="pyproject.toml", scripts=scripts)


def parse_makefile_targets(project_dir: Path) -> ScriptList | None:
    """Textual scan of a Makefile for target names.

    Recipe lines (leading tab or space), comments, special targets (``.PHONY``)
    and variable assignments/references are skipped.
    """
    entries = list_entries(project_dir)
    filename = next((name for name in MAKEFILE_NAMES if name in entries), None)
    if filename is None:
        return None

    try:
        content = (project_dir / filename).read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.debug("Failed to read %s: %s", filename, exc)
        return None

    scripts: list[ProjectScript] = []
    for line in content.splitlines():
        if line.startswith(("\t", " ", "#")):
            continue
        if ":" not in line:
            continue
        target = line.split(":", 1)[0].strip()
        if not target or target.startswith(".") or "=" in target or "$" in target:
            continue
        scripts.append(ProjectScript(name=target, command=f"make {target}"))

    if not scripts:
        return None

    return ScriptList(source_file=filename, scripts=scripts)


SCRIPT_PARSERS: dict[Ecosystem, Callable[[Path], ScriptList | None]] = {
    Ecosystem.NODEJS: parse_package_json_scripts,
    Ecosystem.RUST: parse_cargo_targets,
    Ecosystem.PYTHON: parse_pyproject_scripts,
    Ecosystem.GENERIC: parse_makefile_targets,
}


def get_scripts_for_runner(runner: DetectedRunner, project_dir: Path) -> ScriptList | None:
    """Discover scripts using the strategy for the runner's ecosystem."""
    parser = SCRIPT_PARSERS.get(runner.ecosystem)
    if parser is None:
        return None
    return parser(project_dir)


def discover_all_scripts(project_dir: Path) -> list[ScriptList]:
    """Run every discovery strategy regardless of which runner was detected.

    Only lists with at least one script are returned.
    """
    results: list[ScriptList] = []
    for parser in (
        parse_package_json_scripts,
        parse_cargo_targets,
        parse_pyproject_scripts,
        parse_makefile_targets,
    ):
        script_list = parser(project_dir)
        if script_list is not None and script_list.scripts:
            results.append(script_list)
    return results


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _table(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _script_target(value: Any) -> str:
    # Poetry also allows {reference = "...", type = "file"}
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and isinstance(value.get("reference"), str):
        return value["reference"]
    return ""
