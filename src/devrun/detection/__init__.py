"""Runner detection: marker-file registry, project root search, script discovery."""

from devrun.detection.registry import DETECTORS, DetectedRunner, Ecosystem, detect_all
from devrun.detection.resolver import check_conflicts, search_runners, select_runner
from devrun.detection.scripts import (
    ProjectScript,
    ScriptList,
    discover_all_scripts,
    get_scripts_for_runner,
)

__all__ = [
    "DETECTORS",
    "DetectedRunner",
    "Ecosystem",
    "ProjectScript",
    "ScriptList",
    "check_conflicts",
    "detect_all",
    "discover_all_scripts",
    "get_scripts_for_runner",
    "search_runners",
    "select_runner",
]
