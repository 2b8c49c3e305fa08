"""Config file discovery and loading."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from devrun.config.settings import DevrunSettings, OutputSettings, SearchSettings

CONFIG_FILENAMES = ["devrun.yaml", "devrun.yml", ".devrun.yaml", ".devrun.yml"]


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for a config file starting from start_dir, walking up to root."""
    directory = start_dir or Path.cwd()
    directory = directory.resolve()

    while True:
        for name in CONFIG_FILENAMES:
            candidate = directory / name
            if candidate.is_file():
                return candidate
        parent = directory.parent
        if parent == directory:
            break
        directory = parent

    return None


def load_config_file(path: Path) -> dict[str, Any]:
    """Load and parse a YAML config file."""
    with open(path) as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge override into base, returning a new dict."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_settings(
    project_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> DevrunSettings:
    """Load settings with full layering: defaults -> config file -> env -> overrides."""
    file_data: dict[str, Any] = {}
    config_file = find_config_file(project_path)
    if config_file:
        file_data = load_config_file(config_file)

    search_data = dict(file_data.get("search") or {})
    output_data = dict(file_data.get("output") or {})
    aliases = dict(file_data.get("aliases") or {})

    # Pydantic doesn't parse env vars when we pass explicit kwargs,
    # so we need to handle them manually
    _merge_env_vars(search_data, "DEVRUN_SEARCH__")
    _merge_env_vars(output_data, "DEVRUN_OUTPUT__")

    merged = _deep_merge(
        {"search": search_data, "output": output_data, "aliases": aliases},
        overrides or {},
    )

    return DevrunSettings(
        search=SearchSettings(**merged["search"]),
        output=OutputSettings(**merged["output"]),
        aliases=merged["aliases"],
    )


def _merge_env_vars(data: dict[str, Any], prefix: str) -> None:
    """Merge environment variables with the given prefix into data dict."""
    for key, value in os.environ.items():
        if key.startswith(prefix):
            field_name = key[len(prefix):].lower()
            # Parse boolean values
            if value.lower() in ("true", "yes", "on"):
                data[field_name] = True
            elif value.lower() in ("false", "no", "off"):
                data[field_name] = False
            elif value.isdigit():
                data[field_name] = int(value)
            else:
                data[field_name] = value


def save_settings(settings: DevrunSettings, project_path: Path | None = None) -> Path:
    """Save settings to a YAML config file and return its path."""
    config_file = find_config_file(project_path)

    # If no config file exists, create devrun.yaml in project directory or cwd
    if config_file is None:
        target_dir = project_path.resolve() if project_path else Path.cwd()
        config_file = target_dir / "devrun.yaml"

    data = settings.model_dump(exclude_defaults=False)

    with open(config_file, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    return config_file
