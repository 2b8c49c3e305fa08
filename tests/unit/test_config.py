"""Unit tests for src/devrun/config/ (settings and loader)."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from devrun.config.loader import (
    CONFIG_FILENAMES,
    _deep_merge,
    find_config_file,
    load_config_file,
    load_settings,
    save_settings,
)
from devrun.config.settings import DevrunSettings, OutputSettings, SearchSettings


# ---------------------------------------------------------------------------
# Settings defaults
# ---------------------------------------------------------------------------


class TestSearchSettings:
    def test_defaults(self):
        s = SearchSettings()
        assert s.levels == 3
        assert s.ignore_tools == []

    def test_comma_separated_ignore_tools(self):
        s = SearchSettings(ignore_tools="yarn, make,,pnpm")
        assert s.ignore_tools == ["yarn", "make", "pnpm"]

    def test_levels_bounds(self):
        assert SearchSettings(levels=0).levels == 0
        assert SearchSettings(levels=255).levels == 255
        with pytest.raises(ValidationError):
            SearchSettings(levels=-1)
        with pytest.raises(ValidationError):
            SearchSettings(levels=256)


class TestOutputSettings:
    def test_defaults(self):
        s = OutputSettings()
        assert s.verbose is False
        assert s.quiet is False
        assert s.show_timing is False


class TestDevrunSettings:
    def test_defaults(self):
        s = DevrunSettings()
        assert s.search.levels == 3
        assert s.aliases == {}

    def test_resolve_alias(self):
        s = DevrunSettings(aliases={"t": "test", "b": "build"})
        assert s.resolve_alias("t") == "test"
        assert s.resolve_alias("build") == "build"
        assert s.resolve_alias("T") == "T"

    def test_env_nested_delimiter(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("DEVRUN_SEARCH__LEVELS", "7")
        assert DevrunSettings().search.levels == 7


# ---------------------------------------------------------------------------
# Config file discovery
# ---------------------------------------------------------------------------


class TestFindConfigFile:
    def test_finds_in_directory(self, tmp_path: Path):
        (tmp_path / "devrun.yaml").write_text("search:\n  levels: 1\n")
        assert find_config_file(tmp_path) == (tmp_path / "devrun.yaml").resolve()

    def test_walks_up(self, tmp_path: Path):
        (tmp_path / ".devrun.yml").write_text("")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == (tmp_path / ".devrun.yml").resolve()

    def test_filename_precedence(self, tmp_path: Path):
        for name in CONFIG_FILENAMES:
            (tmp_path / name).write_text("")
        assert find_config_file(tmp_path).name == CONFIG_FILENAMES[0]

    def test_directory_named_like_config_ignored(self, tmp_path: Path):
        (tmp_path / "devrun.yaml").mkdir()
        (tmp_path / "devrun.yml").write_text("")
        assert find_config_file(tmp_path).name == "devrun.yml"


class TestLoadConfigFile:
    def test_parses_yaml(self, tmp_path: Path):
        path = tmp_path / "devrun.yaml"
        path.write_text("aliases:\n  t: test\n")
        assert load_config_file(path) == {"aliases": {"t": "test"}}

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "devrun.yaml"
        path.write_text("")
        assert load_config_file(path) == {}

    def test_non_mapping(self, tmp_path: Path):
        path = tmp_path / "devrun.yaml"
        path.write_text("- a\n- b\n")
        assert load_config_file(path) == {}


class TestDeepMerge:
    def test_nested(self):
        base = {"search": {"levels": 3, "ignore_tools": []}, "aliases": {"t": "test"}}
        merged = _deep_merge(base, {"search": {"levels": 5}})
        assert merged == {"search": {"levels": 5, "ignore_tools": []}, "aliases": {"t": "test"}}
        assert base["search"]["levels"] == 3

    def test_scalar_replaces_dict(self):
        assert _deep_merge({"a": {"b": 1}}, {"a": 2}) == {"a": 2}


# ---------------------------------------------------------------------------
# Layered loading
# ---------------------------------------------------------------------------


class TestLoadSettings:
    def test_defaults_without_file(self, tmp_path: Path):
        s = load_settings(project_path=tmp_path)
        assert s.search.levels == 3
        assert s.output.show_timing is False

    def test_file_values(self, tmp_path: Path):
        (tmp_path / "devrun.yaml").write_text(
            yaml.dump(
                {
                    "search": {"levels": 5, "ignore_tools": ["make"]},
                    "output": {"show_timing": True},
                    "aliases": {"t": "test"},
                }
            )
        )
        s = load_settings(project_path=tmp_path)
        assert s.search.levels == 5
        assert s.search.ignore_tools == ["make"]
        assert s.output.show_timing is True
        assert s.aliases == {"t": "test"}

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        (tmp_path / "devrun.yaml").write_text("search:\n  levels: 5\n")
        monkeypatch.setenv("DEVRUN_SEARCH__LEVELS", "9")
        monkeypatch.setenv("DEVRUN_SEARCH__IGNORE_TOOLS", "yarn,make")
        monkeypatch.setenv("DEVRUN_OUTPUT__SHOW_TIMING", "yes")
        s = load_settings(project_path=tmp_path)
        assert s.search.levels == 9
        assert s.search.ignore_tools == ["yarn", "make"]
        assert s.output.show_timing is True

    def test_overrides_win(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        (tmp_path / "devrun.yaml").write_text("search:\n  levels: 5\n")
        monkeypatch.setenv("DEVRUN_SEARCH__LEVELS", "9")
        s = load_settings(project_path=tmp_path, overrides={"search": {"levels": 1}})
        assert s.search.levels == 1

    def test_invalid_levels_rejected(self, tmp_path: Path):
        (tmp_path / "devrun.yaml").write_text("search:\n  levels: 1000\n")
        with pytest.raises(ValidationError):
            load_settings(project_path=tmp_path)


class TestSaveSettings:
    def test_creates_file_in_project(self, tmp_path: Path):
        settings = DevrunSettings(aliases={"t": "test"})
        written = save_settings(settings, project_path=tmp_path)
        assert written == tmp_path.resolve() / "devrun.yaml"

        data = yaml.safe_load(written.read_text())
        assert data["aliases"] == {"t": "test"}
        assert data["search"]["levels"] == 3

    def test_round_trips_through_load(self, tmp_path: Path):
        settings = DevrunSettings(
            search=SearchSettings(levels=6, ignore_tools=["make"]),
            output=OutputSettings(show_timing=True),
        )
        save_settings(settings, project_path=tmp_path)
        loaded = load_settings(project_path=tmp_path)
        assert loaded.search.levels == 6
        assert loaded.search.ignore_tools == ["make"]
        assert loaded.output.show_timing is True

    def test_overwrites_existing_file(self, tmp_path: Path):
        existing = tmp_path / ".devrun.yaml"
        existing.write_text("search:\n  levels: 1\n")
        written = save_settings(DevrunSettings(), project_path=tmp_path)
        assert written == existing.resolve()
        assert yaml.safe_load(existing.read_text())["search"]["levels"] == 3
