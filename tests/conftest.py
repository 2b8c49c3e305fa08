"""Shared test fixtures."""

import logging
from pathlib import Path

import pytest


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    """Auto-apply 'smoke' marker to any test not marked 'regression'."""
    smoke = pytest.mark.smoke
    for item in items:
        if not any(m.name == "regression" for m in item.iter_markers()):
            item.add_marker(smoke)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's DEVRUN_* environment out of the tests."""
    import os

    for key in list(os.environ):
        if key.startswith("DEVRUN_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _reset_devrun_logger():
    """CLI commands install a rich handler; undo it so caplog sees records again."""
    yield
    root = logging.getLogger("devrun")
    root.handlers.clear()
    root.setLevel(logging.NOTSET)
    root.propagate = True


@pytest.fixture
def make_project(tmp_path: Path):
    """Create marker files under tmp_path: make_project("a/b", "Cargo.toml", ...)."""

    def _make(subdir: str = "", *files: str, content: str = "") -> Path:
        directory = tmp_path / subdir if subdir else tmp_path
        directory.mkdir(parents=True, exist_ok=True)
        for name in files:
            (directory / name).write_text(content)
        return directory

    return _make
