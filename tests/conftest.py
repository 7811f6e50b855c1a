"""Shared pytest fixtures for writing Go packages to temporary directories."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path
from textwrap import dedent

import pytest
from compatibility_gen._shared.settings import reset_settings_cache

GoPackageFactory = Callable[[Mapping[str, str], str], Path]


@pytest.fixture
def write_go_package(tmp_path: Path) -> GoPackageFactory:
    """Return a factory writing ``{file name: source}`` into ``tmp_path / name``."""

    def _write(files: Mapping[str, str], name: str = "v1") -> Path:
        directory = tmp_path / name
        directory.mkdir(parents=True, exist_ok=True)
        for file_name, source in files.items():
            (directory / file_name).write_text(dedent(source).lstrip("\n"), encoding="utf-8")
        return directory

    return _write


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "COMPAT_GEN_GO_EXECUTABLE",
        "COMPAT_GEN_RESOLVE_TIMEOUT",
        "COMPAT_GEN_LOG_LEVEL",
        "COMPAT_GEN_LOG_JSON",
    ):
        monkeypatch.delenv(key, raising=False)
    reset_settings_cache()
