"""Shared fixtures: an isolated XDG environment per test.

The runtime directory lives directly under /tmp because AF_UNIX socket
paths are limited to roughly 100 bytes and pytest's ``tmp_path`` is
usually longer than that.
"""
from __future__ import annotations

import shutil
import tempfile
from collections.abc import Iterator
from pathlib import Path

import pytest


@pytest.fixture()
def runtime_dir(monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    directory = Path(tempfile.mkdtemp(prefix="wm", dir="/tmp"))
    monkeypatch.setenv("XDG_RUNTIME_DIR", str(directory))
    yield directory
    shutil.rmtree(directory, ignore_errors=True)


@pytest.fixture()
def config_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    config = tmp_path / "config"
    config.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config))
    return config


@pytest.fixture()
def xdg_env(
    runtime_dir: Path,
    config_home: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> dict[str, Path]:
    """Runtime and config directories, with no instance preselected."""
    monkeypatch.delenv("WAYMUX_INSTANCE", raising=False)
    return {"runtime": runtime_dir, "config": config_home}
