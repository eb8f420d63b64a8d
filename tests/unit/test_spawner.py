"""Unit tests for waymux.profile.spawner.SessionSpawner.

Most tests replace ``subprocess.Popen`` with a recorder; a few start real
short-lived processes through /bin/sh.
"""
from __future__ import annotations

import itertools
import os
from pathlib import Path
from typing import Any

import pytest

from waymux.profile import Profile, SessionSpawner, TabSpec, exit_code_from_returncode
from waymux.profile import spawner as spawner_module
from waymux.profile.spawner import with_firefox_new_instance


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


class RecordingPopen:
    """Stands in for subprocess.Popen and remembers every call."""

    calls: list[dict[str, Any]] = []
    failing: set[str] = set()
    _pids = itertools.count(5000)

    def __init__(self, args: list[str], **kwargs: Any) -> None:
        if args[0] in self.failing:
            raise FileNotFoundError(2, "No such file or directory", args[0])
        cwd = kwargs.get("cwd")
        if cwd is not None and not os.path.isdir(cwd):
            raise FileNotFoundError(2, "No such file or directory", cwd)
        self.args = args
        self.kwargs = kwargs
        self.pid = next(self._pids)
        self.returncode: int | None = None
        RecordingPopen.calls.append({"args": args, **kwargs})

    def poll(self) -> int | None:
        return self.returncode


@pytest.fixture()
def popen(monkeypatch: pytest.MonkeyPatch) -> type[RecordingPopen]:
    RecordingPopen.calls = []
    RecordingPopen.failing = set()
    monkeypatch.setattr(spawner_module.subprocess, "Popen", RecordingPopen)
    return RecordingPopen


@pytest.fixture()
def spawner() -> SessionSpawner:
    return SessionSpawner("work-1", display_socket="wayland-7")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestExitCode:
    def test_normal_exit(self) -> None:
        assert exit_code_from_returncode(0) == 0
        assert exit_code_from_returncode(3) == 3

    def test_killed_by_signal(self) -> None:
        assert exit_code_from_returncode(-15) == 143
        assert exit_code_from_returncode(-9) == 137


class TestFirefoxFlag:
    def test_inserted_after_executable(self) -> None:
        assert with_firefox_new_instance(["firefox", "https://example.org"]) == [
            "firefox", "--new-instance", "https://example.org",
        ]

    def test_firefox_bin(self) -> None:
        assert with_firefox_new_instance(["firefox-bin"]) == ["firefox-bin", "--new-instance"]

    def test_not_duplicated(self) -> None:
        argv = ["firefox", "--new-instance"]
        assert with_firefox_new_instance(argv) == argv

    def test_other_programs_untouched(self) -> None:
        assert with_firefox_new_instance(["foot"]) == ["foot"]


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


class TestChildEnvironment:
    def test_display_variables(
        self, spawner: SessionSpawner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("WAYLAND_SOCKET", "3")
        monkeypatch.setenv("DISPLAY", ":0")
        monkeypatch.setenv("WAYLAND_DISPLAY", "wayland-0")
        env = spawner.child_environment()
        assert "WAYLAND_SOCKET" not in env
        assert "DISPLAY" not in env
        assert env["WAYLAND_DISPLAY"] == "wayland-7"
        assert env["WAYMUX_INSTANCE"] == "work-1"

    def test_extra_overlays_inherited(
        self, spawner: SessionSpawner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("EDITOR", "vi")
        env = spawner.child_environment({"EDITOR": "hx", "NEW": "1"})
        assert env["EDITOR"] == "hx"
        assert env["NEW"] == "1"

    def test_without_display_socket_inherits(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WAYLAND_DISPLAY", "wayland-0")
        env = SessionSpawner("x").child_environment()
        assert env["WAYLAND_DISPLAY"] == "wayland-0"


# ---------------------------------------------------------------------------
# spawn_profile
# ---------------------------------------------------------------------------


class TestSpawnProfile:
    def test_argv_cwd_and_env(
        self, popen: type[RecordingPopen], spawner: SessionSpawner, tmp_path: Path
    ) -> None:
        profile = Profile(
            name="dev",
            working_dir=str(tmp_path),
            proxy_command=["distrobox", "enter", "dev", "--"],
            env={"EDITOR": "hx"},
            tabs=[TabSpec(command="foot", args=["-e", "htop"])],
        )
        assert spawner.spawn_profile(profile) == 1
        call = popen.calls[0]
        assert call["args"] == ["distrobox", "enter", "dev", "--", "foot", "-e", "htop"]
        assert call["cwd"] == str(tmp_path)
        assert call["env"]["EDITOR"] == "hx"
        assert call["env"]["WAYMUX_INSTANCE"] == "work-1"
        assert call["preexec_fn"] is spawner_module._reset_signals

    def test_failure_does_not_stop_others(
        self, popen: type[RecordingPopen], spawner: SessionSpawner
    ) -> None:
        popen.failing = {"missing-app"}
        profile = Profile(
            name="p",
            tabs=[TabSpec(command="kitty"), TabSpec(command="missing-app"), TabSpec(command="foot")],
        )
        assert spawner.spawn_profile(profile) == 2
        assert [call["args"][0] for call in popen.calls] == ["kitty", "foot"]

    def test_bad_working_dir_spawns_nothing(
        self, popen: type[RecordingPopen], spawner: SessionSpawner, tmp_path: Path
    ) -> None:
        profile = Profile(
            name="p",
            working_dir=str(tmp_path / "does-not-exist"),
            tabs=[TabSpec(command="kitty")],
        )
        assert spawner.spawn_profile(profile) == 0
        assert popen.calls == []

    def test_working_dir_tilde_expanded(
        self,
        popen: type[RecordingPopen],
        spawner: SessionSpawner,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("HOME", str(tmp_path))
        profile = Profile(name="p", working_dir="~", tabs=[TabSpec(command="kitty")])
        spawner.spawn_profile(profile)
        assert popen.calls[0]["cwd"] == str(tmp_path)

    def test_background_pids_are_pending(
        self, popen: type[RecordingPopen], spawner: SessionSpawner
    ) -> None:
        profile = Profile(
            name="p",
            tabs=[TabSpec(command="kitty"), TabSpec(command="foot", background=True)],
        )
        spawner.spawn_profile(profile)
        background_pid = spawner.children[1].pid
        assert spawner.pending_background == frozenset({background_pid})
        assert spawner.claim_background(background_pid)
        assert not spawner.claim_background(background_pid)
        assert not spawner.claim_background(spawner.children[0].pid)

    def test_claim_background_none(self, spawner: SessionSpawner) -> None:
        assert not spawner.claim_background(None)


# ---------------------------------------------------------------------------
# spawn_command / reap
# ---------------------------------------------------------------------------


class TestSpawnCommand:
    def test_firefox_gets_new_instance(
        self, popen: type[RecordingPopen], spawner: SessionSpawner
    ) -> None:
        spawner.spawn_command(["firefox"])
        assert popen.calls[0]["args"] == ["firefox", "--new-instance"]

    def test_failure_raises(self, popen: type[RecordingPopen], spawner: SessionSpawner) -> None:
        popen.failing = {"nope"}
        with pytest.raises(OSError):
            spawner.spawn_command(["nope"])

    def test_empty_argv_rejected(self, spawner: SessionSpawner) -> None:
        with pytest.raises(ValueError):
            spawner.spawn([])

    def test_reap_collects_finished(
        self, popen: type[RecordingPopen], spawner: SessionSpawner
    ) -> None:
        first = spawner.spawn_command(["a"])
        spawner.spawn_command(["b"])
        first.returncode = 0
        assert spawner.reap() == 1
        assert len(spawner.children) == 1


class TestRealProcesses:
    def test_real_child_is_reaped(self, spawner: SessionSpawner) -> None:
        child = spawner.spawn(["/bin/sh", "-c", "exit 0"])
        child.wait(timeout=10)
        assert spawner.reap() == 1
        assert spawner.children == []

    def test_real_child_sees_environment(self, spawner: SessionSpawner, tmp_path: Path) -> None:
        out = tmp_path / "env.txt"
        child = spawner.spawn(
            ["/bin/sh", "-c", f'printf "%s %s" "$WAYMUX_INSTANCE" "$WAYLAND_DISPLAY" > {out}'],
        )
        assert child.wait(timeout=10) == 0
        assert out.read_text(encoding="utf-8") == "work-1 wayland-7"

    def test_real_missing_working_dir(self, spawner: SessionSpawner, tmp_path: Path) -> None:
        profile = Profile(
            name="p",
            working_dir=str(tmp_path / "missing"),
            tabs=[TabSpec(command="/bin/true")],
        )
        assert spawner.spawn_profile(profile) == 0

    def test_real_missing_executable(self, spawner: SessionSpawner) -> None:
        with pytest.raises(OSError):
            spawner.spawn_command(["/nonexistent/waymux-test-binary"])

    @pytest.mark.asyncio
    async def test_primary_exit_status(self, spawner: SessionSpawner) -> None:
        process = await spawner.spawn_primary(["/bin/sh", "-c", "exit 7"])
        assert exit_code_from_returncode(await process.wait()) == 7

    @pytest.mark.asyncio
    async def test_primary_killed_by_signal(self, spawner: SessionSpawner) -> None:
        process = await spawner.spawn_primary(["/bin/sh", "-c", "kill -TERM $$"])
        assert exit_code_from_returncode(await process.wait()) == 143
