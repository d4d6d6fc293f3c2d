"""Smoke tests for package import, metadata and the module-level helpers."""

from __future__ import annotations

import subprocess
import threading
import time

import winexec
import winexec.__main__
import winexec.health
from winexec.capability import HostCapability
from winexec.dispatcher import Dispatcher


def test_package_imports() -> None:
    """Package import should work in CI."""
    assert winexec is not None


def test_package_version_present() -> None:
    """Package should expose a non-empty version string."""
    assert isinstance(winexec.__version__, str)
    assert winexec.__version__.strip() != ""


def test_default_dispatcher_probes_once(monkeypatch, tmp_path) -> None:
    calls = []

    def _fake_probe(**kwargs):
        calls.append(kwargs)
        return HostCapability(platform="aix", platform_is_target=False)

    monkeypatch.setenv("WINEXEC_CONFIG_DIR", str(tmp_path))
    monkeypatch.setattr("winexec.config._settings", None)
    monkeypatch.setattr(winexec, "_dispatcher", None)
    monkeypatch.setattr(winexec, "probe", _fake_probe)

    assert winexec.check_windows_or_wine() is False
    assert winexec.run_sync("anything") is None
    assert winexec.run_file("anything.exe") is None
    assert len(calls) == 1
    assert calls[0]["compat_command"] == "wine"


def test_concurrent_first_use_builds_one_dispatcher(monkeypatch, tmp_path) -> None:
    calls = []
    start = threading.Barrier(8)

    def _slow_probe(**kwargs):
        calls.append(kwargs)
        time.sleep(0.05)
        return HostCapability(platform="aix", platform_is_target=False)

    monkeypatch.setenv("WINEXEC_CONFIG_DIR", str(tmp_path))
    monkeypatch.setattr("winexec.config._settings", None)
    monkeypatch.setattr(winexec, "_dispatcher", None)
    monkeypatch.setattr(winexec, "probe", _slow_probe)

    results = []

    def _worker():
        start.wait()
        results.append(winexec.get_dispatcher())

    threads = [threading.Thread(target=_worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert len(calls) == 1
    assert len(results) == 8
    assert all(d is results[0] for d in results)


def test_module_helpers_delegate(monkeypatch) -> None:
    recorded = []

    def _fake_check_output(target, **kwargs):
        recorded.append(target)
        return b"ok"

    monkeypatch.setattr(subprocess, "check_output", _fake_check_output)
    capability = HostCapability(platform="linux", platform_is_target=False, compat_layer_available=True)
    monkeypatch.setattr(winexec, "_dispatcher", Dispatcher(capability))

    assert winexec.check_windows_or_wine() is True
    assert winexec.run_sync("notepad.exe") == b"ok"
    assert winexec.run_file_sync("notepad.exe", ["a.txt"]) == b"ok"
    assert recorded == ["wine notepad.exe", ["wine", "notepad.exe", "a.txt"]]
