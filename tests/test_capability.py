import subprocess

import pytest

from winexec.capability import HostCapability, check_compat_layer, probe


class _RunRecorder:
    def __init__(self, returncode: int = 0, exc: BaseException | None = None) -> None:
        self.calls: list[tuple[list[str], dict]] = []
        self.returncode = returncode
        self.exc = exc

    def __call__(self, cmd, **kwargs):
        self.calls.append((cmd, kwargs))
        if self.exc is not None:
            raise self.exc
        if kwargs.get("check") and self.returncode != 0:
            raise subprocess.CalledProcessError(self.returncode, cmd)
        return subprocess.CompletedProcess(cmd, self.returncode)


def test_windows_is_native_without_probe(monkeypatch) -> None:
    recorder = _RunRecorder()
    monkeypatch.setattr(subprocess, "run", recorder)

    capability = probe(platform="win32")

    assert capability.platform_is_target is True
    assert capability.can_execute is True
    assert capability.uses_compat_layer is False
    assert recorder.calls == []


@pytest.mark.parametrize("platform", ["linux", "darwin"])
def test_desktop_platforms_probe_wine(monkeypatch, platform: str) -> None:
    recorder = _RunRecorder(returncode=0)
    monkeypatch.setattr(subprocess, "run", recorder)

    capability = probe(platform=platform)

    assert capability.compat_layer_available is True
    assert capability.can_execute is True
    assert capability.uses_compat_layer is True
    assert len(recorder.calls) == 1
    cmd, kwargs = recorder.calls[0]
    assert cmd == ["wine", "--version"]
    assert kwargs["stdout"] is subprocess.DEVNULL
    assert kwargs["stderr"] is subprocess.DEVNULL


@pytest.mark.parametrize(
    "recorder",
    [
        _RunRecorder(returncode=1),
        _RunRecorder(exc=FileNotFoundError("wine")),
        _RunRecorder(exc=PermissionError("wine")),
        _RunRecorder(exc=subprocess.TimeoutExpired(["wine", "--version"], 1)),
    ],
)
def test_probe_failures_deny_capability(monkeypatch, recorder: _RunRecorder) -> None:
    monkeypatch.setattr(subprocess, "run", recorder)

    capability = probe(platform="linux")

    assert capability.compat_layer_available is False
    assert capability.can_execute is False


@pytest.mark.parametrize("platform", ["freebsd13", "sunos5", "aix", "emscripten"])
def test_other_platforms_denied_without_probe(monkeypatch, platform: str) -> None:
    recorder = _RunRecorder()
    monkeypatch.setattr(subprocess, "run", recorder)

    capability = probe(platform=platform)

    assert capability.can_execute is False
    assert recorder.calls == []


def test_probe_uses_configured_command_and_timeout(monkeypatch) -> None:
    recorder = _RunRecorder()
    monkeypatch.setattr(subprocess, "run", recorder)

    assert check_compat_layer("wine64", timeout=3.0) is True
    cmd, kwargs = recorder.calls[0]
    assert cmd == ["wine64", "--version"]
    assert kwargs["timeout"] == 3.0


def test_probe_reads_host_platform(monkeypatch) -> None:
    monkeypatch.setattr("winexec.capability.sys.platform", "win32")
    assert probe().platform == "win32"


def test_capability_is_immutable() -> None:
    capability = HostCapability(platform="linux", platform_is_target=False, compat_layer_available=True)
    with pytest.raises(AttributeError):
        capability.compat_layer_available = False  # type: ignore[misc]
