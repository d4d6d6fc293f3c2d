"""Run Windows executables the same way on Windows, Linux and macOS.

On Windows programs are spawned directly. On Linux and macOS they are
spawned through Wine when ``wine --version`` succeeds. Elsewhere every call
returns ``None``.

The module-level helpers use a default :class:`Dispatcher` that probes the
host on first use.
"""

from __future__ import annotations

import subprocess
import threading

from winexec.capability import HostCapability, probe
from winexec.config import Settings, get_settings
from winexec.dispatcher import CompletionCallback, Dispatcher
from winexec.request import ExecOptions, ExecutionRequest, StrPath

try:
    from importlib.metadata import PackageNotFoundError
    from importlib.metadata import version as _meta_version

    __version__ = _meta_version("winexec")
except PackageNotFoundError:
    __version__ = "0.1.0"

_dispatcher: Dispatcher | None = None
_dispatcher_lock = threading.Lock()


def get_dispatcher() -> Dispatcher:
    """Get or create the default Dispatcher (probes the host once)."""
    global _dispatcher  # noqa: PLW0603
    if _dispatcher is None:
        with _dispatcher_lock:
            if _dispatcher is None:
                settings = get_settings()
                capability = probe(
                    compat_command=settings.wine_command,
                    timeout=settings.effective_probe_timeout,
                )
                _dispatcher = Dispatcher(capability, compat_command=settings.wine_command)
    return _dispatcher


def check_windows_or_wine() -> bool:
    """True if running on Windows, or on Linux/macOS with Wine installed."""
    return get_dispatcher().can_execute


def run(
    command: str,
    options: ExecOptions | None = None,
    on_complete: CompletionCallback | None = None,
) -> subprocess.Popen | None:
    return get_dispatcher().run(command, options, on_complete)


def run_file(
    file: StrPath,
    args: tuple[str, ...] | list[str] = (),
    options: ExecOptions | None = None,
    on_complete: CompletionCallback | None = None,
) -> subprocess.Popen | None:
    return get_dispatcher().run_file(file, args, options, on_complete)


def run_sync(command: str, options: ExecOptions | None = None) -> bytes | str | None:
    return get_dispatcher().run_sync(command, options)


def run_file_sync(
    file: StrPath,
    args: tuple[str, ...] | list[str] = (),
    options: ExecOptions | None = None,
) -> bytes | str | None:
    return get_dispatcher().run_file_sync(file, args, options)


__all__ = [
    "CompletionCallback",
    "Dispatcher",
    "ExecOptions",
    "ExecutionRequest",
    "HostCapability",
    "Settings",
    "check_windows_or_wine",
    "get_dispatcher",
    "probe",
    "run",
    "run_file",
    "run_file_sync",
    "run_sync",
]
