"""Execution dispatcher: run Windows programs natively or through Wine.

Every entry point follows the same policy:

1. No capability: return ``None`` and spawn nothing.
2. Native Windows: spawn the request unmodified.
3. Wine: rewrite the request so Wine is the program executed, then spawn.

Options and completion callbacks are forwarded unchanged, so callers get the
same ``Popen`` handle or captured output they would get from ``subprocess``
directly.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import subprocess
import threading
from collections.abc import Callable
from typing import Any

from winexec.capability import DEFAULT_COMPAT_COMMAND, HostCapability
from winexec.request import ExecOptions, ExecutionRequest, StrPath

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[BaseException | None, Any, Any], None]


class Dispatcher:
    """Routes execution requests according to a fixed host capability."""

    def __init__(self, capability: HostCapability, compat_command: str = DEFAULT_COMPAT_COMMAND):
        self._capability = capability
        self._compat_command = compat_command

    @property
    def capability(self) -> HostCapability:
        return self._capability

    @property
    def compat_command(self) -> str:
        return self._compat_command

    @property
    def can_execute(self) -> bool:
        return self._capability.can_execute

    # ------------------------------------------------------------------
    # Public call shapes
    # ------------------------------------------------------------------

    def run(
        self,
        command: str,
        options: ExecOptions | None = None,
        on_complete: CompletionCallback | None = None,
    ) -> subprocess.Popen | None:
        """Start ``command`` through the shell and return the process handle."""
        return self._dispatch(ExecutionRequest.command(command, options), sync=False, on_complete=on_complete)

    def run_file(
        self,
        file: StrPath,
        args: tuple[str, ...] | list[str] = (),
        options: ExecOptions | None = None,
        on_complete: CompletionCallback | None = None,
    ) -> subprocess.Popen | None:
        """Start ``file`` with ``args`` and return the process handle."""
        return self._dispatch(ExecutionRequest.file(file, args, options), sync=False, on_complete=on_complete)

    def run_sync(self, command: str, options: ExecOptions | None = None) -> bytes | str | None:
        """Run ``command`` through the shell and return its captured stdout."""
        return self._dispatch(ExecutionRequest.command(command, options), sync=True)

    def run_file_sync(
        self,
        file: StrPath,
        args: tuple[str, ...] | list[str] = (),
        options: ExecOptions | None = None,
    ) -> bytes | str | None:
        """Run ``file`` with ``args`` and return its captured stdout."""
        return self._dispatch(ExecutionRequest.file(file, args, options), sync=True)

    async def arun(self, command: str, options: ExecOptions | None = None) -> asyncio.subprocess.Process | None:
        """Event-loop variant of :meth:`run`.

        Returns as soon as the process is started. ``options.input`` only opens
        a stdin pipe; hand the data to ``Process.communicate`` yourself.
        ``options.timeout`` is not applied here; wrap the wait in
        ``asyncio.wait_for``.
        """
        request = self.resolve(ExecutionRequest.command(command, options))
        if request is None:
            return None
        logger.debug("Spawning (asyncio shell): %s", request.target)
        return await asyncio.create_subprocess_shell(request.target, **_asyncio_kwargs(request.options))

    async def arun_file(
        self,
        file: StrPath,
        args: tuple[str, ...] | list[str] = (),
        options: ExecOptions | None = None,
    ) -> asyncio.subprocess.Process | None:
        """Event-loop variant of :meth:`run_file`; same ``input``/``timeout`` caveats as :meth:`arun`."""
        request = self.resolve(ExecutionRequest.file(file, args, options))
        if request is None:
            return None
        logger.debug("Spawning (asyncio exec): %s", request.spawn_target())
        return await asyncio.create_subprocess_exec(*request.spawn_target(), **_asyncio_kwargs(request.options))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def resolve(self, request: ExecutionRequest) -> ExecutionRequest | None:
        """Return the request that will actually be spawned, or None."""
        if not self._capability.can_execute:
            logger.debug("Execution unavailable on %s; refusing %r", self._capability.platform, request.target)
            return None
        if self._capability.platform_is_target:
            return request
        return request.through(self._compat_command)

    def _dispatch(
        self,
        request: ExecutionRequest,
        *,
        sync: bool,
        on_complete: CompletionCallback | None = None,
    ) -> Any:
        resolved = self.resolve(request)
        if resolved is None:
            return None

        target = resolved.spawn_target()
        shell = resolved.is_command
        if sync:
            logger.debug("Running: %s", target)
            return subprocess.check_output(target, shell=shell, **resolved.options.sync_kwargs())

        logger.debug("Spawning: %s", target)
        kwargs = _pipe_defaults(resolved.options, subprocess.PIPE)
        kwargs.update(resolved.options.popen_kwargs())
        try:
            proc = subprocess.Popen(target, shell=shell, **kwargs)
        except OSError as exc:
            if on_complete is None:
                raise
            on_complete(exc, None, None)
            return None

        if on_complete is not None:
            watcher = threading.Thread(
                target=_wait_and_report,
                args=(proc, target, resolved.options, on_complete),
                name=f"winexec-wait-{proc.pid}",
                daemon=True,
            )
            watcher.start()
        return proc


def _pipe_defaults(options: ExecOptions, pipe: int) -> dict[str, Any]:
    """Standard streams used unless ``options.extra`` overrides them."""
    return {
        "stdin": pipe if options.input is not None else None,
        "stdout": pipe,
        "stderr": pipe,
    }


def _asyncio_kwargs(options: ExecOptions) -> dict[str, Any]:
    # asyncio subprocesses are always bytes-mode.
    kwargs = _pipe_defaults(options, asyncio.subprocess.PIPE)
    kwargs.update(options.popen_kwargs())
    kwargs.pop("text", None)
    kwargs.pop("encoding", None)
    return kwargs


def _wait_and_report(
    proc: subprocess.Popen,
    target: str | list[str],
    options: ExecOptions,
    on_complete: CompletionCallback,
) -> None:
    """Wait for ``proc`` and deliver ``(error, stdout, stderr)`` to the callback."""
    error: BaseException | None = None
    try:
        stdout, stderr = proc.communicate(input=options.input, timeout=options.timeout)
    except subprocess.TimeoutExpired as exc:
        proc.kill()
        stdout, stderr = proc.communicate()
        error = subprocess.TimeoutExpired(target, exc.timeout, output=stdout, stderr=stderr)
    except Exception as exc:
        logger.debug("Waiting on %s failed", target, exc_info=True)
        proc.kill()
        for stream in (proc.stdin, proc.stdout, proc.stderr):
            if stream is not None:
                with contextlib.suppress(OSError):
                    stream.close()
        proc.wait()
        stdout = stderr = None
        error = exc
    else:
        if proc.returncode != 0:
            error = subprocess.CalledProcessError(proc.returncode, target, output=stdout, stderr=stderr)

    try:
        on_complete(error, stdout, stderr)
    except Exception:
        logger.exception("Completion callback raised for %s", target)
