"""Request and option types passed to the dispatcher."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

StrPath = str | os.PathLike


@dataclass(frozen=True)
class ExecOptions:
    """Options forwarded to the underlying ``subprocess`` call.

    ``cwd`` is also used to build the Wine target path. ``extra`` holds any
    other ``subprocess`` keyword arguments and is passed through verbatim.
    """

    cwd: StrPath | None = None
    env: Mapping[str, str] | None = None
    timeout: float | None = None
    text: bool = False
    encoding: str | None = None
    input: bytes | str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def popen_kwargs(self) -> dict[str, Any]:
        """Keyword arguments accepted by ``subprocess.Popen``."""
        kwargs: dict[str, Any] = dict(self.extra)
        if self.cwd is not None:
            kwargs["cwd"] = self.cwd
        if self.env is not None:
            kwargs["env"] = dict(self.env)
        if self.text:
            kwargs["text"] = True
        if self.encoding is not None:
            kwargs["encoding"] = self.encoding
        return kwargs

    def sync_kwargs(self) -> dict[str, Any]:
        """Keyword arguments accepted by ``subprocess.check_output``."""
        kwargs = self.popen_kwargs()
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        if self.input is not None:
            kwargs["input"] = self.input
        return kwargs


@dataclass(frozen=True)
class ExecutionRequest:
    """One call to the dispatcher.

    ``args is None`` marks the command-string form (run through the shell);
    a tuple marks the file-plus-arguments form.
    """

    target: str
    args: tuple[str, ...] | None = None
    options: ExecOptions = field(default_factory=ExecOptions)

    @classmethod
    def command(cls, command: str, options: ExecOptions | None = None) -> ExecutionRequest:
        return cls(target=command, args=None, options=options or ExecOptions())

    @classmethod
    def file(
        cls, file: StrPath, args: tuple[str, ...] | list[str] = (), options: ExecOptions | None = None
    ) -> ExecutionRequest:
        return cls(
            target=os.fspath(file),
            args=tuple(str(a) for a in args),
            options=options or ExecOptions(),
        )

    @property
    def is_command(self) -> bool:
        return self.args is None

    def spawn_target(self) -> str | list[str]:
        """Shell string for the command form, argv list for the file form."""
        if self.args is None:
            return self.target
        return [self.target, *self.args]

    def through(self, compat_command: str) -> ExecutionRequest:
        """Rewrite the request so ``compat_command`` is the program executed."""
        cwd = self.options.cwd
        target = os.path.join(os.fspath(cwd), self.target) if cwd is not None else self.target
        if self.args is None:
            return replace(self, target=f"{compat_command} {target}")
        return replace(self, target=compat_command, args=(target, *self.args))
