"""Host capability probe: can this machine run Windows executables?

Windows runs them natively. Linux and macOS can run them when Wine is
installed, which is checked once with ``wine --version``. Every other
platform is refused without spawning anything.
"""

from __future__ import annotations

import logging
import subprocess
import sys
from dataclasses import dataclass

logger = logging.getLogger(__name__)

TARGET_PLATFORM = "win32"
COMPAT_PLATFORMS: frozenset[str] = frozenset({"linux", "darwin"})
DEFAULT_COMPAT_COMMAND = "wine"


@dataclass(frozen=True)
class HostCapability:
    """Immutable result of the one-time host probe."""

    platform: str
    platform_is_target: bool
    compat_layer_available: bool = False

    @property
    def can_execute(self) -> bool:
        return self.platform_is_target or self.compat_layer_available

    @property
    def uses_compat_layer(self) -> bool:
        """True when commands must be routed through Wine."""
        return self.can_execute and not self.platform_is_target


def check_compat_layer(compat_command: str = DEFAULT_COMPAT_COMMAND, timeout: float | None = None) -> bool:
    """Return True if ``<compat_command> --version`` exits with code 0.

    Never raises. Missing binary, non-zero exit and timeout all count as
    unavailable.
    """
    try:
        subprocess.run(
            [compat_command, "--version"],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            timeout=timeout,
            check=True,
        )
    except Exception:
        logger.debug("Compatibility layer probe failed for %r", compat_command, exc_info=True)
        return False
    return True


def probe(
    platform: str | None = None,
    compat_command: str = DEFAULT_COMPAT_COMMAND,
    timeout: float | None = None,
) -> HostCapability:
    """Probe the host once and return its execution capability."""
    host = platform if platform is not None else sys.platform

    if host == TARGET_PLATFORM:
        capability = HostCapability(platform=host, platform_is_target=True)
    elif host in COMPAT_PLATFORMS:
        capability = HostCapability(
            platform=host,
            platform_is_target=False,
            compat_layer_available=check_compat_layer(compat_command, timeout=timeout),
        )
    else:
        capability = HostCapability(platform=host, platform_is_target=False)

    logger.debug(
        "Host capability: platform=%s native=%s compat=%s",
        capability.platform,
        capability.platform_is_target,
        capability.compat_layer_available,
    )
    return capability
