"""Host diagnostics for ``winexec --doctor``."""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass

from winexec.capability import COMPAT_PLATFORMS, TARGET_PLATFORM, HostCapability
from winexec.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HealthCheckResult:
    name: str
    category: str  # platform | wine | execution
    status: str  # ok | warning | critical
    message: str
    fix_hint: str = ""


def _wine_version(wine_command: str, timeout: float | None) -> str:
    try:
        proc = subprocess.run(
            [wine_command, "--version"],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("wine --version failed", exc_info=True)
        return f"error: {exc}"
    if proc.returncode != 0:
        return f"exit code {proc.returncode}"
    return (proc.stdout or "").strip() or "(no output)"


def run_checks(settings: Settings, capability: HostCapability) -> list[HealthCheckResult]:
    """Inspect the host and return one row per check."""
    results: list[HealthCheckResult] = []

    if capability.platform == TARGET_PLATFORM:
        results.append(
            HealthCheckResult("Platform", "platform", "ok", "Windows: programs run natively")
        )
        results.append(
            HealthCheckResult(
                "Execution",
                "execution",
                "ok",
                "Commands run without Wine",
            )
        )
        return results

    if capability.platform in COMPAT_PLATFORMS:
        results.append(
            HealthCheckResult(
                "Platform",
                "platform",
                "ok",
                f"{capability.platform}: Windows programs run through Wine",
            )
        )
    else:
        results.append(
            HealthCheckResult(
                "Platform",
                "platform",
                "critical",
                f"{capability.platform} is not supported",
                fix_hint="Run on Windows, Linux or macOS",
            )
        )

    wine_path = shutil.which(settings.wine_command)
    if wine_path:
        results.append(HealthCheckResult("Wine binary", "wine", "ok", wine_path))
        results.append(
            HealthCheckResult(
                "Wine version",
                "wine",
                "ok" if capability.compat_layer_available else "warning",
                _wine_version(settings.wine_command, settings.effective_probe_timeout),
            )
        )
    else:
        results.append(
            HealthCheckResult(
                "Wine binary",
                "wine",
                "critical" if capability.platform in COMPAT_PLATFORMS else "warning",
                f"'{settings.wine_command}' not found on PATH",
                fix_hint="Install Wine or set WINEXEC_WINE_COMMAND",
            )
        )

    if capability.can_execute:
        results.append(
            HealthCheckResult("Execution", "execution", "ok", f"Commands run via '{settings.wine_command}'")
        )
    else:
        results.append(
            HealthCheckResult(
                "Execution",
                "execution",
                "critical",
                "Windows programs cannot be run on this host",
                fix_hint=f"Check that '{settings.wine_command} --version' succeeds",
            )
        )
    return results


def overall_status(results: list[HealthCheckResult]) -> str:
    """healthy | degraded | unhealthy"""
    statuses = {r.status for r in results}
    if "critical" in statuses:
        return "unhealthy"
    if "warning" in statuses:
        return "degraded"
    return "healthy"
