"""winexec entry point.

Changes:
  - 2026-10-18: Add --doctor diagnostics with Rich output.
  - 2026-10-14: Add --shell to run a command string instead of a file.
  - 2026-10-12: Initial CLI: --check and run PROGRAM [ARGS...].
"""

import argparse
import logging
import subprocess
import sys
from collections import defaultdict
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version

from winexec import get_dispatcher
from winexec.config import get_config_path, get_settings
from winexec.logging_setup import setup_logging
from winexec.request import ExecOptions

logger = logging.getLogger(__name__)

EXIT_UNAVAILABLE = 2
EXIT_SPAWN_FAILED = 127


def _runtime_version() -> str:
    try:
        return get_version("winexec")
    except PackageNotFoundError:
        return "0.0.0"


def run_doctor() -> int:
    """Print grouped diagnostics. Returns 1 if any check is critical."""
    from rich.console import Console

    from winexec.health import overall_status, run_checks

    console = Console()
    settings = get_settings()
    dispatcher = get_dispatcher()
    results = run_checks(settings, dispatcher.capability)

    grouped = defaultdict(list)
    for result in results:
        grouped[result.category].append(result)

    icons = {"ok": "[green]\\[OK][/]", "warning": "[yellow]\\[WARN][/]", "critical": "[red]\\[FAIL][/]"}

    console.print("\n[bold]winexec doctor[/]")
    console.print(f"  Config: {get_config_path()}")
    for title, key in (("Platform", "platform"), ("Wine", "wine"), ("Execution", "execution")):
        rows = grouped.get(key, [])
        if not rows:
            continue
        console.print(f"\n{title}:")
        for row in rows:
            console.print(f"  {icons.get(row.status, '[?]')} {row.name}: {row.message}", highlight=False)
            if row.fix_hint and row.status != "ok":
                console.print(f"         Fix: {row.fix_hint}", highlight=False)

    console.print(f"\nOverall: {overall_status(results).upper()}\n")
    return 1 if any(r.status == "critical" for r in results) else 0


def run_program(args: argparse.Namespace) -> int:
    """Run the requested program and relay its stdout and exit code."""
    dispatcher = get_dispatcher()
    if not dispatcher.can_execute:
        logger.error(
            "Cannot run Windows programs on %s (is '%s' installed?)",
            dispatcher.capability.platform,
            dispatcher.compat_command,
        )
        return EXIT_UNAVAILABLE

    options = ExecOptions(cwd=args.cwd)
    try:
        if args.shell:
            command = " ".join([args.program, *args.args])
            output = dispatcher.run_sync(command, options)
        else:
            output = dispatcher.run_file_sync(args.program, args.args, options)
    except subprocess.CalledProcessError as exc:
        if exc.output:
            sys.stdout.buffer.write(exc.output)
            sys.stdout.flush()
        logger.debug("Program exited with code %d", exc.returncode)
        return exc.returncode
    except OSError as exc:
        logger.error("Failed to start %s: %s", args.program, exc)
        return EXIT_SPAWN_FAILED

    if output:
        sys.stdout.buffer.write(output)
        sys.stdout.flush()
    return 0


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="winexec",
        description="Run Windows executables natively on Windows or through Wine on Linux/macOS",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  winexec --check                   Exit 0 if Windows programs can run here
  winexec --doctor                  Print host diagnostics and exit
  winexec notepad.exe               Run notepad (through Wine off Windows)
  winexec --cwd ./bin tool.exe -x   Run ./bin/tool.exe with arguments
  winexec --shell "cmd /c ver"      Run a command string through the shell
""",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Exit 0 if execution is possible on this host, 1 otherwise",
    )
    parser.add_argument(
        "--doctor",
        action="store_true",
        help="Run host diagnostics (platform, Wine, execution)",
    )
    parser.add_argument("--cwd", type=str, default=None, help="Working directory for the program")
    parser.add_argument(
        "--shell",
        action="store_true",
        help="Treat PROGRAM and ARGS as one command string run through the shell",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (default: from settings, WARNING)",
    )
    parser.add_argument(
        "--version", "-v", action="version", version=f"%(prog)s {_runtime_version()}"
    )
    parser.add_argument("program", nargs="?", help="Executable to run")
    parser.add_argument("args", nargs=argparse.REMAINDER, help="Arguments for PROGRAM")

    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(level=args.log_level or settings.log_level)

    if args.check:
        raise SystemExit(0 if get_dispatcher().can_execute else 1)

    if args.doctor:
        raise SystemExit(run_doctor())

    if not args.program:
        parser.print_help()
        raise SystemExit(EXIT_UNAVAILABLE)

    try:
        exit_code = run_program(args)
    except KeyboardInterrupt:
        logger.info("Interrupted.")
        exit_code = 130
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
