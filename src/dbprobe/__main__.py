"""Main entry point for dbprobe.

This module provides the Typer-based command-line interface that verifies the
database driver capabilities of the Python runtime it runs in. It is meant to
be executed inside a container image whose runtime is the subject under test:

    docker run --rm my-image:latest dbprobe

Commands:
    (default): Run every capability check and print the report
    show-profile: Print the effective check profile as JSON
    version: Show dbprobe version

Key Design:
    - The report always prints top to bottom, whatever fails along the way
    - Exit with EX_OK (0) when every required check passed, EX_FAILED (1) otherwise
    - Logs go to stderr so they never interleave with the report on stdout
"""

import json
import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

import structlog
import typer
from rich.console import Console
from rich.markup import escape

from dbprobe import __version__
from dbprobe.capability import generate_json_report, render_text_report, verify_runtime
from dbprobe.config import DbProbeConfig
from dbprobe.exit_codes import EX_FAILED, EX_OK
from dbprobe.inspector import PythonRuntimeInspector, RuntimeInspector
from dbprobe.loader import ProfileLoadError, load_profile
from dbprobe.types import CheckProfile

# Load config to determine log format and level
config = DbProbeConfig()

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# WARNING by default, DEBUG when DBPROBE_DEBUG=true
min_level = _LEVELS.get(config.log_level.upper(), logging.WARNING)
if config.debug:
    min_level = logging.DEBUG


# Custom log level filter processor for structlog
def filter_by_level_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Filter log events by level."""
    level_name = event_dict.get("level", "info").upper()
    if _LEVELS.get(level_name, logging.INFO) < min_level:
        raise structlog.DropEvent
    return event_dict


def _stderr_logger_factory(*args: Any) -> structlog.PrintLogger:
    # Resolve sys.stderr per logger so redirected streams are honoured
    return structlog.PrintLogger(file=sys.stderr)


renderer = (
    structlog.processors.JSONRenderer()
    if config.log_format == "json"
    else structlog.dev.ConsoleRenderer(colors=False)
)

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        filter_by_level_processor,  # type: ignore[list-item]
        renderer,
    ],
    logger_factory=_stderr_logger_factory,
)

logger = structlog.get_logger(__name__)


class OutputFormat(str, Enum):
    """Report formats written to stdout."""

    TEXT = "text"
    JSON = "json"


app = typer.Typer(
    name="dbprobe",
    help="Verify that database driver modules are present and functional",
    add_completion=False,
    pretty_exceptions_enable=False,
)
console = Console()


def _build_inspector(profile: CheckProfile) -> RuntimeInspector:
    """Create the inspector for the running interpreter."""
    return PythonRuntimeInspector(dialect_drivers=profile.dialect_drivers)


def _resolve_profile(profile_file: Path | None, settings: DbProbeConfig) -> CheckProfile:
    """Load the profile from --profile, DBPROBE_PROFILE_PATH, or use the defaults.

    Raises:
        SystemExit: With EX_FAILED if the profile file cannot be loaded
    """
    path = profile_file or settings.profile_path
    if path is None:
        return CheckProfile()

    try:
        return load_profile(path)
    except ProfileLoadError as e:
        console.print(f"[red]✗ Failed to load profile:[/red] {escape(str(e))}")
        sys.exit(EX_FAILED)


def _run_verification(
    output_format: OutputFormat | None,
    profile_file: Path | None,
) -> None:
    """Run the checks, print the report and exit with the outcome.

    Raises:
        SystemExit: EX_OK if every required check passed, EX_FAILED otherwise
    """
    settings = DbProbeConfig()
    profile = _resolve_profile(profile_file, settings)
    fmt = output_format or OutputFormat(settings.output_format)

    report = verify_runtime(_build_inspector(profile), profile)

    if fmt == OutputFormat.JSON:
        typer.echo(generate_json_report(report, profile))
    else:
        render_text_report(report, profile, console)

    logger.info("verification_finished", **report.summary())
    sys.exit(EX_OK if report.passed else EX_FAILED)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    output_format: Annotated[
        OutputFormat | None,
        typer.Option("--format", "-f", help="Report format (default: text)"),
    ] = None,
    profile_file: Annotated[
        Path | None,
        typer.Option("--profile", "-p", help="YAML/JSON file overriding checked module names"),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log probe details to stderr")
    ] = False,
) -> None:
    """Check that MySQL/MariaDB driver modules are loaded and usable.

    Runs every check even when earlier ones fail, prints a pass/fail report,
    and exits with 0 when all required checks passed or 1 otherwise.
    """
    global min_level
    if verbose:
        min_level = logging.DEBUG

    if ctx.invoked_subcommand is not None:
        return

    _run_verification(output_format, profile_file)


@app.command()
def version() -> None:
    """Show the version of dbprobe."""
    console.print(f"dbprobe version {__version__}")


@app.command(name="show-profile")
def show_profile(
    profile_file: Annotated[
        Path | None,
        typer.Option("--profile", "-p", help="YAML/JSON file overriding checked module names"),
    ] = None,
) -> None:
    """Print the effective check profile as JSON.

    Shows the defaults merged with --profile (or DBPROBE_PROFILE_PATH).
    """
    profile = _resolve_profile(profile_file, DbProbeConfig())
    typer.echo(json.dumps(profile.model_dump(mode="json"), indent=2))


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
