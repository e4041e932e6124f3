"""Render verification reports.

Report Formats:
    - Text: Human-readable report with section headers and glyph-prefixed
      lines (✓ passed, ✗ failed, - informational, • listed module)
    - JSON: Structured data for programmatic processing
"""

import json

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from dbprobe.types import CheckProfile, LineKind, VerificationReport

_GLYPHS = {
    LineKind.OK: "[green]✓[/green] ",
    LineKind.FAIL: "[red]✗[/red] ",
    LineKind.NOTE: "[dim]-[/dim] ",
    LineKind.ITEM: "• ",
    LineKind.TEXT: "",
}


def success_use_cases(profile: CheckProfile) -> list[str]:
    """List example downstream uses printed when every check passed."""
    return [
        f"Connect to MySQL using {profile.primary_driver}",
        f"Connect to MySQL through {profile.abstraction_layer}",
        "Use Django, Flask-SQLAlchemy, Alembic, etc.",
        "Connect to MariaDB (fully compatible)",
    ]


def render_text_report(
    report: VerificationReport, profile: CheckProfile, console: Console
) -> None:
    """Print the full text report, top to bottom.

    Args:
        report: Completed verification report
        profile: Profile the report was produced with (names used in the summary)
        console: Rich console to print to (stdout)
    """
    console.print(Panel.fit("[bold]MySQL/MariaDB Driver Verification[/bold]", border_style="cyan"))
    console.print()
    console.print(f"Runtime: {escape(report.runtime_version)}")
    console.print(f"OS: {escape(report.os_identifier)}")
    console.print()

    for section in report.sections:
        prefix = f"{section.number}. " if section.number is not None else ""
        console.print(f"[cyan]{prefix}[/cyan]{escape(section.title)}")
        for line in section.lines:
            console.print(f"   {_GLYPHS[line.kind]}{escape(line.text)}")
        console.print()

    border = "green" if report.passed else "red"
    console.print(Panel.fit("[bold]VERIFICATION SUMMARY[/bold]", border_style=border))

    if report.passed:
        console.print("[green]✓ ALL CHECKS PASSED[/green]")
        console.print()
        console.print("MySQL/MariaDB drivers are properly installed")
        console.print("and ready to use. No additional configuration needed.")
        console.print()
        console.print("You can now:")
        for use_case in success_use_cases(profile):
            console.print(f"  • {escape(use_case)}")
    else:
        failed = len(report.failures)
        console.print(f"[red]✗ SOME CHECKS FAILED[/red] ({failed} failed)")
        console.print()
        console.print("One or more MySQL driver modules are not properly loaded.")
        console.print("Please check the output above for details.")


def generate_json_report(report: VerificationReport, profile: CheckProfile) -> str:
    """Generate a JSON report.

    Args:
        report: Completed verification report
        profile: Profile the report was produced with

    Returns:
        JSON-formatted report
    """
    report_data = {
        "runtime": report.runtime_version,
        "os": report.os_identifier,
        **report.summary(),
        "checks": [check.model_dump(mode="json") for check in report.checks],
        "sections": [section.model_dump(mode="json") for section in report.sections],
        "profile": profile.model_dump(mode="json"),
    }

    return json.dumps(report_data, indent=2)
