"""Capability checks for database driver availability.

Runs a fixed, linear sequence of checks against a RuntimeInspector and
accumulates the results in a VerificationReport. Nothing here writes to
stdout; rendering happens in dbprobe.capability.reporter.

Check sequence:
    1. Primary database driver loaded (client library and version)
    2. Abstraction layer's MySQL driver loaded, target sub-driver available
    3. Optional related modules (never affect the result)
    4. Loaded modules matching the listing tokens
    5. Primary driver type and constant resolvable
    6. Abstraction layer type resolvable, sub-driver registered (re-queried)

Failure handling:
    A missing capability is recorded as a failed check. A ProbeError (the
    runtime faulted while being inspected) is caught at the step boundary,
    rendered as a failure line and recorded as exactly one failed check. The
    remaining steps always run.
"""

from collections.abc import Callable

import structlog

from dbprobe.inspector.base import RuntimeInspector
from dbprobe.types import (
    CheckProfile,
    FailureKind,
    LineKind,
    ProbeError,
    ProbeResult,
    ReportSection,
    VerificationReport,
)

logger = structlog.get_logger(__name__)

Step = Callable[[RuntimeInspector, CheckProfile, VerificationReport, ReportSection], None]


def _check_primary_driver(
    inspector: RuntimeInspector,
    profile: CheckProfile,
    report: VerificationReport,
    section: ReportSection,
) -> None:
    name = profile.primary_driver
    if not inspector.is_loaded(name).unwrap(f"import {name}"):
        section.add(LineKind.FAIL, "Status: NOT LOADED")
        section.add(LineKind.FAIL, f"ERROR: {name} module is missing!")
        report.record(name, False)
        return

    section.add(LineKind.OK, "Status: LOADED")
    info = inspector.driver_info(name).unwrap(f"client info for {name}")
    section.add(LineKind.OK, f"Client Library: {info.client_info}")
    version_number = info.client_version if info.client_version is not None else "unknown"
    section.add(LineKind.OK, f"Client Version Number: {version_number}")
    report.record(name, True, detail=info.client_info)


def _check_sub_driver(
    inspector: RuntimeInspector,
    profile: CheckProfile,
    report: VerificationReport,
    section: ReportSection,
) -> None:
    """Verify the target sub-driver is listed by the abstraction layer."""
    layer = profile.abstraction_layer
    target = profile.target_sub_driver
    drivers = inspector.available_sub_drivers(layer).unwrap(f"list {layer} sub-drivers")

    # Exact, case-sensitive membership
    if target in drivers:
        section.add(LineKind.OK, f"{layer} {target} sub-driver: AVAILABLE")
        report.record(f"{layer}:{target}", True)
        section.add(LineKind.OK, f"{layer} {target} support confirmed")
    else:
        section.add(LineKind.FAIL, f"{layer} {target} sub-driver: NOT AVAILABLE")
        report.record(f"{layer}:{target}", False)


def _check_abstraction_driver(
    inspector: RuntimeInspector,
    profile: CheckProfile,
    report: VerificationReport,
    section: ReportSection,
) -> None:
    name = profile.abstraction_driver
    if not inspector.is_loaded(name).unwrap(f"import {name}"):
        section.add(LineKind.FAIL, "Status: NOT LOADED")
        section.add(LineKind.FAIL, f"ERROR: {name} module is missing!")
        report.record(name, False)
        return

    section.add(LineKind.OK, "Status: LOADED")
    report.record(name, True)
    _check_sub_driver(inspector, profile, report, section)


def _check_optional(
    inspector: RuntimeInspector,
    profile: CheckProfile,
    report: VerificationReport,
    section: ReportSection,
) -> None:
    """Report optional modules. Never clears report.passed, even on probe errors."""
    for capability in profile.optional:
        result = inspector.is_loaded(capability.name)
        if not result.ok:
            section.add(LineKind.NOTE, f"{capability.label}: could not be probed ({result.error})")
            report.record(
                capability.name,
                False,
                detail=result.error,
                required=False,
                failure=FailureKind.PROBE_ERROR,
            )
        elif result.value:
            section.add(LineKind.OK, f"{capability.label}: LOADED")
            report.record(capability.name, True, required=False)
        else:
            section.add(LineKind.NOTE, f"{capability.label}: Not loaded (optional)")
            report.record(capability.name, False, required=False)


def filter_related(names: set[str] | list[str], tokens: list[str]) -> list[str]:
    """Select names containing any token (case-insensitive), sorted.

    Args:
        names: Loaded module/distribution names
        tokens: Substrings to match

    Returns:
        Matching names in lexicographic order
    """
    lowered = [token.lower() for token in tokens]
    return sorted(name for name in names if any(token in name.lower() for token in lowered))


def _check_related_listing(
    inspector: RuntimeInspector,
    profile: CheckProfile,
    report: VerificationReport,
    section: ReportSection,
) -> None:
    loaded = inspector.list_loaded().unwrap("list loaded modules")
    related = filter_related(loaded, profile.listing_tokens)

    if not related:
        tokens = ", ".join(profile.listing_tokens)
        section.add(LineKind.FAIL, "No MySQL-related modules found!")
        section.add(LineKind.TEXT, f"None match: {tokens}")
        report.record("related modules", False)
        return

    for name in related:
        section.add(LineKind.ITEM, name)
    report.record("related modules", True, detail=f"{len(related)} found")


def _probe_primary_driver(
    inspector: RuntimeInspector,
    profile: CheckProfile,
    report: VerificationReport,
    section: ReportSection,
) -> None:
    name = profile.primary_driver
    if not inspector.is_loaded(name).unwrap(f"import {name}"):
        section.add(LineKind.NOTE, f"Skipped ({name} not loaded)")
        return

    type_name = profile.primary_type
    if inspector.type_exists(type_name).unwrap(f"resolve {type_name}"):
        section.add(LineKind.OK, f"{type_name} class is available")
        report.record(type_name, True)
    else:
        section.add(LineKind.FAIL, f"{type_name} class not found")
        report.record(type_name, False)

    constant = profile.primary_constant
    if inspector.constant_defined(constant).unwrap(f"resolve {constant}"):
        section.add(LineKind.OK, f"{name} constants are defined ({constant})")
        report.record(constant, True)
    else:
        section.add(LineKind.FAIL, f"{name} constants not found ({constant})")
        report.record(constant, False)


def _probe_abstraction_driver(
    inspector: RuntimeInspector,
    profile: CheckProfile,
    report: VerificationReport,
    section: ReportSection,
) -> None:
    name = profile.abstraction_driver
    if not inspector.is_loaded(name).unwrap(f"import {name}"):
        section.add(LineKind.NOTE, f"Skipped ({name} not loaded)")
        return

    type_name = profile.abstraction_type
    if inspector.type_exists(type_name).unwrap(f"resolve {type_name}"):
        section.add(LineKind.OK, f"{type_name} class is available")
        report.record(type_name, True)
    else:
        section.add(LineKind.FAIL, f"{type_name} class not found")
        report.record(type_name, False)

    # Queried again rather than reusing the result of the earlier step
    layer = profile.abstraction_layer
    target = profile.target_sub_driver
    drivers = inspector.available_sub_drivers(layer).unwrap(f"list {layer} sub-drivers")
    listing = ", ".join(drivers) if drivers else "(none)"
    if target in drivers:
        section.add(LineKind.OK, f"{layer} {target} sub-driver is registered")
        section.add(LineKind.OK, f"Available {layer} sub-drivers: {listing}")
        report.record(f"{layer}:{target} registered", True)
    else:
        section.add(LineKind.FAIL, f"{layer} {target} sub-driver not registered")
        section.add(LineKind.TEXT, f"Available sub-drivers: {listing}")
        report.record(f"{layer}:{target} registered", False)


def _run_step(
    number: int,
    title: str,
    step: Step,
    inspector: RuntimeInspector,
    profile: CheckProfile,
    report: VerificationReport,
) -> None:
    """Run one step in its own section, folding any probe fault into a failure."""
    section = ReportSection(number=number, title=title)
    report.sections.append(section)
    try:
        step(inspector, profile, report, section)
    except ProbeError as e:
        logger.debug("step_probe_error", step=number, probe=e.probe, error=e.message)
        section.add(LineKind.FAIL, f"Error while probing {e.probe}: {e.message}")
        report.record(e.probe, False, detail=e.message, failure=FailureKind.PROBE_ERROR)
    except Exception as e:
        # Inspector raised instead of returning a ProbeResult
        logger.debug("step_raised", step=number, error=str(e), error_type=type(e).__name__)
        section.add(LineKind.FAIL, f"Error during step {number}: {type(e).__name__}: {e}")
        report.record(title, False, detail=str(e), failure=FailureKind.PROBE_ERROR)


def _describe(query: Callable[[], ProbeResult[str]], probe: str) -> str:
    """Informational runtime fact, or "unknown (<error>)" if it cannot be read.

    Never records a check; the report outcome does not depend on it.
    """
    try:
        result = query()
    except Exception as e:
        result = ProbeResult(error=f"{type(e).__name__}: {e}")
    if not result.ok:
        logger.debug("runtime_fact_unavailable", probe=probe, error=result.error)
        return f"unknown ({result.error})"
    return str(result.value)


def verify_runtime(
    inspector: RuntimeInspector, profile: CheckProfile | None = None
) -> VerificationReport:
    """Verify database driver capabilities of a runtime.

    Runs every check in order and never stops early: a failing or faulting
    step is recorded and the next step runs.

    Args:
        inspector: Introspection interface to the host runtime
        profile: Capability names to check (defaults to CheckProfile())

    Returns:
        VerificationReport with:
        - passed: True if every required check passed
        - sections: Rendered check steps in order
        - checks: Every evaluated capability check
    """
    profile = profile or CheckProfile()

    report = VerificationReport(
        runtime_version=_describe(inspector.runtime_version, "runtime version"),
        os_identifier=_describe(inspector.os_identifier, "os identifier"),
    )
    logger.debug(
        "verification_start",
        runtime=report.runtime_version,
        os=report.os_identifier,
        primary_driver=profile.primary_driver,
        abstraction_driver=profile.abstraction_driver,
    )

    steps: list[tuple[str, Step]] = [
        (f"Checking {profile.primary_driver} module...", _check_primary_driver),
        (f"Checking {profile.abstraction_driver} module...", _check_abstraction_driver),
        ("Checking related database modules...", _check_optional),
        ("Related modules loaded:", _check_related_listing),
        (f"Testing {profile.primary_driver} basic functionality...", _probe_primary_driver),
        (f"Testing {profile.abstraction_driver} basic functionality...", _probe_abstraction_driver),
    ]
    for number, (title, step) in enumerate(steps, 1):
        _run_step(number, title, step, inspector, profile, report)

    logger.debug("verification_complete", **report.summary())
    return report
