"""Pydantic models for capability verification.

Defines the data structures shared by the inspector, the checker and the
renderers:

- CheckProfile: every capability name a verification run looks at
- ProbeResult: result-or-error returned by each runtime introspection query
- CapabilityCheck / ReportSection / VerificationReport: the report state
  accumulated during a single run
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class ProbeError(Exception):
    """Raised when the host runtime fails while a capability is being probed.

    Carries the probe description so the failure line can name what was
    being exercised.
    """

    def __init__(self, probe: str, message: str):
        self.probe = probe
        self.message = message
        super().__init__(f"{probe}: {message}")


class FailureKind(str, Enum):
    """Why a capability check failed."""

    MISSING_CAPABILITY = "missing_capability"
    PROBE_ERROR = "probe_error"


class LineKind(str, Enum):
    """Kind of a report line, rendered as a leading glyph."""

    OK = "ok"  # ✓
    FAIL = "fail"  # ✗
    NOTE = "note"  # -
    ITEM = "item"  # •
    TEXT = "text"  # no glyph


class ProbeResult(BaseModel, Generic[T]):
    """Outcome of one introspection query: either a value or an error message."""

    value: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self, probe: str) -> T:
        """Return the value, raising ProbeError if the query failed.

        Args:
            probe: Human-readable description of the query (used in the error)

        Raises:
            ProbeError: If the query recorded an error
        """
        if self.error is not None:
            raise ProbeError(probe, self.error)
        return self.value  # type: ignore[return-value]


class DriverInfo(BaseModel):
    """Client library details reported by a database driver module."""

    client_info: str
    client_version: int | None = None


class OptionalCapability(BaseModel):
    """A capability reported for information only."""

    name: str
    label: str


def _default_optional() -> list[OptionalCapability]:
    return [
        OptionalCapability(name="sqlalchemy", label="SQLAlchemy Base"),
        OptionalCapability(name="sqlite3", label="SQLite Driver"),
        OptionalCapability(name="psycopg2", label="PostgreSQL Driver"),
    ]


def _default_dialect_drivers() -> dict[str, list[str]]:
    return {
        "mysql": ["pymysql", "mysqlconnector", "mariadbconnector"],
        "postgresql": ["psycopg", "pg8000", "asyncpg"],
        "mssql": ["pymssql"],
        "oracle": ["oracledb"],
    }


class CheckProfile(BaseModel):
    """Names of every capability a verification run checks.

    Defaults target a MySQL/MariaDB-ready Python image: PyMySQL as the primary
    driver and SQLAlchemy as the driver-abstraction layer. Profile files
    override individual fields; unknown keys are rejected.

    Attributes:
        primary_driver: Module of the primary database driver
        primary_type: Dotted path of the driver's connection class
        primary_constant: Dotted path of a constant the driver defines
        abstraction_layer: Module of the driver-abstraction layer
        abstraction_driver: Module of the abstraction layer's MySQL support
        abstraction_type: Dotted path of the abstraction layer's entry class
        target_sub_driver: Sub-driver name that must be available (exact match)
        optional: Capabilities reported without affecting the result
        listing_tokens: Case-insensitive substrings selecting related modules
        dialect_drivers: Alternative drivers tried per dialect when listing
            available sub-drivers
    """

    model_config = ConfigDict(extra="forbid")

    primary_driver: str = "pymysql"
    primary_type: str = "pymysql.connections.Connection"
    primary_constant: str = "pymysql.constants.CLIENT.MULTI_STATEMENTS"
    abstraction_layer: str = "sqlalchemy"
    abstraction_driver: str = "sqlalchemy.dialects.mysql"
    abstraction_type: str = "sqlalchemy.engine.Engine"
    target_sub_driver: str = "mysql"
    optional: list[OptionalCapability] = Field(default_factory=_default_optional)
    listing_tokens: list[str] = Field(default_factory=lambda: ["mysql", "sqlalchemy", "pymysql"])
    dialect_drivers: dict[str, list[str]] = Field(default_factory=_default_dialect_drivers)


class ReportLine(BaseModel):
    """A single line of the text report."""

    kind: LineKind
    text: str


class ReportSection(BaseModel):
    """A numbered block of the report (one per check step)."""

    number: int | None = None
    title: str
    lines: list[ReportLine] = Field(default_factory=list)

    def add(self, kind: LineKind, text: str) -> None:
        self.lines.append(ReportLine(kind=kind, text=text))


class CapabilityCheck(BaseModel):
    """Evaluated result of one capability check."""

    name: str
    present: bool
    detail: str | None = None
    required: bool = True
    failure: FailureKind | None = None


class VerificationReport(BaseModel):
    """Report state for a single verification run.

    Mutated in place by the checker. `passed` starts True and is only ever
    cleared by a failing required check.

    Attributes:
        runtime_version: Version string of the host runtime
        os_identifier: Operating system name and release
        passed: Logical AND of every required check
        sections: Report sections in print order
        checks: Every evaluated capability check in evaluation order
    """

    runtime_version: str
    os_identifier: str
    passed: bool = True
    sections: list[ReportSection] = Field(default_factory=list)
    checks: list[CapabilityCheck] = Field(default_factory=list)

    @property
    def failures(self) -> list[CapabilityCheck]:
        return [c for c in self.checks if c.required and not c.present]

    def record(
        self,
        name: str,
        present: bool,
        *,
        detail: str | None = None,
        required: bool = True,
        failure: FailureKind | None = None,
    ) -> CapabilityCheck:
        """Append a check result, clearing `passed` for failed required checks."""
        if not present and failure is None:
            failure = FailureKind.MISSING_CAPABILITY
        check = CapabilityCheck(
            name=name,
            present=present,
            detail=detail,
            required=required,
            failure=None if present else failure,
        )
        self.checks.append(check)
        if required and not present:
            self.passed = False
        return check

    def summary(self) -> dict[str, Any]:
        """Return counts used by the JSON renderer and log events."""
        required = [c for c in self.checks if c.required]
        return {
            "passed": self.passed,
            "required_checks": len(required),
            "failed_checks": len(self.failures),
            "optional_checks": len(self.checks) - len(required),
        }
