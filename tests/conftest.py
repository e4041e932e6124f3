"""Pytest configuration and shared fixtures for dbprobe tests.

Provides fixtures for:
- A fake RuntimeInspector with deterministic capability sets
- Scenario inspectors (all present, abstraction missing, sub-driver
  missing, nothing matching the listing tokens)
- Profile files in temporary directories
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from dbprobe.types import CheckProfile, DriverInfo, ProbeResult

# ============================================================================
# Fake Runtime Inspector
# ============================================================================

PRIMARY_TYPE = "pymysql.connections.Connection"
PRIMARY_CONSTANT = "pymysql.constants.CLIENT.MULTI_STATEMENTS"
ABSTRACTION_TYPE = "sqlalchemy.engine.Engine"


class FakeInspector:
    """RuntimeInspector returning fixed answers.

    Errors are keyed by method name ("type_exists") or by method and argument
    ("is_loaded:pymysql"). `raises` works the same way but makes the method
    raise instead of returning a ProbeResult error.
    """

    def __init__(
        self,
        loaded: set[str] | None = None,
        listing: set[str] | None = None,
        sub_drivers: list[str] | None = None,
        types: set[str] | None = None,
        constants: set[str] | None = None,
        info: DriverInfo | None = None,
        errors: dict[str, str] | None = None,
        raises: dict[str, Exception] | None = None,
    ):
        self.loaded = loaded or set()
        self.listing = listing if listing is not None else set(self.loaded)
        self.sub_drivers = sub_drivers or []
        self.types = types or set()
        self.constants = constants or set()
        self.info = info or DriverInfo(client_info="1.4.6", client_version=10406)
        self.errors = errors or {}
        self.raises = raises or {}
        self.calls: list[tuple[str, str]] = []

    def _answer(self, method: str, arg: str, value: Any) -> ProbeResult[Any]:
        self.calls.append((method, arg))
        for key in (f"{method}:{arg}", method):
            if key in self.raises:
                raise self.raises[key]
            if key in self.errors:
                return ProbeResult(error=self.errors[key])
        return ProbeResult(value=value)

    def runtime_version(self) -> ProbeResult[str]:
        return self._answer("runtime_version", "", "Python 3.12.4 (CPython)")

    def os_identifier(self) -> ProbeResult[str]:
        return self._answer("os_identifier", "", "Linux 6.1.0")

    def is_loaded(self, name: str) -> ProbeResult[bool]:
        return self._answer("is_loaded", name, name in self.loaded)

    def list_loaded(self) -> ProbeResult[set[str]]:
        return self._answer("list_loaded", "", set(self.listing))

    def available_sub_drivers(self, layer: str) -> ProbeResult[list[str]]:
        return self._answer("available_sub_drivers", layer, list(self.sub_drivers))

    def type_exists(self, name: str) -> ProbeResult[bool]:
        return self._answer("type_exists", name, name in self.types)

    def constant_defined(self, name: str) -> ProbeResult[bool]:
        return self._answer("constant_defined", name, name in self.constants)

    def driver_info(self, name: str) -> ProbeResult[DriverInfo]:
        return self._answer("driver_info", name, self.info)


def _healthy_kwargs() -> dict[str, Any]:
    return {
        "loaded": {"pymysql", "sqlalchemy.dialects.mysql"},
        "listing": {"PyMySQL", "SQLAlchemy", "typer", "sys", "_mysql_helpers"},
        "sub_drivers": ["mysql", "sqlite"],
        "types": {PRIMARY_TYPE, ABSTRACTION_TYPE},
        "constants": {PRIMARY_CONSTANT},
    }


@pytest.fixture
def make_inspector() -> Callable[..., FakeInspector]:
    """Factory for a healthy FakeInspector with selected fields overridden."""

    def factory(**overrides: Any) -> FakeInspector:
        kwargs = _healthy_kwargs()
        kwargs.update(overrides)
        return FakeInspector(**kwargs)

    return factory


# ============================================================================
# Scenario Inspectors
# ============================================================================


@pytest.fixture
def scenario_a(make_inspector: Callable[..., FakeInspector]) -> FakeInspector:
    """Both drivers loaded, mysql sub-driver present, optional modules absent."""
    return make_inspector()


@pytest.fixture
def scenario_b(make_inspector: Callable[..., FakeInspector]) -> FakeInspector:
    """Primary driver loaded, abstraction layer's MySQL driver absent."""
    return make_inspector(loaded={"pymysql"}, types={PRIMARY_TYPE})


@pytest.fixture
def scenario_c(make_inspector: Callable[..., FakeInspector]) -> FakeInspector:
    """Abstraction driver loaded but mysql missing from its sub-drivers."""
    return make_inspector(sub_drivers=["sqlite", "postgresql"])


@pytest.fixture
def scenario_d(make_inspector: Callable[..., FakeInspector]) -> FakeInspector:
    """Both drivers report loaded, yet no loaded name matches a listing token."""
    return make_inspector(listing={"typer", "rich", "sys"})


# ============================================================================
# Profiles
# ============================================================================


@pytest.fixture
def default_profile() -> CheckProfile:
    return CheckProfile()


@pytest.fixture
def profile_yaml(tmp_path: Path) -> Path:
    """Profile file switching the primary driver to mysql-connector."""
    path = tmp_path / "profile.yaml"
    path.write_text(
        "primary_driver: mysql.connector\n"
        "primary_type: mysql.connector.connection.MySQLConnection\n"
        "primary_constant: mysql.connector.constants.ClientFlag.MULTI_STATEMENTS\n"
        "listing_tokens:\n"
        "  - mysql\n"
        "  - connector\n",
        encoding="utf-8",
    )
    return path
