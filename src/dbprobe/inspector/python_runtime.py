"""RuntimeInspector for the Python interpreter running dbprobe.

Capabilities are importable modules. Types and constants are dotted paths
resolved against the longest importable module prefix, so both
`pymysql.connections.Connection` and `pymysql.constants.CLIENT.MULTI_STATEMENTS`
work. Sub-drivers are SQLAlchemy dialects whose DB-API module can be imported.

Missing modules or attributes are reported as False. Any other exception
raised by the runtime while probing becomes a ProbeResult error.
"""

import importlib
import importlib.metadata
import platform
import re
import sys
from types import ModuleType
from typing import Any

import structlog

from dbprobe.inspector.base import capture
from dbprobe.types import DriverInfo, ProbeResult

logger = structlog.get_logger(__name__)

_VERSION_RE = re.compile(r"(\d+)\.(\d+)(?:\.(\d+))?")


def _import(name: str) -> ModuleType | None:
    """Import a module, returning None if it (or one of its parents) is missing."""
    try:
        return importlib.import_module(name)
    except ImportError:
        return None


def _resolve(dotted: str) -> tuple[bool, Any]:
    """Resolve a dotted path to an object.

    Args:
        dotted: Module path optionally followed by attribute names

    Returns:
        Tuple of (found, object). Object is None when not found.
    """
    parts = dotted.split(".")
    for split in range(len(parts), 0, -1):
        module = _import(".".join(parts[:split]))
        if module is None:
            continue
        obj: Any = module
        for attr in parts[split:]:
            if not hasattr(obj, attr):
                return False, None
            obj = getattr(obj, attr)
        return True, obj
    return False, None


def _module_version(module: ModuleType) -> str | None:
    for attr in ("__version__", "VERSION", "version"):
        if hasattr(module, attr):
            value = getattr(module, attr)
            if isinstance(value, tuple | list):
                return ".".join(str(part) for part in value[:3])
            return str(value)
    return None


def _version_number(version: str) -> int | None:
    """Convert "major.minor.patch" into major*10000 + minor*100 + patch."""
    match = _VERSION_RE.search(version)
    if not match:
        return None
    major, minor, patch = (int(group or 0) for group in match.groups())
    return major * 10000 + minor * 100 + patch


class PythonRuntimeInspector:
    """Introspects the current Python interpreter.

    Args:
        dialect_drivers: Alternative drivers to try per dialect when the
            dialect's default DB-API is not importable
            (e.g. {"mysql": ["pymysql"]})
    """

    def __init__(self, dialect_drivers: dict[str, list[str]] | None = None):
        self.dialect_drivers = dialect_drivers or {}

    def runtime_version(self) -> ProbeResult[str]:
        return capture(
            lambda: f"Python {platform.python_version()} ({platform.python_implementation()})",
            "runtime version",
        )

    def os_identifier(self) -> ProbeResult[str]:
        return capture(lambda: f"{platform.system()} {platform.release()}".strip(), "os identifier")

    def is_loaded(self, name: str) -> ProbeResult[bool]:
        return capture(lambda: _import(name) is not None, f"import {name}")

    def list_loaded(self) -> ProbeResult[set[str]]:
        def query() -> set[str]:
            names = set(sys.builtin_module_names)
            names.update(module.partition(".")[0] for module in list(sys.modules))
            for dist in importlib.metadata.distributions():
                dist_name = dist.metadata["Name"]
                if dist_name:
                    names.add(dist_name)
            return names

        return capture(query, "list loaded modules")

    def available_sub_drivers(self, layer: str) -> ProbeResult[list[str]]:
        def query() -> list[str]:
            dialects = importlib.import_module(f"{layer}.dialects")
            available = []
            for name in getattr(dialects, "__all__", ()):
                alternatives = self.dialect_drivers.get(name, [])
                candidates = [name, *(f"{name}.{driver}" for driver in alternatives)]
                if any(self._dialect_usable(dialects.registry, c) for c in candidates):
                    available.append(name)
            return available

        return capture(query, f"list {layer} sub-drivers")

    def _dialect_usable(self, registry: Any, dialect: str) -> bool:
        try:
            dialect_cls = registry.load(dialect)
            # SQLAlchemy 2.x renamed the classmethod dbapi() to import_dbapi()
            import_dbapi = getattr(dialect_cls, "import_dbapi", None) or dialect_cls.dbapi
            import_dbapi()
        except Exception as e:
            logger.debug("sub_driver_unavailable", dialect=dialect, error=str(e))
            return False
        return True

    def type_exists(self, name: str) -> ProbeResult[bool]:
        def query() -> bool:
            found, obj = _resolve(name)
            return found and isinstance(obj, type)

        return capture(query, f"resolve type {name}")

    def constant_defined(self, name: str) -> ProbeResult[bool]:
        def query() -> bool:
            found, obj = _resolve(name)
            return found and not callable(obj) and not isinstance(obj, ModuleType)

        return capture(query, f"resolve constant {name}")

    def driver_info(self, name: str) -> ProbeResult[DriverInfo]:
        def query() -> DriverInfo:
            module = importlib.import_module(name)
            get_client_info = getattr(module, "get_client_info", None)
            client_info = (
                str(get_client_info()) if callable(get_client_info) else _module_version(module)
            )
            if client_info is None:
                raise AttributeError(f"{name} exposes no client version")
            return DriverInfo(client_info=client_info, client_version=_version_number(client_info))

        return capture(query, f"driver info {name}")
