"""Runtime introspection interface.

The checker never touches the host runtime directly; it goes through a
RuntimeInspector. Every query returns a ProbeResult instead of raising, so a
fault inside the runtime surfaces as data and the checker decides how to
report it.
"""

from collections.abc import Callable
from typing import Protocol, TypeVar

import structlog

from dbprobe.types import DriverInfo, ProbeResult

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class RuntimeInspector(Protocol):
    """Queries a host runtime for loaded capabilities."""

    def runtime_version(self) -> ProbeResult[str]: ...

    def os_identifier(self) -> ProbeResult[str]: ...

    def is_loaded(self, name: str) -> ProbeResult[bool]: ...

    def list_loaded(self) -> ProbeResult[set[str]]: ...

    def available_sub_drivers(self, layer: str) -> ProbeResult[list[str]]: ...

    def type_exists(self, name: str) -> ProbeResult[bool]: ...

    def constant_defined(self, name: str) -> ProbeResult[bool]: ...

    def driver_info(self, name: str) -> ProbeResult[DriverInfo]: ...


def capture(query: Callable[[], T], probe: str) -> ProbeResult[T]:
    """Run an introspection query, converting any exception into a ProbeResult.

    Args:
        query: Zero-argument callable performing the query
        probe: Description of the query, used in log events

    Returns:
        ProbeResult holding the query's value, or the error message if it raised
    """
    try:
        return ProbeResult(value=query())
    except Exception as e:
        logger.debug("probe_failed", probe=probe, error=str(e), error_type=type(e).__name__)
        return ProbeResult(error=f"{type(e).__name__}: {e}")
