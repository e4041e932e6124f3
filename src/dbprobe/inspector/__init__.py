"""Runtime introspection for capability checks."""

from dbprobe.inspector.base import RuntimeInspector, capture
from dbprobe.inspector.python_runtime import PythonRuntimeInspector

__all__ = [
    "PythonRuntimeInspector",
    "RuntimeInspector",
    "capture",
]
