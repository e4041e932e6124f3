"""dbprobe - Verify database driver capabilities of the running Python runtime."""

from dbprobe.capability import verify_runtime
from dbprobe.inspector import PythonRuntimeInspector

# Version (managed in pyproject.toml)
__version__ = "0.1.0"

__all__ = ["PythonRuntimeInspector", "__version__", "verify_runtime"]
