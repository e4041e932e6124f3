"""YAML/JSON loader for check profiles.

A profile file overrides individual capability names of the default
CheckProfile, for images that ship a different driver stack:

    primary_driver: mysql.connector
    primary_type: mysql.connector.connection.MySQLConnection
    primary_constant: mysql.connector.constants.ClientFlag.MULTI_STATEMENTS
    listing_tokens: [mysql, sqlalchemy, connector]

Supported Formats:
    - .yaml, .yml: Parsed with ruamel.yaml (safe mode)
    - .json: Parsed with standard json module
"""

import json
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError
from ruamel.yaml import YAML

from dbprobe.types import CheckProfile

logger = structlog.get_logger(__name__)

# A profile is a handful of names; anything larger is not a profile
MAX_PROFILE_SIZE_BYTES = 1024 * 1024


class ProfileLoadError(Exception):
    """Raised when a profile file cannot be loaded, parsed or validated."""

    pass


def _validate_file_path(file_path: Path) -> None:
    """Validate file exists and is not too large.

    Raises:
        ProfileLoadError: If file doesn't exist or is too large
    """
    if not file_path.is_file():
        raise ProfileLoadError(f"Profile file not found: {file_path}")

    file_size = file_path.stat().st_size
    if file_size > MAX_PROFILE_SIZE_BYTES:
        raise ProfileLoadError(
            f"Profile file too large: {file_size} bytes exceeds maximum of "
            f"{MAX_PROFILE_SIZE_BYTES} bytes"
        )


def _parse_file_content(file_path: Path, content: str) -> dict[str, Any]:
    """Parse file content based on extension.

    Raises:
        ProfileLoadError: If parsing fails or format unsupported
    """
    suffix = file_path.suffix.lower()
    if suffix not in {".yaml", ".yml", ".json"}:
        raise ProfileLoadError(f"Unsupported file extension: {suffix}. Use .yaml, .yml, or .json")

    try:
        if suffix == ".json":
            data = json.loads(content)
        else:
            yaml = YAML(typ="safe", pure=True)
            data = yaml.load(content)
    except Exception as e:
        raise ProfileLoadError(f"Failed to parse {file_path}: {e}") from e

    # An empty file means "use every default"
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ProfileLoadError(f"Profile must be a dictionary/object, got {type(data).__name__}")

    return data


def load_profile(file_path: str | Path) -> CheckProfile:
    """Load a check profile from YAML or JSON.

    Keys present in the file replace the corresponding defaults; keys not
    present keep their default value.

    Args:
        file_path: Path to the profile file (.yaml, .yml, or .json)

    Returns:
        Validated CheckProfile

    Raises:
        ProfileLoadError: If the file cannot be read, parsed, or contains
            unknown keys or values of the wrong type
    """
    file_path = Path(file_path)
    logger.debug("load_profile_start", file_path=str(file_path))

    _validate_file_path(file_path)

    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ProfileLoadError(f"Failed to read {file_path}: {e}") from e

    data = _parse_file_content(file_path, content)

    try:
        profile = CheckProfile.model_validate(data)
    except PydanticValidationError as e:
        raise ProfileLoadError(f"Invalid profile {file_path}: {e}") from e

    logger.debug("profile_loaded", file_path=str(file_path), overrides=sorted(data))
    return profile
