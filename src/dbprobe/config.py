"""Configuration management for dbprobe.

Provides environment-based configuration using Pydantic Settings.
All settings can be overridden via environment variables with DBPROBE_ prefix.

Example:
    export DBPROBE_LOG_LEVEL=DEBUG
    export DBPROBE_LOG_FORMAT=json
    export DBPROBE_PROFILE_PATH=/etc/dbprobe/profile.yaml
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DbProbeConfig(BaseSettings):
    """Configuration settings for dbprobe.

    Loads settings from environment variables (DBPROBE_ prefix) and .env file.
    Settings cascade: .env file < environment variables < command-line options.

    Configuration Groups:
        Logging: Level and renderer for structlog output (stderr)
        Checks: Default profile file and report format
    """

    model_config = SettingsConfigDict(
        env_prefix="DBPROBE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Logging
    log_level: str = Field(default="WARNING", description="Logging level")
    log_format: str = Field(default="console", description="Log format (json or console)")
    debug: bool = Field(default=False, description="Force DEBUG logging")

    # Checks
    profile_path: Path | None = Field(
        default=None,
        description="Check profile (YAML/JSON) overriding the default capability names",
    )
    output_format: Literal["text", "json"] = Field(
        default="text",
        description="Report format written to stdout",
    )
