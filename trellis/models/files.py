"""
File models for Trellis.

Models representing the structure of auxiliary JSON files in the .trellis/
directory. Release documents live in releases/<id>.json (see Release).
"""

from typing import Dict, List

from pydantic import BaseModel, Field, field_validator

from trellis.constants import (
    DEFAULT_INDENT_BASE,
    DEFAULT_INDENT_UNIT,
    DEFAULT_LOG_LEVEL,
    DEFAULT_TITLE_MAX_LENGTH,
)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class ConfigFile(BaseModel):
    """Model for config.json file.

    Project settings and configuration.
    """

    schema_version: str = "0.3.0"

    # Table settings
    indent_unit: int = Field(default=DEFAULT_INDENT_UNIT, ge=0)
    indent_base: int = Field(default=DEFAULT_INDENT_BASE, ge=0)

    # Work item settings
    title_max_length: int = Field(default=DEFAULT_TITLE_MAX_LENGTH, gt=0)

    # Logging settings
    log_level: str = DEFAULT_LOG_LEVEL

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level


class ViewStateFile(BaseModel):
    """Model for view.json file.

    Collapse state per release: release id -> ids of collapsed work items.
    Kept apart from the release documents so UI state never touches items.
    """

    collapsed: Dict[str, List[str]] = Field(default_factory=dict)
