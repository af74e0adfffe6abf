"""
Form data accepted when creating or editing a single work item.
"""

import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from trellis.constants import VALIDATION_HYPERLINK_FORMAT, VALIDATION_TITLE_REQUIRED
from trellis.models.base import WorkItemType


class WorkItemFormData(BaseModel):
    """Validated input for one work item.

    ``id`` is optional on create; a new one is generated when omitted.
    Empty strings for optional fields mean "not set".
    """

    type: WorkItemType
    id: Optional[str] = None
    title: str
    flag_name: Optional[str] = None
    remarks: Optional[str] = None
    hyperlink: Optional[str] = None
    actual_hours: Optional[float] = Field(default=None, ge=0)
    parent_id: Optional[str] = None

    @field_validator("id", "flag_name", "remarks", "hyperlink", "parent_id", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError(VALIDATION_TITLE_REQUIRED)
        return v

    @field_validator("hyperlink")
    @classmethod
    def validate_hyperlink(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not re.match(r"^https?://.+", v):
            raise ValueError(VALIDATION_HYPERLINK_FORMAT)
        return v
