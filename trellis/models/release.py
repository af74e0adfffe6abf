"""
Release document model for Trellis.

The release record is the unit of persistence: it is loaded and replaced
as a whole, work items included.
"""

import re
import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from trellis.constants import VALIDATION_VERSION_FORMAT
from trellis.models.base import DocumentModel, WorkItem


class ReleaseStatus(str, Enum):
    """Valid status values for a release."""

    DRAFT = "draft"
    BETA = "beta"
    STABLE = "stable"
    DEPRECATED = "deprecated"


class Release(DocumentModel):
    """A release and the work items it owns."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    title: str
    description: str = ""
    version: Optional[str] = None
    status: ReleaseStatus = ReleaseStatus.DRAFT
    is_published: bool = False
    work_items: List[WorkItem] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Release title is required.")
        return v

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: Optional[str]) -> Optional[str]:
        """Validate semantic version format when a version is given."""
        if not v:
            return None
        if not re.match(r"^\d+\.\d+\.\d+(-[a-zA-Z0-9.-]+)?$", v):
            raise ValueError(VALIDATION_VERSION_FORMAT)
        return v

    def get_work_item(self, item_id: str) -> Optional[WorkItem]:
        """Find a work item by id (first match)."""
        for item in self.work_items:
            if item.id == item_id:
                return item
        return None
