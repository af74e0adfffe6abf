"""
Work item model for Trellis.

A release owns a flat list of work items. Each item points at its logical
parent through ``parent_id``; the list as a whole forms a forest of at most
four levels (Epic > Feature > User Story > Bug).
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from trellis.constants import VALIDATION_TITLE_REQUIRED


class WorkItemType(str, Enum):
    """Work item types in hierarchy order."""

    EPIC = "EPIC"
    FEATURE = "FEATURE"
    USER_STORY = "USER_STORY"
    BUG = "BUG"

    @property
    def rank(self) -> int:
        """Fixed hierarchy rank: EPIC=0 through BUG=3."""
        return _TYPE_ORDER.index(self)

    @property
    def label(self) -> str:
        """Human-readable label, e.g. 'USER STORY'."""
        return self.value.replace("_", " ")


_TYPE_ORDER = [
    WorkItemType.EPIC,
    WorkItemType.FEATURE,
    WorkItemType.USER_STORY,
    WorkItemType.BUG,
]


class DocumentModel(BaseModel):
    """Base for models stored inside a release document.

    Fields are snake_case in Python and camelCase on disk; both spellings
    are accepted when validating.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WorkItem(DocumentModel):
    """
    A unit of tracked work attached to a release.

    Fields:
    - id: Unique identifier (client-generated for new items)
    - type: Epic, Feature, User Story or Bug; fixed once created
    - title: Display label, also the secondary sort key
    - parent_id: Logical parent, None for roots
    - flag_name, remarks, hyperlink, actual_hours: Descriptive only
    - timestamps: created_at, updated_at (stamped by the store)
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    type: WorkItemType
    title: str
    parent_id: Optional[str] = None
    flag_name: Optional[str] = None
    remarks: Optional[str] = None
    hyperlink: Optional[str] = None
    actual_hours: Optional[float] = Field(default=None, ge=0)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Strip the title and reject empty ones."""
        v = v.strip()
        if not v:
            raise ValueError(VALIDATION_TITLE_REQUIRED)
        return v

    @field_validator("parent_id")
    @classmethod
    def normalize_parent_id(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty parent reference as no parent."""
        if v is None or not v.strip():
            return None
        return v

    @property
    def is_root(self) -> bool:
        """True when the item has no parent reference."""
        return self.parent_id is None
