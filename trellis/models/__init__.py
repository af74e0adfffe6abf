"""
Data models for Trellis.

Import models explicitly from their modules:
    from trellis.models.base import WorkItem, WorkItemType
    from trellis.models.release import Release, ReleaseStatus
    from trellis.models.forms import WorkItemFormData
    from trellis.models.files import ConfigFile, ViewStateFile
"""

from .base import WorkItem, WorkItemType
from .forms import WorkItemFormData
from .release import Release, ReleaseStatus

__all__ = [
    "Release",
    "ReleaseStatus",
    "WorkItem",
    "WorkItemFormData",
    "WorkItemType",
]
