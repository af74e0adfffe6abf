"""
Managers for Trellis.

This package contains focused manager classes that handle specific aspects of Trellis functionality:
- HierarchyNavigator: Ancestor chains, depth, children lookup, integrity report
- TableManager: Linearized table order and indentation
- VisibilityManager: Collapse/expand state and visibility
- DeletionManager: Cascading single and bulk deletion
- ParentResolver: Legal parent candidates per work item type
- ItemManager: Persist-then-adopt add/edit/delete
- StorageManager: Persistence to .trellis/ folder structure
- EventBus: Event-driven activity logging
"""

from trellis.managers.navigation_manager import (
    HierarchyIssue,
    HierarchyNavigator,
    build_children_index,
)
from trellis.managers.table_manager import TableManager, TableRow
from trellis.managers.visibility_manager import VisibilityManager
from trellis.managers.deletion_manager import DeletionManager, DeletionPlan
from trellis.managers.parent_resolver import (
    ParentResolver,
    child_type_for,
    parent_type_for,
)
from trellis.managers.storage_manager import StorageManager
from trellis.managers.events import (
    ActivityListener,
    Event,
    EventBus,
    EventListener,
    EventType,
    WorkItemEvent,
    get_event_bus,
)
from trellis.managers.item_manager import ItemManager

__all__ = [
    "HierarchyIssue",
    "HierarchyNavigator",
    "build_children_index",
    "TableManager",
    "TableRow",
    "VisibilityManager",
    "DeletionManager",
    "DeletionPlan",
    "ParentResolver",
    "child_type_for",
    "parent_type_for",
    "StorageManager",
    "ActivityListener",
    "Event",
    "EventBus",
    "EventListener",
    "EventType",
    "WorkItemEvent",
    "get_event_bus",
    "ItemManager",
]
