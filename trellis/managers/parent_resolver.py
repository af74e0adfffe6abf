"""
ParentResolver for the one-level-up hierarchy rule.

A Feature hangs under an Epic, a User Story under a Feature and a Bug under
a User Story. Epics are always roots. The rule is checked when an item is
created or edited; existing items are never re-validated.
"""

from typing import Dict, List, Optional

from trellis.managers.navigation_manager import HierarchyNavigator
from trellis.models.base import WorkItem, WorkItemType

PARENT_TYPES: Dict[WorkItemType, WorkItemType] = {
    WorkItemType.FEATURE: WorkItemType.EPIC,
    WorkItemType.USER_STORY: WorkItemType.FEATURE,
    WorkItemType.BUG: WorkItemType.USER_STORY,
}

CHILD_TYPES: Dict[WorkItemType, WorkItemType] = {
    parent: child for child, parent in PARENT_TYPES.items()
}


def parent_type_for(item_type: WorkItemType) -> Optional[WorkItemType]:
    """Type a parent of item_type must have, or None for Epics."""
    return PARENT_TYPES.get(item_type)


def child_type_for(parent_type: WorkItemType) -> Optional[WorkItemType]:
    """Type of a child added under parent_type, or None for Bugs."""
    return CHILD_TYPES.get(parent_type)


class ParentResolver:
    """
    Lists legal parents for a work item type.

    This is a static lookup by type: a candidate's own ancestry is not
    inspected.
    """

    def __init__(self, navigator: HierarchyNavigator) -> None:
        """
        Initialize ParentResolver.

        Args:
            navigator: HierarchyNavigator over the release's items.
        """
        self.navigator = navigator

    def valid_parents(self, target_type: WorkItemType) -> List[WorkItem]:
        """Items eligible as parent of a target_type item, in store order.

        Args:
            target_type: Type of the item being created or edited.

        Returns:
            Candidate parents; always empty for Epics.
        """
        wanted = parent_type_for(target_type)
        if wanted is None:
            return []
        return [item for item in self.navigator.items if item.type == wanted]

    def is_valid_parent(self, item_type: WorkItemType, parent_id: Optional[str]) -> bool:
        """Check a parent choice against the one-level-up rule.

        Any type may be created without a parent. When a parent is given it
        must exist and be exactly one rank above item_type, so Epics never
        take one.
        """
        if parent_id is None:
            return True
        wanted = parent_type_for(item_type)
        parent = self.navigator.get_item(parent_id)
        return parent is not None and wanted is not None and parent.type == wanted
