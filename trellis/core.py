"""
TrellisCore - business logic for one release's work-item tree.

Orchestrates manager classes for all operations on a release.
Uses StorageManager for .trellis/ folder-based storage exclusively.
Uses EventBus for decoupled activity logging.
"""

from pathlib import Path
from typing import Dict, Iterable, List, Optional

from trellis.managers import (
    ActivityListener,
    DeletionManager,
    DeletionPlan,
    EventBus,
    HierarchyIssue,
    HierarchyNavigator,
    ItemManager,
    ParentResolver,
    StorageManager,
    TableManager,
    TableRow,
    VisibilityManager,
    child_type_for,
)
from trellis.models.base import WorkItem, WorkItemType
from trellis.models.forms import WorkItemFormData
from trellis.models.release import Release


class TrellisCore:
    """
    Core class for work-item operations on one release.

    Orchestrates manager classes:
    - StorageManager: Persistence to .trellis/ folder
    - HierarchyNavigator: Ancestor chains, children, integrity report
    - TableManager: Linearized, indented table rows
    - VisibilityManager: Collapse state (persisted per release)
    - DeletionManager: Cascading deletion plans
    - ParentResolver: Legal parents for a type
    - ItemManager: Persist-then-adopt add/edit/delete
    """

    def __init__(
        self,
        release_id: str,
        trellis_dir: Optional[Path] = None,
        event_bus: Optional[EventBus] = None,
    ):
        """
        Initialize the TrellisCore for one release.

        Args:
            release_id: Id of the release document to work on.
            trellis_dir: Path to .trellis/ directory. Defaults to .trellis/ in current directory.
            event_bus: Event bus for work-item events. A private bus with an
                activity listener is created when omitted.

        Raises:
            NotFoundError: If the release does not exist.
            StorageError: If the release document cannot be read.
        """
        self.storage = StorageManager(trellis_dir)
        release = self.storage.load_release(release_id)

        if event_bus is None:
            event_bus = EventBus()
            event_bus.subscribe(ActivityListener())
        self.event_bus = event_bus

        self.item_manager = ItemManager(release, self.storage, self.event_bus)
        self.collapsed = set(self.storage.load_collapsed(release_id))

    @property
    def release(self) -> Release:
        """The current authoritative release document."""
        return self.item_manager.release

    @property
    def navigator(self) -> HierarchyNavigator:
        return HierarchyNavigator(self.release.work_items)

    def _visibility(self) -> VisibilityManager:
        return VisibilityManager(self.navigator, self.collapsed)

    def _save_collapsed(self, visibility: VisibilityManager) -> None:
        visibility.prune()
        self.collapsed = set(visibility.collapsed)
        self.storage.save_collapsed(self.release.id, list(self.collapsed))

    # =========================================================================
    # Reads
    # =========================================================================

    def get_item(self, item_id: str) -> Optional[WorkItem]:
        """Get a work item by id."""
        return self.navigator.get_item(item_id)

    def get_parent(self, item: WorkItem) -> Optional[WorkItem]:
        """Get the parent of a work item."""
        return self.navigator.get_parent(item)

    def get_children(self, item_id: str) -> List[WorkItem]:
        """Get the direct children of a work item."""
        return self.navigator.children_of(item_id)

    def linearize(self) -> List[WorkItem]:
        """All work items in table order."""
        return TableManager(self.navigator).linearize()

    def table_rows(self, include_hidden: bool = False) -> List[TableRow]:
        """Table rows for the current collapse state.

        Args:
            include_hidden: Also return rows hidden under collapsed items.
        """
        rows = TableManager(self.navigator).rows(self.collapsed)
        if include_hidden:
            return rows
        return [row for row in rows if row.visible]

    def valid_parents(self, item_type: WorkItemType) -> List[WorkItem]:
        """Items that may become the parent of an item_type item."""
        return ParentResolver(self.navigator).valid_parents(item_type)

    def child_type_for(self, parent_id: str) -> Optional[WorkItemType]:
        """Type of an item added directly under parent_id, if any."""
        parent = self.get_item(parent_id)
        if parent is None:
            return None
        return child_type_for(parent.type)

    def check(self) -> List[HierarchyIssue]:
        """Report dangling parents, cycles and rank-rule violations."""
        return self.navigator.find_issues()

    def item_counts(self) -> Dict[str, int]:
        """Number of work items per type."""
        counts = {item_type.value: 0 for item_type in WorkItemType}
        for item in self.release.work_items:
            counts[item.type.value] += 1
        return counts

    # =========================================================================
    # Changes
    # =========================================================================

    def add_item(self, form: WorkItemFormData) -> WorkItem:
        """Add a new work item."""
        return self.item_manager.add_item(form)

    def update_item(self, item_id: str, form: WorkItemFormData) -> WorkItem:
        """Update an existing work item."""
        return self.item_manager.update_item(item_id, form)

    def preview_deletion(self, item_ids: Iterable[str]) -> DeletionPlan:
        """Items a deletion would remove, for confirmation."""
        return self.item_manager.preview_deletion(item_ids)

    def delete_items(self, item_ids: Iterable[str]) -> DeletionPlan:
        """Delete items with their descendants and prune stale collapse state."""
        plan = self.item_manager.delete_items(item_ids)
        self._save_collapsed(self._visibility())
        return plan

    def count_descendants(self, item_id: str) -> int:
        """Number of descendants a deletion of item_id would also remove."""
        return DeletionManager(self.navigator).count_descendants(item_id)

    # =========================================================================
    # Collapse state
    # =========================================================================

    def toggle_collapse(self, item_id: str) -> bool:
        """Flip the collapse flag of an item with children.

        Returns:
            True if the item is now collapsed.
        """
        visibility = self._visibility()
        collapsed = visibility.toggle(item_id)
        self._save_collapsed(visibility)
        return collapsed

    def set_collapsed(self, item_id: str, collapsed: bool) -> bool:
        """Collapse or expand one item; returns the resulting flag."""
        if (item_id in self.collapsed) == collapsed:
            return collapsed
        return self.toggle_collapse(item_id)

    def toggle_all(self) -> bool:
        """Collapse everything, or expand everything if already collapsed."""
        visibility = self._visibility()
        all_collapsed = visibility.toggle_all()
        self._save_collapsed(visibility)
        return all_collapsed

    def collapse_all(self) -> None:
        visibility = self._visibility()
        visibility.collapse_all()
        self._save_collapsed(visibility)

    def expand_all(self) -> None:
        visibility = self._visibility()
        visibility.expand_all()
        self._save_collapsed(visibility)

    def is_all_collapsed(self) -> bool:
        return self._visibility().is_all_collapsed()
