"""
VisibilityManager for collapse/expand state.

The collapse state is a plain set of item ids kept next to the items, never
stored on them. An item is hidden when any ancestor is collapsed.
"""

from typing import Iterable, List, Optional, Set

from trellis.managers.navigation_manager import HierarchyNavigator
from trellis.models.base import WorkItem


class VisibilityManager:
    """
    Tracks collapsed items and answers visibility questions.

    Handles:
    - Per-item visibility via the ancestor chain
    - Filtering a linearized sequence
    - Single toggles and collapse-all / expand-all
    """

    def __init__(
        self,
        navigator: HierarchyNavigator,
        collapsed: Optional[Iterable[str]] = None,
    ) -> None:
        """
        Initialize VisibilityManager.

        Args:
            navigator: HierarchyNavigator over the release's items.
            collapsed: Initially collapsed item ids.
        """
        self.navigator = navigator
        self.collapsed: Set[str] = set(collapsed or ())

    def is_collapsed(self, item_id: str) -> bool:
        return item_id in self.collapsed

    def is_visible(self, item: WorkItem) -> bool:
        """Roots are always visible; others are hidden under a collapsed ancestor."""
        if item.parent_id is None:
            return True
        return not any(
            ancestor_id in self.collapsed
            for ancestor_id in self.navigator.ancestor_chain(item)
        )

    def visible_items(self, ordered: Iterable[WorkItem]) -> List[WorkItem]:
        """Keep only the displayable items, preserving order."""
        return [item for item in ordered if self.is_visible(item)]

    def hidden_ids(self) -> Set[str]:
        """Ids of every item currently hidden."""
        return {item.id for item in self.navigator.items if not self.is_visible(item)}

    def toggle(self, item_id: str) -> bool:
        """Flip the collapse flag of an item that has children.

        Items without children cannot be collapsed; toggling them is a no-op.

        Returns:
            The item's collapse flag after the call.
        """
        if not self.navigator.has_children(item_id):
            return False
        if item_id in self.collapsed:
            self.collapsed.discard(item_id)
            return False
        self.collapsed.add(item_id)
        return True

    def is_all_collapsed(self) -> bool:
        """True iff every item with children is collapsed."""
        return self.navigator.ids_with_children() <= self.collapsed

    def collapse_all(self) -> None:
        self.collapsed = self.navigator.ids_with_children()

    def expand_all(self) -> None:
        self.collapsed = set()

    def toggle_all(self) -> bool:
        """Switch between everything collapsed and everything expanded.

        Returns:
            True if the tree is now fully collapsed.
        """
        if self.is_all_collapsed():
            self.expand_all()
            return False
        self.collapse_all()
        return True

    def prune(self) -> Set[str]:
        """Drop collapsed ids that no longer name an item with children.

        Returns:
            The ids that were dropped.
        """
        stale = self.collapsed - self.navigator.ids_with_children()
        self.collapsed -= stale
        return stale
