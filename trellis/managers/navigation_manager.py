"""
HierarchyNavigator for parent-pointer traversal.

Handles all reads over the flat work-item list: ancestor chains, depth,
children lookup and integrity checks. Nothing here mutates the items.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set

from trellis.models.base import WorkItem

logger = logging.getLogger(__name__)


def build_children_index(items: Iterable[WorkItem]) -> Dict[str, List[WorkItem]]:
    """Map each referenced parent id to its children, in store order."""
    index: Dict[str, List[WorkItem]] = {}
    for item in items:
        if item.parent_id is not None:
            index.setdefault(item.parent_id, []).append(item)
    return index


@dataclass(frozen=True)
class HierarchyIssue:
    """One integrity finding. kind is 'dangling', 'cycle', 'rank' or 'duplicate'."""

    kind: str
    item_id: str
    message: str


class HierarchyNavigator:
    """
    Read-only view over one release's work items.

    Handles:
    - id lookup (first occurrence wins for duplicated ids)
    - Ancestor chains and depth
    - Children and descendant lookup
    - Integrity report (dangling parents, cycles, rank mismatches)
    """

    def __init__(self, items: Iterable[WorkItem]) -> None:
        """
        Initialize HierarchyNavigator.

        Args:
            items: The release's work items. The list is copied, not owned.
        """
        self.items: List[WorkItem] = list(items)
        self._id_map: Dict[str, WorkItem] = {}
        for item in self.items:
            self._id_map.setdefault(item.id, item)
        self._children = build_children_index(self.items)

    def get_item(self, item_id: Optional[str]) -> Optional[WorkItem]:
        """Get an item by id, or None when absent."""
        if item_id is None:
            return None
        return self._id_map.get(item_id)

    def get_parent(self, item: WorkItem) -> Optional[WorkItem]:
        """Get the item's parent, or None for roots and dangling references."""
        return self.get_item(item.parent_id)

    def ancestor_chain(self, item: WorkItem) -> List[str]:
        """Walk parent references upward from an item.

        The walk stops at a missing parent reference, at a reference that does
        not resolve to an item, or at an id already visited (cycle).

        Args:
            item: Item to start from (not included in the chain).

        Returns:
            Ancestor ids, nearest parent first.
        """
        chain: List[str] = []
        seen = {item.id}
        parent = self.get_parent(item)
        while parent is not None and parent.id not in seen:
            chain.append(parent.id)
            seen.add(parent.id)
            parent = self.get_parent(parent)
        return chain

    def depth(self, item: WorkItem) -> int:
        """Number of hops from the item to its effective root."""
        return len(self.ancestor_chain(item))

    def has_children(self, item_id: str) -> bool:
        """True iff some item names item_id as its parent."""
        return bool(self._children.get(item_id))

    def children_of(self, item_id: str) -> List[WorkItem]:
        """Direct children of an item, in store order."""
        return list(self._children.get(item_id, []))

    def ids_with_children(self) -> Set[str]:
        """Ids of existing items that have at least one child."""
        return {item_id for item_id in self._children if item_id in self._id_map}

    def is_effective_root(self, item: WorkItem) -> bool:
        """True for roots and for items whose parent reference does not resolve."""
        return self.get_parent(item) is None

    def descendants_of(self, item_id: str) -> List[WorkItem]:
        """All transitive descendants of an item, in store order.

        An unknown id has no descendants, even if dangling references name it.
        """
        if item_id not in self._id_map:
            return []
        return [item for item in self.items if item_id in self.ancestor_chain(item)]

    def count_descendants(self, item_id: str) -> int:
        """Number of items whose ancestor chain contains item_id."""
        return len(self.descendants_of(item_id))

    # =========================================================================
    # Integrity report
    # =========================================================================

    def find_cycle_members(self) -> Set[str]:
        """Ids of items that sit on a parent-reference cycle."""
        members: Set[str] = set()
        cleared: Set[str] = set()

        for item in self.items:
            path: List[str] = []
            position: Dict[str, int] = {}
            current: Optional[WorkItem] = item
            while current is not None and current.id not in cleared:
                if current.id in position:
                    members.update(path[position[current.id]:])
                    break
                position[current.id] = len(path)
                path.append(current.id)
                current = self.get_parent(current)
            cleared.update(path)

        return members

    def find_issues(self) -> List[HierarchyIssue]:
        """Report referential problems without changing anything.

        Returns:
            Issues in store order: duplicated ids, dangling parents,
            cycle members and rank-rule violations.
        """
        issues: List[HierarchyIssue] = []
        seen_ids: Set[str] = set()
        cycle_members = self.find_cycle_members()

        for item in self.items:
            if item.id in seen_ids:
                issues.append(
                    HierarchyIssue("duplicate", item.id, f"Id '{item.id}' is used by more than one item.")
                )
            seen_ids.add(item.id)

            if item.parent_id is None:
                continue

            parent = self.get_parent(item)
            if parent is None:
                issues.append(
                    HierarchyIssue(
                        "dangling",
                        item.id,
                        f"Parent '{item.parent_id}' of '{item.title}' does not exist; "
                        f"the item is shown as a root.",
                    )
                )
                continue

            if item.id in cycle_members:
                issues.append(
                    HierarchyIssue(
                        "cycle",
                        item.id,
                        f"'{item.title}' is part of a parent-reference cycle and "
                        f"cannot be placed in the table.",
                    )
                )

            if parent.type.rank + 1 != item.type.rank:
                issues.append(
                    HierarchyIssue(
                        "rank",
                        item.id,
                        f"{item.type.label} '{item.title}' is attached to "
                        f"{parent.type.label} '{parent.title}'.",
                    )
                )

        if issues:
            logger.warning("Hierarchy has %d integrity issue(s)", len(issues))
        return issues
