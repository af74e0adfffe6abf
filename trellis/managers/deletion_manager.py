"""
DeletionManager for cascading work-item removal.

Removing an item removes every item whose ancestor chain contains it. Each
item is decided on its own, so copies of a duplicated id are judged by their
own parent references. The same plan backs both the confirmation preview and
the actual removal, and the count shown to the user matches what is removed.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Set

from trellis.managers.navigation_manager import HierarchyNavigator
from trellis.models.base import WorkItem


@dataclass
class DeletionPlan:
    """Result of planning a (bulk) deletion.

    Attributes:
        target_ids: Requested ids that exist in the store.
        removed: Removed items (targets and descendants), in store order.
        descendants: Removed items that were not themselves targets, in store order.
        survivors: Items kept, in their original relative order.
    """

    target_ids: Set[str] = field(default_factory=set)
    removed: List[WorkItem] = field(default_factory=list)
    descendants: List[WorkItem] = field(default_factory=list)
    survivors: List[WorkItem] = field(default_factory=list)

    @property
    def removed_ids(self) -> Set[str]:
        return {item.id for item in self.removed}

    @property
    def descendant_count(self) -> int:
        return len(self.descendants)

    @property
    def descendant_titles(self) -> List[str]:
        return [item.title for item in self.descendants]

    @property
    def is_empty(self) -> bool:
        return not self.removed


class DeletionManager:
    """
    Computes the surviving work items after single or bulk deletion.

    All methods are pure: the navigator's items are never modified.
    """

    def __init__(self, navigator: HierarchyNavigator) -> None:
        """
        Initialize DeletionManager.

        Args:
            navigator: HierarchyNavigator over the release's items.
        """
        self.navigator = navigator

    def plan_deletion(self, target_ids: Iterable[str]) -> DeletionPlan:
        """Plan removal of targets and everything beneath them.

        Unknown target ids are ignored. Dangling references to an unknown id
        do not make their holders removable, matching the ancestor-chain
        rule (an unresolved parent is not an ancestor).

        Args:
            target_ids: Ids to remove.

        Returns:
            DeletionPlan with removed ids, affected descendants and survivors.
        """
        known = {
            target for target in target_ids
            if self.navigator.get_item(target) is not None
        }
        plan = DeletionPlan(target_ids=known)
        for item in self.navigator.items:
            if item.id in known:
                plan.removed.append(item)
            elif any(ancestor in known for ancestor in self.navigator.ancestor_chain(item)):
                plan.removed.append(item)
                plan.descendants.append(item)
            else:
                plan.survivors.append(item)
        return plan

    def remove_with_descendants(self, target_id: str) -> List[WorkItem]:
        """Items left after removing target_id and its whole subtree."""
        return self.remove_many_with_descendants({target_id})

    def remove_many_with_descendants(self, target_ids: Iterable[str]) -> List[WorkItem]:
        """Items left after removing every target and every item beneath one."""
        return self.plan_deletion(target_ids).survivors

    def count_descendants(self, target_id: str) -> int:
        """How many items besides target_id a deletion of target_id removes."""
        return self.plan_deletion({target_id}).descendant_count
