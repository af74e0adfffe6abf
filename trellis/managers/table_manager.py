"""
TableManager for the work-item table.

Turns the flat work-item forest into one display order (hierarchical
pre-order, siblings by type rank then title) and decorates each row with
its depth and indentation.
"""

import logging
from dataclasses import dataclass
from typing import Collection, List, Optional, Set, Tuple

from trellis.constants import get_indent_base, get_indent_unit
from trellis.managers.navigation_manager import HierarchyNavigator, build_children_index
from trellis.models.base import WorkItem
from trellis.utils import title_sort_key

logger = logging.getLogger(__name__)


def sibling_sort_key(item: WorkItem) -> Tuple[int, Tuple[str, str, str], str]:
    """Order siblings by type rank, then title, then id."""
    return item.type.rank, title_sort_key(item.title), item.id


@dataclass(frozen=True)
class TableRow:
    """One display row of the work-item table."""

    item: WorkItem
    depth: int
    indent: int
    has_children: bool
    collapsed: bool
    visible: bool


class TableManager:
    """
    Builds the ordered, indentation-ready work-item table.

    Handles:
    - Linearization (pre-order with sibling sort keys)
    - Indentation (depth * unit + base)
    - Row decoration for a given collapse state
    """

    def __init__(
        self,
        navigator: HierarchyNavigator,
        indent_unit: Optional[int] = None,
        indent_base: Optional[int] = None,
    ) -> None:
        """
        Initialize TableManager.

        Args:
            navigator: HierarchyNavigator over the release's items.
            indent_unit: Indent per hierarchy level. Defaults to config value.
            indent_base: Indent of root rows. Defaults to config value.
        """
        self.navigator = navigator
        self.indent_unit = indent_unit if indent_unit is not None else get_indent_unit()
        self.indent_base = indent_base if indent_base is not None else get_indent_base()

    def linearize(self) -> List[WorkItem]:
        """Flatten the forest into display order.

        Roots (including items whose parent does not resolve) come first in
        sibling order, each followed by its whole subtree. An id is emitted
        at most once; items only reachable through a cycle are left out.

        Returns:
            Items in display order.
        """
        items = self.navigator.items
        children = build_children_index(items)
        roots = sorted(
            (item for item in items if self.navigator.is_effective_root(item)),
            key=sibling_sort_key,
        )

        ordered: List[WorkItem] = []
        processed: Set[str] = set()

        def _traverse(siblings: List[WorkItem]) -> None:
            for item in siblings:
                if item.id in processed:
                    continue
                processed.add(item.id)
                ordered.append(item)
                kids = children.get(item.id)
                if kids:
                    _traverse(sorted(kids, key=sibling_sort_key))

        _traverse(roots)

        omitted = {item.id for item in items} - processed
        if omitted:
            logger.warning(
                "Omitted %d work item(s) unreachable from any root: %s",
                len(omitted),
                ", ".join(sorted(omitted)),
            )
        return ordered

    def indent_for(self, item: WorkItem) -> int:
        """Indentation of an item's row."""
        return self.navigator.depth(item) * self.indent_unit + self.indent_base

    def rows(self, collapsed: Collection[str] = ()) -> List[TableRow]:
        """Linearize and decorate every row for the given collapse state.

        Args:
            collapsed: Ids of collapsed items.

        Returns:
            All rows in display order; hidden rows have visible=False.
        """
        collapsed_ids = set(collapsed)
        rows: List[TableRow] = []
        for item in self.linearize():
            chain = self.navigator.ancestor_chain(item)
            has_children = self.navigator.has_children(item.id)
            rows.append(
                TableRow(
                    item=item,
                    depth=len(chain),
                    indent=len(chain) * self.indent_unit + self.indent_base,
                    has_children=has_children,
                    collapsed=has_children and item.id in collapsed_ids,
                    visible=not any(ancestor in collapsed_ids for ancestor in chain),
                )
            )
        return rows
