"""
Tests for DeletionManager cascading removal.
"""
import itertools

import pytest

from trellis.managers.deletion_manager import DeletionManager
from trellis.managers.navigation_manager import HierarchyNavigator
from trellis.models.base import WorkItemType


def survivor_ids(items):
    return [item.id for item in items]


class TestSingleDeletion:
    """Test removing one item and its subtree."""

    def test_delete_feature_removes_story_and_bug(self, navigator):
        survivors = DeletionManager(navigator).remove_with_descendants("F1")
        assert survivor_ids(survivors) == ["E1", "F2"]

    def test_delete_root_removes_everything_below(self, navigator):
        assert DeletionManager(navigator).remove_with_descendants("E1") == []

    def test_delete_leaf(self, navigator):
        survivors = DeletionManager(navigator).remove_with_descendants("B1")
        assert survivor_ids(survivors) == ["E1", "F2", "F1", "S1"]

    def test_unknown_target_removes_nothing(self, navigator, sample_items):
        assert DeletionManager(navigator).remove_with_descendants("missing") == sample_items

    def test_unknown_target_does_not_remove_dangling_holders(self, mock_data):
        orphan = mock_data.create_item("S9", WorkItemType.USER_STORY, parent_id="gone")
        survivors = DeletionManager(HierarchyNavigator([orphan])).remove_with_descendants("gone")
        assert survivor_ids(survivors) == ["S9"]

    def test_survivors_keep_relative_order(self, mock_data):
        items = [
            mock_data.create_item("E2", WorkItemType.EPIC),
            mock_data.create_item("E1", WorkItemType.EPIC),
            mock_data.create_item("F1", WorkItemType.FEATURE, parent_id="E1"),
            mock_data.create_item("F3", WorkItemType.FEATURE, parent_id="E2"),
        ]
        survivors = DeletionManager(HierarchyNavigator(items)).remove_with_descendants("E1")
        assert survivor_ids(survivors) == ["E2", "F3"]

    def test_cycle_does_not_loop(self, mock_data):
        items = [
            mock_data.create_item("A", WorkItemType.FEATURE, parent_id="B"),
            mock_data.create_item("B", WorkItemType.FEATURE, parent_id="A"),
            mock_data.create_item("E1", WorkItemType.EPIC),
        ]
        survivors = DeletionManager(HierarchyNavigator(items)).remove_with_descendants("A")
        assert survivor_ids(survivors) == ["E1"]

    def test_no_survivor_has_removed_ancestor(self, navigator):
        for target in navigator.items:
            survivors = DeletionManager(navigator).remove_with_descendants(target.id)
            for item in survivors:
                assert item.id != target.id
                assert target.id not in navigator.ancestor_chain(item)


class TestBulkDeletion:
    """Test removing several items at once."""

    def test_bulk_equals_sequential_singles(self, navigator):
        bulk = DeletionManager(navigator).remove_many_with_descendants({"S1", "F2"})

        step = DeletionManager(navigator).remove_with_descendants("S1")
        step = DeletionManager(HierarchyNavigator(step)).remove_with_descendants("F2")
        assert survivor_ids(bulk) == survivor_ids(step) == ["E1", "F1"]

    def test_bulk_with_nested_targets(self, navigator):
        survivors = DeletionManager(navigator).remove_many_with_descendants(["F1", "B1"])
        assert survivor_ids(survivors) == ["E1", "F2"]

    def test_empty_target_set(self, navigator, sample_items):
        assert DeletionManager(navigator).remove_many_with_descendants(set()) == sample_items


class TestDeletionPlan:
    """Test the plan used for confirmation prompts."""

    def test_plan_lists_descendants_in_store_order(self, navigator):
        plan = DeletionManager(navigator).plan_deletion(["F1"])
        assert plan.target_ids == {"F1"}
        assert plan.removed_ids == {"F1", "S1", "B1"}
        assert plan.descendant_count == 2
        assert plan.descendant_titles == ["S1", "B1"]
        assert survivor_ids(plan.survivors) == ["E1", "F2"]

    def test_nested_target_is_not_counted_as_descendant(self, navigator):
        plan = DeletionManager(navigator).plan_deletion(["F1", "S1"])
        assert [d.id for d in plan.descendants] == ["B1"]

    def test_unknown_targets_are_ignored(self, navigator):
        plan = DeletionManager(navigator).plan_deletion(["missing"])
        assert plan.is_empty
        assert plan.target_ids == set()

    @pytest.mark.parametrize("item_id, expected", [("E1", 4), ("F1", 2), ("S1", 1), ("B1", 0), ("F2", 0)])
    def test_count_descendants(self, navigator, item_id, expected):
        assert DeletionManager(navigator).count_descendants(item_id) == expected

    def test_count_matches_removed(self, navigator):
        manager = DeletionManager(navigator)
        for item in navigator.items:
            removed = len(navigator.items) - len(manager.remove_with_descendants(item.id))
            assert manager.count_descendants(item.id) == removed - 1

    def test_duplicated_id_judged_by_each_copy(self, mock_data):
        items = [
            mock_data.create_item("P1", WorkItemType.EPIC),
            mock_data.create_item("P2", WorkItemType.EPIC),
            mock_data.create_item("T", WorkItemType.FEATURE, title="first T", parent_id="P1"),
            mock_data.create_item("T", WorkItemType.FEATURE, title="second T", parent_id="P2"),
            mock_data.create_item("C", WorkItemType.USER_STORY, parent_id="T"),
        ]
        manager = DeletionManager(HierarchyNavigator(items))

        survivors = manager.remove_with_descendants("P2")
        assert [item.title for item in survivors] == ["P1", "first T", "C"]
        assert manager.count_descendants("P2") == 1
        assert manager.plan_deletion(["P2"]).descendant_titles == ["second T"]


class TestDeletionAcrossStores:
    """Test the removal rule over several store shapes."""

    def test_removes_exactly_target_and_descendants(self, store):
        navigator = HierarchyNavigator(store)
        manager = DeletionManager(navigator)
        for target in store:
            survivors = manager.remove_with_descendants(target.id)
            expected = [
                item for item in store
                if item.id != target.id and target.id not in navigator.ancestor_chain(item)
            ]
            assert survivors == expected

    def test_count_matches_removed(self, store):
        manager = DeletionManager(HierarchyNavigator(store))
        for target in store:
            removed = len(store) - len(manager.remove_with_descendants(target.id))
            assert manager.count_descendants(target.id) == removed - 1

    def test_bulk_equals_sequential_singles(self, store):
        manager = DeletionManager(HierarchyNavigator(store))
        ids = [item.id for item in store]
        for first, second in itertools.combinations(ids, 2):
            bulk = manager.remove_many_with_descendants([first, second])

            step = manager.remove_with_descendants(first)
            step = DeletionManager(HierarchyNavigator(step)).remove_with_descendants(second)
            assert survivor_ids(bulk) == survivor_ids(step)
