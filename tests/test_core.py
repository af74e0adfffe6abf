"""
Tests for TrellisCore orchestration.
"""
import logging

import pytest

from trellis.core import TrellisCore
from trellis.exceptions import NotFoundError
from trellis.managers.events import EventBus
from trellis.models.base import WorkItemType
from trellis.models.forms import WorkItemFormData


@pytest.fixture
def core(sample_release, trellis_dir):
    return TrellisCore(sample_release.id, trellis_dir=trellis_dir)


class TestLoading:

    def test_loads_release(self, core, sample_release):
        assert core.release == sample_release

    def test_unknown_release(self, trellis_dir):
        with pytest.raises(NotFoundError):
            TrellisCore("missing", trellis_dir=trellis_dir)

    def test_collapse_state_is_loaded(self, storage, sample_release, trellis_dir):
        storage.save_collapsed(sample_release.id, ["F1"])
        core = TrellisCore(sample_release.id, trellis_dir=trellis_dir)
        assert core.collapsed == {"F1"}

    def test_explicit_event_bus_is_used(self, sample_release, trellis_dir):
        bus = EventBus()
        core = TrellisCore(sample_release.id, trellis_dir=trellis_dir, event_bus=bus)
        assert core.item_manager.event_bus is bus


class TestReads:

    def test_linearize(self, core):
        assert [i.id for i in core.linearize()] == ["E1", "F1", "S1", "B1", "F2"]

    def test_parent_and_children(self, core):
        assert core.get_parent(core.get_item("S1")).id == "F1"
        assert [c.id for c in core.get_children("E1")] == ["F2", "F1"]

    def test_valid_parents(self, core):
        assert [i.id for i in core.valid_parents(WorkItemType.BUG)] == ["S1"]
        assert core.valid_parents(WorkItemType.EPIC) == []

    def test_child_type_for(self, core):
        assert core.child_type_for("E1") == WorkItemType.FEATURE
        assert core.child_type_for("B1") is None
        assert core.child_type_for("missing") is None

    def test_item_counts(self, core):
        assert core.item_counts() == {"EPIC": 1, "FEATURE": 2, "USER_STORY": 1, "BUG": 1}

    def test_check_clean(self, core):
        assert core.check() == []

    def test_count_descendants(self, core):
        assert core.count_descendants("E1") == 4


class TestTableRows:

    def test_hidden_rows_filtered(self, core):
        core.set_collapsed("E1", True)
        assert [r.item.id for r in core.table_rows()] == ["E1"]
        assert len(core.table_rows(include_hidden=True)) == 5


class TestChanges:

    def test_add_and_activity_log(self, core, caplog):
        with caplog.at_level(logging.INFO, logger="trellis"):
            item = core.add_item(WorkItemFormData(type="BUG", title="Crash", parent_id="S1"))
        assert core.get_item(item.id) is not None
        assert "Created BUG 'Crash'" in caplog.text

    def test_update(self, core):
        core.update_item("F2", WorkItemFormData(type="FEATURE", title="Reporting", parent_id="E1"))
        assert core.get_item("F2").title == "Reporting"
        assert [i.id for i in core.linearize()] == ["E1", "F1", "S1", "B1", "F2"]

    def test_delete_prunes_collapse_state(self, core, storage):
        core.set_collapsed("F1", True)
        core.set_collapsed("E1", True)
        core.delete_items(["F1"])

        assert [i.id for i in core.release.work_items] == ["E1", "F2"]
        assert core.collapsed == {"E1"}
        assert storage.load_collapsed(core.release.id) == ["E1"]


class TestCollapseState:
    """Test collapse toggles persist between sessions."""

    def test_toggle_persists(self, core, sample_release, trellis_dir):
        assert core.toggle_collapse("F1") is True
        reopened = TrellisCore(sample_release.id, trellis_dir=trellis_dir)
        assert reopened.collapsed == {"F1"}

    def test_toggle_leaf_does_nothing(self, core):
        assert core.toggle_collapse("B1") is False
        assert core.collapsed == set()

    def test_set_collapsed_is_idempotent(self, core):
        assert core.set_collapsed("F1", True) is True
        assert core.set_collapsed("F1", True) is True
        assert core.collapsed == {"F1"}
        assert core.set_collapsed("F1", False) is False
        assert core.collapsed == set()

    def test_toggle_all(self, core):
        assert core.toggle_all() is True
        assert core.is_all_collapsed()
        assert core.collapsed == {"E1", "F1", "S1"}
        assert core.toggle_all() is False
        assert core.collapsed == set()

    def test_collapse_and_expand_all(self, core):
        core.collapse_all()
        assert core.collapsed == {"E1", "F1", "S1"}
        core.expand_all()
        assert core.collapsed == set()
