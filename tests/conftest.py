"""
Test fixtures for the Trellis test suite.

Provides:
- Temporary directory fixtures (isolated from the working directory's .trellis/)
- Mock data builders for creating work items and releases
- A stored release with the standard sample hierarchy
"""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Generator, List, Optional

import pytest

from trellis.constants import reset_config_manager
from trellis.managers.navigation_manager import HierarchyNavigator
from trellis.managers.storage_manager import StorageManager
from trellis.models.base import WorkItem, WorkItemType
from trellis.models.release import Release


# =============================================================================
# Temporary Directory Fixtures
# =============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test isolation.

    Ensures tests don't modify a real .trellis/ directory.
    """
    temp_path = Path(tempfile.mkdtemp(prefix="trellis_test_"))
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def trellis_dir(temp_dir: Path) -> Path:
    """Path to a .trellis/ directory inside the temp dir (not created yet)."""
    return temp_dir / ".trellis"


@pytest.fixture
def storage(trellis_dir: Path) -> StorageManager:
    """StorageManager rooted in the temporary .trellis/ directory."""
    return StorageManager(trellis_dir)


@pytest.fixture(autouse=True)
def isolated_settings() -> Generator[None, None, None]:
    """Reset the config singleton and detach file log handlers around each test."""
    reset_config_manager()
    yield
    reset_config_manager()
    trellis_logger = logging.getLogger("trellis")
    for handler in trellis_logger.handlers[:]:
        trellis_logger.removeHandler(handler)
        handler.close()
    trellis_logger.setLevel(logging.NOTSET)


# =============================================================================
# Mock Data Builders
# =============================================================================


class MockDataBuilder:
    """Helper class for building work items for testing."""

    @staticmethod
    def create_item(
        item_id: str,
        item_type: WorkItemType,
        title: Optional[str] = None,
        parent_id: Optional[str] = None,
        **fields,
    ) -> WorkItem:
        """Create a work item; the title defaults to the id."""
        return WorkItem(
            id=item_id,
            type=item_type,
            title=title or item_id,
            parent_id=parent_id,
            **fields,
        )

    @staticmethod
    def sample_items() -> List[WorkItem]:
        """The standard sample hierarchy, deliberately not in display order.

        Structure:
            E1 (EPIC)
            ├── F1 (FEATURE)
            │   └── S1 (USER_STORY)
            │       └── B1 (BUG)
            └── F2 (FEATURE)
        """
        build = MockDataBuilder.create_item
        return [
            build("E1", WorkItemType.EPIC),
            build("F2", WorkItemType.FEATURE, parent_id="E1"),
            build("F1", WorkItemType.FEATURE, parent_id="E1"),
            build("S1", WorkItemType.USER_STORY, parent_id="F1"),
            build("B1", WorkItemType.BUG, parent_id="S1"),
        ]

    @staticmethod
    def wide_items() -> List[WorkItem]:
        """Two epics with several siblings per level, plus loose roots.

        Titles mix case and accents so sibling sorting has work to do.
        """
        build = MockDataBuilder.create_item
        return [
            build("E2", WorkItemType.EPIC, title="Platform"),
            build("B3", WorkItemType.BUG, title="Loose bug"),
            build("E1", WorkItemType.EPIC, title="Billing"),
            build("F3", WorkItemType.FEATURE, title="search", parent_id="E2"),
            build("F1", WorkItemType.FEATURE, title="Invoices", parent_id="E1"),
            build("S4", WorkItemType.USER_STORY, title="Unplanned story"),
            build("F2", WorkItemType.FEATURE, title="Refunds", parent_id="E1"),
            build("F4", WorkItemType.FEATURE, title="Éclair export", parent_id="E2"),
            build("S3", WorkItemType.USER_STORY, title="Export CSV", parent_id="F4"),
            build("S1", WorkItemType.USER_STORY, title="Send invoice", parent_id="F1"),
            build("S2", WorkItemType.USER_STORY, title="void invoice", parent_id="F1"),
            build("B2", WorkItemType.BUG, title="Totals wrong", parent_id="S1"),
            build("B1", WorkItemType.BUG, title="Crash on send", parent_id="S1"),
            build("B4", WorkItemType.BUG, title="Typo", parent_id="S3"),
        ]

    @staticmethod
    def dangling_items() -> List[WorkItem]:
        """A forest where some parent references point at missing items."""
        build = MockDataBuilder.create_item
        return [
            build("S1", WorkItemType.USER_STORY, title="Lost story", parent_id="gone"),
            build("E1", WorkItemType.EPIC, title="Epic"),
            build("B1", WorkItemType.BUG, title="Bug under lost story", parent_id="S1"),
            build("F2", WorkItemType.FEATURE, title="Lost feature", parent_id="missing"),
            build("F1", WorkItemType.FEATURE, title="Feature", parent_id="E1"),
            build("S2", WorkItemType.USER_STORY, title="Story", parent_id="F2"),
        ]


@pytest.fixture
def mock_data() -> MockDataBuilder:
    """Provide mock data builder for test item creation."""
    return MockDataBuilder()


@pytest.fixture
def sample_items(mock_data: MockDataBuilder) -> List[WorkItem]:
    """Work items of the sample hierarchy in store order E1, F2, F1, S1, B1."""
    return mock_data.sample_items()


@pytest.fixture(params=["sample", "wide", "dangling"])
def store(request) -> List[WorkItem]:
    """Each acyclic store shape in turn: sample, wide and dangling."""
    return getattr(MockDataBuilder, f"{request.param}_items")()


@pytest.fixture
def navigator(sample_items: List[WorkItem]) -> HierarchyNavigator:
    """Navigator over the sample hierarchy."""
    return HierarchyNavigator(sample_items)


@pytest.fixture
def sample_release(storage: StorageManager, sample_items: List[WorkItem]) -> Release:
    """A stored release holding the sample hierarchy."""
    release = storage.create_release("Spring Release", version="1.4.0")
    return storage.replace_release(release.model_copy(update={"work_items": sample_items}))
