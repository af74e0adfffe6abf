"""
ItemManager for work-item changes within one release.

Every change is computed as a complete new work-item list, handed to the
store as a whole-document replace, and only adopted once the store has
accepted it. Nothing is applied optimistically.
"""
import logging
from datetime import datetime
from typing import Iterable, List, Optional

from trellis.constants import get_title_max_length
from trellis.exceptions import (
    InvalidOperationError,
    NotFoundError,
    PersistenceError,
    StorageError,
    ValidationError,
)
from trellis.managers.deletion_manager import DeletionManager, DeletionPlan
from trellis.managers.events import EventBus, EventType, WorkItemEvent, get_event_bus
from trellis.managers.navigation_manager import HierarchyNavigator
from trellis.managers.parent_resolver import ParentResolver, parent_type_for
from trellis.managers.storage_manager import StorageManager
from trellis.models.base import WorkItem
from trellis.models.forms import WorkItemFormData
from trellis.models.release import Release

logger = logging.getLogger(__name__)


class ItemManager:
    """
    Manages add, edit and delete operations for one release's work items.

    Handles:
    - Form validation against the hierarchy rule before any change
    - Cascading single and bulk deletion
    - Persist-then-adopt commits through StorageManager
    - Publishing work-item events after a successful commit
    """

    def __init__(
        self,
        release: Release,
        storage: StorageManager,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        """
        Initialize ItemManager.

        Args:
            release: The currently authoritative release document.
            storage: StorageManager that accepts whole-document replacements.
            event_bus: Bus to publish events on. Defaults to the global bus.
        """
        self.release = release
        self.storage = storage
        self.event_bus = event_bus if event_bus is not None else get_event_bus()
        self._pending = False

    @property
    def navigator(self) -> HierarchyNavigator:
        """Navigator over the current authoritative items."""
        return HierarchyNavigator(self.release.work_items)

    def _require_item(self, item_id: str) -> WorkItem:
        item = self.release.get_work_item(item_id)
        if item is None:
            raise NotFoundError(
                f"Work item '{item_id}' not found in release '{self.release.id}'."
            )
        return item

    def _validate_title(self, form: WorkItemFormData) -> None:
        max_length = get_title_max_length()
        if len(form.title) > max_length:
            raise ValidationError(
                f"Title is too long ({len(form.title)} characters). "
                f"Maximum is {max_length}."
            )

    def _validate_parent(self, form: WorkItemFormData, navigator: HierarchyNavigator) -> None:
        resolver = ParentResolver(navigator)
        if resolver.is_valid_parent(form.type, form.parent_id):
            return

        wanted = parent_type_for(form.type)
        if wanted is None:
            raise ValidationError(f"{form.type.label} items cannot have a parent.")
        if navigator.get_item(form.parent_id) is None:
            raise ValidationError(f"Parent work item '{form.parent_id}' not found.")
        raise ValidationError(
            f"A {form.type.label} can only be placed under a {wanted.label}."
        )

    def _commit(self, work_items: List[WorkItem]) -> Release:
        """Persist a new work-item list and adopt the store's answer.

        Raises:
            InvalidOperationError: If another commit is still in flight.
            PersistenceError: If the store rejects the document; the current
                release is left unchanged.
        """
        if self._pending:
            raise InvalidOperationError(
                "A change to this release is already being saved. Try again when it completes."
            )

        self._pending = True
        try:
            candidate = self.release.model_copy(update={"work_items": work_items})
            accepted = self.storage.replace_release(candidate)
        except (StorageError, NotFoundError) as e:
            logger.error(
                "Saving release %s failed: %s", self.release.id, e,
                extra={"release_id": self.release.id},
            )
            raise PersistenceError(f"Failed to save release '{self.release.id}': {e}")
        finally:
            self._pending = False

        self.release = accepted
        return accepted

    def _publish(self, event_type: EventType, item: WorkItem, cascade: Optional[List[str]] = None) -> None:
        self.event_bus.publish(
            WorkItemEvent(
                type=event_type,
                release_id=self.release.id,
                item_id=item.id,
                item_type=item.type.value,
                title=item.title,
                parent_id=item.parent_id,
                data={"cascade": cascade or []},
            )
        )

    # =========================================================================
    # Add / update
    # =========================================================================

    def add_item(self, form: WorkItemFormData) -> WorkItem:
        """Add a new work item to the release.

        Args:
            form: Validated form data. A missing id is generated.

        Returns:
            The item as stored.

        Raises:
            ValidationError: If the title, id or parent choice is invalid.
            PersistenceError: If the store rejects the change.
        """
        navigator = self.navigator
        self._validate_title(form)
        if form.id is not None and navigator.get_item(form.id) is not None:
            raise ValidationError(f"A work item with id '{form.id}' already exists.")
        self._validate_parent(form, navigator)

        fields = form.model_dump(exclude_none=True)
        new_item = WorkItem(**fields)

        release = self._commit([*self.release.work_items, new_item])
        stored = release.get_work_item(new_item.id) or new_item
        self._publish(EventType.ITEM_CREATED, stored)
        return stored

    def update_item(self, item_id: str, form: WorkItemFormData) -> WorkItem:
        """Overwrite an existing item's fields.

        The item keeps its id, type and creation time.

        Raises:
            NotFoundError: If the item does not exist.
            InvalidOperationError: If the form changes the id or the type.
            ValidationError: If the title or parent choice is invalid.
            PersistenceError: If the store rejects the change.
        """
        existing = self._require_item(item_id)
        navigator = self.navigator

        if form.type != existing.type:
            raise InvalidOperationError(
                f"Cannot change the type of '{existing.title}' from "
                f"{existing.type.label} to {form.type.label}."
            )
        if form.id is not None and form.id != item_id:
            raise InvalidOperationError("The id of an existing work item cannot change.")

        self._validate_title(form)
        # an unchanged parent reference is kept as is, even when it no longer resolves
        if form.parent_id != existing.parent_id:
            self._validate_parent(form, navigator)
            new_parent = navigator.get_item(form.parent_id)
            if new_parent is not None and (
                new_parent.id == item_id or item_id in navigator.ancestor_chain(new_parent)
            ):
                raise ValidationError(
                    f"'{existing.title}' cannot be placed under itself or one of its descendants."
                )

        updated = existing.model_copy(
            update={
                "title": form.title,
                "parent_id": form.parent_id,
                "flag_name": form.flag_name,
                "remarks": form.remarks,
                "hyperlink": form.hyperlink,
                "actual_hours": form.actual_hours,
                "updated_at": datetime.now(),
            }
        )

        work_items = list(self.release.work_items)
        work_items[work_items.index(existing)] = updated

        release = self._commit(work_items)
        stored = release.get_work_item(item_id) or updated
        self._publish(EventType.ITEM_UPDATED, stored)
        return stored

    # =========================================================================
    # Delete
    # =========================================================================

    def preview_deletion(self, item_ids: Iterable[str]) -> DeletionPlan:
        """Plan a deletion without applying it (for confirmation prompts).

        Raises:
            NotFoundError: If any id does not exist.
        """
        ids = list(item_ids)
        for item_id in ids:
            self._require_item(item_id)
        return DeletionManager(self.navigator).plan_deletion(ids)

    def delete_item(self, item_id: str) -> DeletionPlan:
        """Delete an item and all its descendants."""
        return self.delete_items([item_id])

    def delete_items(self, item_ids: Iterable[str]) -> DeletionPlan:
        """Delete several items and all their descendants in one commit.

        Returns:
            The executed plan (targets, cascaded descendants, survivors).

        Raises:
            NotFoundError: If any id does not exist.
            PersistenceError: If the store rejects the change.
        """
        plan = self.preview_deletion(item_ids)
        navigator = self.navigator
        targets = [item for item in self.release.work_items if item.id in plan.target_ids]

        self._commit(plan.survivors)

        for target in targets:
            cascade = [
                item.id for item in plan.descendants
                if target.id in navigator.ancestor_chain(item)
            ]
            self._publish(EventType.ITEM_DELETED, target, cascade)
        return plan
