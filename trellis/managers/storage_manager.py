"""
Storage manager for Trellis.

Handles loading and saving of all JSON files in the .trellis/ directory.
Each release is one document under releases/; updates replace the whole
document, work items included.
"""

import json
import logging
import os
import re
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from trellis.constants import DEFAULT_TRELLIS_DIR
from trellis.exceptions import ConfigurationError, NotFoundError, StorageError
from trellis.exceptions import ValidationError as InvalidDataError
from trellis.models.files import ConfigFile, ViewStateFile
from trellis.models.release import Release, ReleaseStatus
from trellis.utils import format_validation_error

logger = logging.getLogger(__name__)

_RELEASE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class StorageManager:
    """
    Manages persistence of release documents and settings in .trellis/.

    Handles atomic writes to prevent data corruption. There is no locking or
    versioning: concurrent writers race and the last write wins.
    """

    def __init__(self, trellis_dir: Optional[Path] = None) -> None:
        """
        Initialize the StorageManager with a .trellis/ directory path.

        Args:
            trellis_dir: Path to the .trellis/ directory. Defaults to .trellis/ in current directory.
        """
        self.trellis_dir = trellis_dir if trellis_dir else Path(DEFAULT_TRELLIS_DIR)
        self.releases_dir = self.trellis_dir / "releases"
        self._ensure_trellis_dir()

    def _ensure_trellis_dir(self) -> None:
        """Create the .trellis/ directory and releases subdirectory if they don't exist."""
        self.trellis_dir.mkdir(parents=True, exist_ok=True)
        self.releases_dir.mkdir(exist_ok=True)

    def _atomic_write(self, file_path: Path, data: Dict[str, Any]) -> None:
        """Write data to a JSON file atomically to prevent corruption.

        Args:
            file_path: Path to the file to write.
            data: Dictionary data to write as JSON.

        Raises:
            StorageError: If writing to file fails.
        """
        temp_fd, temp_path = tempfile.mkstemp(
            dir=self.trellis_dir, prefix=".tmp_trellis_", suffix=".json"
        )

        try:
            with os.fdopen(temp_fd, "w") as temp_file:
                json.dump(data, temp_file, indent=2)
            os.replace(temp_path, file_path)
        except Exception as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise StorageError(f"Failed to write to {file_path}: {e}")

    def _read_json(self, file_path: Path) -> Dict[str, Any]:
        with open(file_path, "r") as f:
            return json.load(f)

    # =========================================================================
    # Release documents
    # =========================================================================

    def _release_path(self, release_id: str) -> Path:
        if not _RELEASE_ID_PATTERN.match(release_id):
            raise NotFoundError(f"Invalid release id: '{release_id}'.")
        return self.releases_dir / f"{release_id}.json"

    def _write_release(self, release: Release) -> None:
        self._atomic_write(
            self._release_path(release.id),
            release.model_dump(mode="json", by_alias=True),
        )

    def _normalize(self, release: Release) -> Release:
        """Apply the store-side rules to a release before it is written.

        - a published draft becomes stable
        - updated_at is restamped
        - work items without timestamps receive them
        """
        now = datetime.now()
        normalized = release.model_copy(deep=True)
        if normalized.is_published and normalized.status == ReleaseStatus.DRAFT:
            normalized.status = ReleaseStatus.STABLE
        normalized.updated_at = now
        for item in normalized.work_items:
            if item.created_at is None:
                item.created_at = now
            if item.updated_at is None:
                item.updated_at = item.created_at
        return normalized

    def release_exists(self, release_id: str) -> bool:
        return self._release_path(release_id).exists()

    def load_release(self, release_id: str) -> Release:
        """Load a release document.

        Raises:
            NotFoundError: If no document exists for release_id.
            StorageError: If the document cannot be decoded or validated.
        """
        file_path = self._release_path(release_id)
        if not file_path.exists():
            raise NotFoundError(f"Release '{release_id}' not found.")

        try:
            return Release.model_validate(self._read_json(file_path))
        except (json.JSONDecodeError, ValidationError, OSError) as e:
            raise StorageError(f"Failed to load release '{release_id}': {e}")

    def list_releases(self) -> List[Release]:
        """Load every release document, oldest first."""
        releases = [
            self.load_release(path.stem)
            for path in self.releases_dir.glob("*.json")
        ]
        return sorted(releases, key=lambda r: (r.created_at, r.id))

    def create_release(
        self,
        title: str,
        description: str = "",
        version: Optional[str] = None,
    ) -> Release:
        """Create and store an empty release document.

        Raises:
            ValidationError: If the title or version is invalid.
        """
        try:
            release = Release(title=title, description=description, version=version)
        except ValidationError as e:
            raise InvalidDataError(format_validation_error(e))

        release = self._normalize(release)
        self._write_release(release)
        logger.info("Created release %s", release.id, extra={"release_id": release.id})
        return self.load_release(release.id)

    def replace_release(self, release: Release) -> Release:
        """Replace a stored release document as a whole.

        Args:
            release: The complete new document.

        Returns:
            The document as accepted and normalized by the store.

        Raises:
            NotFoundError: If the release was never created.
            StorageError: If the write fails.
        """
        if not self.release_exists(release.id):
            raise NotFoundError(f"Release '{release.id}' not found.")
        self._write_release(self._normalize(release))
        return self.load_release(release.id)

    # =========================================================================
    # Config File
    # =========================================================================

    def load_config(self) -> ConfigFile:
        """Load config.json and return as ConfigFile model.

        Raises:
            ConfigurationError: If config.json is not valid JSON or holds invalid values.
        """
        file_path = self.trellis_dir / "config.json"
        if not file_path.exists():
            return ConfigFile()

        try:
            return ConfigFile.model_validate(self._read_json(file_path))
        except (json.JSONDecodeError, ValidationError) as e:
            raise ConfigurationError(f"Invalid config.json: {e}")

    def save_config(self, data: ConfigFile) -> None:
        """Save ConfigFile model to config.json."""
        self._atomic_write(self.trellis_dir / "config.json", data.model_dump(mode="json"))

    # =========================================================================
    # View State File
    # =========================================================================

    def load_view_state(self) -> ViewStateFile:
        """Load view.json and return as ViewStateFile model."""
        file_path = self.trellis_dir / "view.json"
        if not file_path.exists():
            return ViewStateFile()

        try:
            return ViewStateFile.model_validate(self._read_json(file_path))
        except (json.JSONDecodeError, ValidationError) as e:
            raise StorageError(f"Failed to load view.json: {e}")

    def save_view_state(self, data: ViewStateFile) -> None:
        """Save ViewStateFile model to view.json."""
        self._atomic_write(self.trellis_dir / "view.json", data.model_dump(mode="json"))

    def load_collapsed(self, release_id: str) -> List[str]:
        """Collapsed item ids stored for one release."""
        return list(self.load_view_state().collapsed.get(release_id, []))

    def save_collapsed(self, release_id: str, collapsed: List[str]) -> None:
        """Store the collapsed item ids of one release."""
        state = self.load_view_state()
        if collapsed:
            state.collapsed[release_id] = sorted(collapsed)
        else:
            state.collapsed.pop(release_id, None)
        self.save_view_state(state)
