"""
flatdocs VersionStore — append-only pre-edit history per document.

Layout, next to the live document:
    {data_dir}/{name} versions/{n}.{ext}

``snapshot`` must complete before the live document is overwritten, so the
content held immediately before each edit stays recoverable.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import List, Optional, Union

from flatdocs.documents import naming
from flatdocs.documents.models import VersionedSnapshot
from flatdocs.documents.store import Content, as_bytes
from flatdocs.engine.errors import AlreadyExistsError, NotFoundError, StorageError

logger = logging.getLogger("flatdocs.documents.versions")

HISTORY_SUFFIX = " versions"


class VersionStore:
    """Per-document history keyed by a monotonically increasing version number."""

    def __init__(self, data_dir: Union[str, Path]):
        self._root = Path(data_dir)

    def history_dir(self, document_name: str) -> Path:
        naming.check_safe(document_name)
        return self._root / f"{document_name}{HISTORY_SUFFIX}"

    def _version_path(self, document_name: str, version: int) -> Path:
        _, ext = naming.split(document_name)
        return self.history_dir(document_name) / f"{version}.{ext}"

    def list_versions(self, document_name: str) -> List[int]:
        """Version numbers in raw enumeration order. Empty if no history."""
        directory = self.history_dir(document_name)
        if not directory.is_dir():
            return []

        versions = []
        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    if not entry.is_file():
                        continue
                    stem = entry.name.split(".", 1)[0]
                    if stem.isdigit():
                        versions.append(int(stem))
        except OSError as e:
            raise StorageError(
                f"Cannot list versions of {document_name}: {e}",
                operation="list_versions",
                path=str(directory),
                cause=e,
            )
        return versions

    def latest_version(self, document_name: str) -> Optional[int]:
        versions = self.list_versions(document_name)
        return max(versions) if versions else None

    def snapshot(self, document_name: str, content: Content) -> int:
        """
        Persist ``content`` as the next version and return its number.

        next = 1 + max(existing versions), or 0 for the first snapshot.
        A failed write removes the half-created version file.
        """
        data = as_bytes(content)
        latest = self.latest_version(document_name)
        version = 0 if latest is None else latest + 1
        path = self._version_path(document_name, version)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "xb") as f:
                f.write(data)
        except FileExistsError:
            raise AlreadyExistsError(
                f"Version {version} of {document_name} already exists",
                object_ref=document_name,
                version=version,
            )
        except OSError as e:
            path.unlink(missing_ok=True)
            raise StorageError(
                f"Cannot snapshot {document_name}: {e}",
                operation="snapshot",
                path=str(path),
                cause=e,
            )

        logger.info(f"Snapshot v{version} of {document_name} ({len(data)} bytes)")
        return version

    def read_version(self, document_name: str, version: int) -> bytes:
        path = self._version_path(document_name, version)
        if not path.is_file():
            raise NotFoundError(
                f"Version {version} of {document_name} does not exist.",
                object_ref=document_name,
                version=version,
            )
        try:
            return path.read_bytes()
        except OSError as e:
            raise StorageError(
                f"Cannot read version {version} of {document_name}: {e}",
                operation="read_version",
                path=str(path),
                cause=e,
            )

    def get_snapshot(self, document_name: str, version: int) -> VersionedSnapshot:
        return VersionedSnapshot(
            document_name=document_name,
            version=version,
            content=self.read_version(document_name, version),
        )

    def rename_history(self, old_name: str, new_name: str) -> bool:
        """
        Move a history directory to follow a renamed document.

        Version files keep their numbers; the extension follows ``new_name``.
        Returns False if ``old_name`` had no history.

        Raises:
            AlreadyExistsError: ``new_name`` already has a history, even when
                ``old_name`` has none to move.
        """
        old_dir = self.history_dir(old_name)
        new_dir = self.history_dir(new_name)
        if new_dir.exists():
            raise AlreadyExistsError(
                f"History for {new_name} already exists",
                object_ref=new_name,
            )
        if not old_dir.is_dir():
            return False

        _, new_ext = naming.split(new_name)
        try:
            os.rename(old_dir, new_dir)
            for version_file in list(new_dir.iterdir()):
                stem, _, ext = version_file.name.partition(".")
                if stem.isdigit() and ext != new_ext:
                    version_file.rename(new_dir / f"{stem}.{new_ext}")
        except OSError as e:
            raise StorageError(
                f"Cannot move history of {old_name} to {new_name}: {e}",
                operation="rename_history",
                path=str(old_dir),
                cause=e,
            )
        logger.info(f"Moved history {old_name} -> {new_name}")
        return True

    def delete_history(self, document_name: str) -> bool:
        """Remove all versions of a document. Returns False if none existed."""
        directory = self.history_dir(document_name)
        if not directory.exists():
            return False
        try:
            shutil.rmtree(directory)
        except OSError as e:
            raise StorageError(
                f"Cannot delete history of {document_name}: {e}",
                operation="delete_history",
                path=str(directory),
                cause=e,
            )
        logger.info(f"Deleted history of {document_name}")
        return True

    def __repr__(self) -> str:
        return f"<VersionStore root='{self._root}'>"
