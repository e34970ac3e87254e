"""
flatdocs DocumentStore — CRUD over named blobs in a flat directory.

Each document is one regular file directly under the data directory.
Sub-directories (version histories, images) share the directory but are
never listed as documents.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Union

from flatdocs.documents import naming
from flatdocs.documents.models import Document
from flatdocs.engine import messages
from flatdocs.engine.errors import AlreadyExistsError, NotFoundError, StorageError

logger = logging.getLogger("flatdocs.documents.store")

Content = Union[bytes, str]


def as_bytes(content: Content) -> bytes:
    if isinstance(content, str):
        return content.encode("utf-8")
    return bytes(content)


class DocumentStore:
    """
    Directory-backed document namespace.

    Names are validated before any filesystem call, so a rejected name
    never leaves a partial file behind.
    """

    def __init__(self, data_dir: Union[str, Path]):
        self._root = Path(data_dir)

    @property
    def root(self) -> Path:
        return self._root

    def initialize(self) -> None:
        """Create the data directory. Idempotent."""
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(
                f"Cannot create data directory {self._root}: {e}",
                operation="initialize",
                path=str(self._root),
                cause=e,
            )

    def path_for(self, name: str) -> Path:
        naming.check_safe(name)
        return self._root / name

    def list(self) -> List[str]:
        """Document names in filesystem enumeration order (not sorted)."""
        if not self._root.exists():
            return []
        try:
            with os.scandir(self._root) as entries:
                return [entry.name for entry in entries if entry.is_file()]
        except OSError as e:
            raise StorageError(
                f"Cannot list {self._root}: {e}",
                operation="list",
                path=str(self._root),
                cause=e,
            )

    def exists(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def read(self, name: str) -> bytes:
        path = self.path_for(name)
        if not path.is_file():
            raise NotFoundError(messages.does_not_exist(name), object_ref=name)
        try:
            return path.read_bytes()
        except OSError as e:
            raise StorageError(
                f"Cannot read {name}: {e}", operation="read", path=str(path), cause=e
            )

    def get(self, name: str) -> Document:
        """Read a document together with its modification time."""
        content = self.read(name)
        mtime = self.path_for(name).stat().st_mtime
        return Document(
            name=name,
            content=content,
            modified_at=datetime.fromtimestamp(mtime, tz=timezone.utc),
        )

    def write(self, name: str, content: Content) -> None:
        """
        Create or fully overwrite a document.

        Not atomic: a crash mid-write may leave truncated content.
        """
        naming.validate_document_name(name)
        path = self.path_for(name)
        data = as_bytes(content)
        try:
            path.write_bytes(data)
        except OSError as e:
            raise StorageError(
                f"Cannot write {name}: {e}", operation="write", path=str(path), cause=e
            )
        logger.debug(f"Wrote {name} ({len(data)} bytes)")

    def create(self, name: str, content: Content = b"") -> None:
        """
        Create a new document. Never clobbers an existing one.

        Raises:
            AlreadyExistsError: If ``name`` is taken.
        """
        naming.validate_document_name(name)
        path = self.path_for(name)
        data = as_bytes(content)
        try:
            # "xb" fails if the file exists, closing the exists/write race
            with open(path, "xb") as f:
                f.write(data)
        except FileExistsError:
            raise AlreadyExistsError(messages.already_exists(name), object_ref=name)
        except OSError as e:
            raise StorageError(
                f"Cannot create {name}: {e}", operation="create", path=str(path), cause=e
            )
        logger.info(f"Created document {name} ({len(data)} bytes)")

    def rename(self, old_name: str, new_name: str) -> None:
        """
        Raises:
            NotFoundError: ``old_name`` does not exist.
            AlreadyExistsError: ``new_name`` is taken.
        """
        naming.validate_document_name(new_name)
        old_path = self.path_for(old_name)
        new_path = self.path_for(new_name)
        if not old_path.is_file():
            raise NotFoundError(messages.does_not_exist(old_name), object_ref=old_name)
        if new_path.exists():
            raise AlreadyExistsError(messages.already_exists(new_name), object_ref=new_name)
        try:
            os.rename(old_path, new_path)
        except OSError as e:
            raise StorageError(
                f"Cannot rename {old_name} to {new_name}: {e}",
                operation="rename",
                path=str(old_path),
                cause=e,
            )
        logger.info(f"Renamed document {old_name} -> {new_name}")

    def delete(self, name: str) -> None:
        """Delete a document. Deleting a missing name is not an error."""
        path = self.path_for(name)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageError(
                f"Cannot delete {name}: {e}", operation="delete", path=str(path), cause=e
            )
        logger.info(f"Deleted document {name}")

    def __repr__(self) -> str:
        return f"<DocumentStore root='{self._root}'>"
