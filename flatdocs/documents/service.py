"""
flatdocs Document Service — gated create/edit/delete/duplicate/rename.

Handles:
- AuthGate check at the start of every mutation
- Name validation before any side effect
- Edit with history: read → snapshot → write, under a per-document lock
- Rename of a document and its history as one logical operation
- Duplicate via DuplicateResolver (copy, never move, never overwrite)
- Image uploads into the images sub-directory
- Audit logging and the canonical session message after each action

Read-only viewing bypasses the gate and only touches the DocumentStore.

Physical storage:
    {data_dir}/{name}
    {data_dir}/{name} versions/{n}.{ext}
    {data_dir}/{images_dir}/{image}
"""

from __future__ import annotations

import logging
import threading
import weakref
from collections.abc import MutableMapping
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from flatdocs.documents import naming
from flatdocs.documents.duplicates import DuplicateResolver
from flatdocs.documents.models import DocumentView, VersionedSnapshot
from flatdocs.documents.store import DocumentStore
from flatdocs.documents.versions import VersionStore
from flatdocs.engine import messages
from flatdocs.engine.config import RepositoryConfig
from flatdocs.engine.errors import (
    AlreadyExistsError,
    FlatDocsError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from flatdocs.engine.logging import log, log_document_event
from flatdocs.engine.security import AuthGate, SessionLike

logger = logging.getLogger("flatdocs.documents.service")


def _notify(session: SessionLike, message: str) -> None:
    """Leave the canonical message in the route layer's session bag."""
    if isinstance(session, MutableMapping):
        session["message"] = message


class DocumentService:
    """
    Core document operations for one repository.

    Mutations take the caller's session (an AuthenticatedSession or the
    route layer's session mapping) as their first argument.
    """

    def __init__(
        self,
        config: RepositoryConfig,
        gate: Optional[AuthGate] = None,
    ):
        self._config = config
        self._gate = gate or AuthGate()
        self._store = DocumentStore(config.data_path)
        self._versions = VersionStore(config.data_path)
        self._resolver = DuplicateResolver(
            self._store,
            max_digits=config.documents.duplicate_suffix_digits,
        )
        self._images_root = config.images_path
        # Entries vanish once no operation holds the lock
        self._locks: "weakref.WeakValueDictionary[str, threading.Lock]" = (
            weakref.WeakValueDictionary()
        )
        self._locks_guard = threading.Lock()

    @property
    def store(self) -> DocumentStore:
        return self._store

    @property
    def versions_store(self) -> VersionStore:
        return self._versions

    @property
    def resolver(self) -> DuplicateResolver:
        return self._resolver

    def initialize(self) -> None:
        """Create the data and image directories. Idempotent."""
        self._store.initialize()
        try:
            self._images_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(
                f"Cannot create image directory {self._images_root}: {e}",
                operation="initialize",
                path=str(self._images_root),
                cause=e,
            )
        logger.info(f"Initialized document root: {self._store.root}")

    def _lock_for(self, name: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(name)
            if lock is None:
                lock = threading.Lock()
                self._locks[name] = lock
            return lock

    @contextmanager
    def _locked(self, *names: str) -> Iterator[None]:
        """Hold the per-document locks for ``names`` (sorted to avoid deadlock)."""
        locks = [self._lock_for(name) for name in sorted(set(names))]
        with ExitStack() as stack:
            for lock in locks:
                stack.enter_context(lock)
            yield

    def _ensure_free(self, name: str) -> None:
        """
        Raise unless ``name`` is unused by both a live document and a
        leftover history directory.
        """
        if self._store.exists(name):
            raise AlreadyExistsError(messages.already_exists(name), object_ref=name)
        if self._versions.history_dir(name).exists():
            raise AlreadyExistsError(
                f"History for {name} already exists", object_ref=name
            )

    # -------------------------------------------------------------------
    # Read-only
    # -------------------------------------------------------------------

    def list_documents(self) -> List[str]:
        """Document names, sorted for display."""
        return sorted(self._store.list())

    def view(self, name: str) -> DocumentView:
        """
        Content plus its kind, signalled by extension.

        Raises:
            NotFoundError: ``"<name> does not exist."``
        """
        content_type = naming.content_type(name)
        content = self._store.read(name)
        return DocumentView(name=name, content=content, content_type=content_type)

    def versions(self, name: str) -> List[int]:
        """Version numbers of ``name``, ascending."""
        return sorted(self._versions.list_versions(name))

    def read_version(self, name: str, version: int) -> VersionedSnapshot:
        return self._versions.get_snapshot(name, version)

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------

    def create(
        self,
        session: SessionLike,
        name: str,
        content: Union[bytes, str] = b"",
    ) -> str:
        """
        Create an empty (or pre-filled) document.

        Raises:
            AuthRequiredError, ValidationError, InvalidNameError,
            UnsupportedExtensionError, AlreadyExistsError
        """
        auth = self._gate.require_authenticated(session, object_ref=name)
        name = (name or "").strip()
        naming.validate_document_name(name)

        with self._locked(name):
            self._ensure_free(name)
            self._store.create(name, content)

        log(log_document_event("create", name, username=auth.username))
        _notify(session, messages.created(name))
        return name

    def edit(
        self,
        session: SessionLike,
        name: str,
        content: Union[bytes, str],
        new_name: Optional[str] = None,
    ) -> int:
        """
        Replace a document's content, keeping the previous content as a version.

        When ``new_name`` differs from ``name`` the document and its history
        are renamed after the write. The target is checked before anything
        is read or written, so a taken target leaves the document untouched.

        Returns the version number holding the pre-edit content.
        """
        auth = self._gate.require_authenticated(session, object_ref=name)
        naming.validate_document_name(name)

        target = (new_name or name).strip()
        renaming = target != name
        if renaming:
            naming.validate_document_name(target)

        with self._locked(name, target):
            if renaming:
                self._ensure_free(target)
            previous = self._store.read(name)
            version = self._versions.snapshot(name, previous)
            self._store.write(name, content)
            if renaming:
                self._rename_with_history(name, target)

        log(log_document_event(
            "edit",
            name,
            username=auth.username,
            version=version,
            new_name=target if renaming else None,
            size_bytes=len(content),
        ))
        _notify(session, messages.updated(target))
        return version

    def delete(self, session: SessionLike, name: str) -> None:
        """
        Delete a document. Deleting a missing document is not an error.

        History goes with the document unless
        ``documents.delete_history_with_document`` is false.
        """
        auth = self._gate.require_authenticated(session, object_ref=name)
        naming.check_safe(name)

        with self._locked(name):
            self._store.delete(name)
            if self._config.documents.delete_history_with_document:
                self._versions.delete_history(name)

        log(log_document_event("delete", name, username=auth.username))
        _notify(session, messages.deleted(name))

    def duplicate(self, session: SessionLike, name: str) -> str:
        """
        Copy ``name`` to the next free ``base(N).ext``. Returns the copy's name.

        The source is read before anything is written, so a missing source
        raises NotFoundError without leaving a partial copy.
        """
        auth = self._gate.require_authenticated(session, object_ref=name)
        naming.validate_document_name(name)

        with self._locked(name):
            new_name = self._resolver.resolve(name)
            content = self._store.read(name)
            self._ensure_free(new_name)
            self._store.create(new_name, content)

        log(log_document_event("duplicate", name, username=auth.username, new_name=new_name))
        _notify(session, messages.created(new_name))
        return new_name

    def rename(self, session: SessionLike, old_name: str, new_name: str) -> str:
        """Rename a document together with its version history."""
        auth = self._gate.require_authenticated(session, object_ref=old_name)
        new_name = (new_name or "").strip()
        naming.check_safe(old_name)
        naming.validate_document_name(new_name)

        with self._locked(old_name, new_name):
            if not self._store.exists(old_name):
                raise NotFoundError(messages.does_not_exist(old_name), object_ref=old_name)
            self._ensure_free(new_name)
            self._rename_with_history(old_name, new_name)

        log(log_document_event("rename", old_name, username=auth.username, new_name=new_name))
        _notify(session, messages.renamed(old_name, new_name))
        return new_name

    def restore_version(self, session: SessionLike, name: str, version: int) -> int:
        """
        Make an old version live again. The current content is snapshotted
        first, so restoring is itself undoable. Returns that new version number.
        """
        auth = self._gate.require_authenticated(session, object_ref=name)
        naming.validate_document_name(name)

        with self._locked(name):
            restored = self._versions.read_version(name, version)
            current = self._store.read(name)
            new_version = self._versions.snapshot(name, current)
            self._store.write(name, restored)

        log(log_document_event(
            "restore", name, username=auth.username, version=version,
            object_type="versions",
        ))
        _notify(session, messages.restored(name, version))
        return new_version

    def _rename_with_history(self, old_name: str, new_name: str) -> None:
        """Rename document then history; undo the first step if the second fails."""
        self._store.rename(old_name, new_name)
        try:
            self._versions.rename_history(old_name, new_name)
        except FlatDocsError:
            logger.error(f"History move failed, reverting rename {new_name} -> {old_name}")
            self._store.rename(new_name, old_name)
            raise

    # -------------------------------------------------------------------
    # Images
    # -------------------------------------------------------------------

    def list_images(self) -> List[str]:
        if not self._images_root.is_dir():
            return []
        return sorted(p.name for p in self._images_root.iterdir() if p.is_file())

    def image_path(self, filename: str) -> Path:
        naming.validate_image_name(filename)
        return self._images_root / filename

    def upload_image(
        self,
        session: SessionLike,
        filename: Optional[str],
        data: Optional[bytes],
    ) -> str:
        """
        Store an uploaded image, replacing any image of the same name.

        Raises:
            ValidationError: No file selected, or the file is too large.
            UnsupportedExtensionError: Not png/jpg/jpeg/gif.
        """
        auth = self._gate.require_authenticated(session, object_ref=filename)
        if not filename or not data:
            raise ValidationError(messages.IMAGE_REQUIRED, field="img")

        path = self.image_path(filename)
        max_bytes = self._config.documents.max_image_size_mb * 1024 * 1024
        if len(data) > max_bytes:
            raise ValidationError(
                f"Image size ({len(data) / 1024 / 1024:.1f} MB) exceeds limit "
                f"({self._config.documents.max_image_size_mb} MB)",
                field="img",
            )

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise StorageError(
                f"Cannot store image {filename}: {e}",
                operation="upload_image",
                path=str(path),
                cause=e,
            )

        log(log_document_event(
            "upload", filename, username=auth.username,
            object_type="images", size_bytes=len(data),
        ))
        _notify(session, messages.uploaded(filename))
        return filename

    def stats(self) -> Dict[str, Any]:
        """Counts for the CLI and admin pages."""
        documents = self._store.list()
        return {
            "documents": len(documents),
            "versions": sum(len(self._versions.list_versions(d)) for d in documents),
            "images": len(self.list_images()),
        }

    def __repr__(self) -> str:
        return f"<DocumentService root='{self._store.root}'>"
