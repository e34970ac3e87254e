"""
flatdocs DuplicateResolver — next free ``base(N).ext`` name for a copy.
"""

from __future__ import annotations

import logging

from flatdocs.documents import naming
from flatdocs.documents.models import DuplicateGroup
from flatdocs.documents.store import DocumentStore

logger = logging.getLogger("flatdocs.documents.duplicates")


class DuplicateResolver:
    """
    Computes a non-colliding name for a copy from the current store listing.

    ``max_digits=1`` recognizes only single-digit suffixes and picks the
    highest by string comparison, matching names produced by earlier
    releases. Wider settings compare numerically.
    """

    def __init__(self, store: DocumentStore, max_digits: int = 1):
        self._store = store
        self._max_digits = max_digits

    def group(self, target_name: str) -> DuplicateGroup:
        """Collect the existing numbered copies of ``target_name``."""
        base, ext = naming.split(target_name)

        members = []
        highest = None
        for name in self._store.list():
            match = naming.match_duplicate_suffix(name, max_digits=self._max_digits)
            if match is None:
                continue
            copy_base, digit, copy_ext = match
            if copy_base != base or copy_ext != ext:
                continue
            members.append(name)
            if highest is None or self._key(digit) > self._key(highest):
                highest = digit

        return DuplicateGroup(
            target=target_name,
            base=base,
            extension=ext,
            members=sorted(members),
            highest=highest,
        )

    def resolve(self, target_name: str) -> str:
        """
        Name for the next copy of ``target_name``.

        Raises:
            InvalidNameError: If ``target_name`` has no extension.
        """
        new_name = self.group(target_name).next_name
        logger.debug(f"Resolved duplicate name {target_name} -> {new_name}")
        return new_name

    def _key(self, digit: str):
        if self._max_digits == 1:
            return digit
        return int(digit)
