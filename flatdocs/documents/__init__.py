"""
flatdocs Document Management.

Flat-file documents with duplicate-name resolution and per-document
version history.
Physical storage: {data_dir}/{name} and {data_dir}/{name} versions/
"""

from flatdocs.documents.duplicates import DuplicateResolver
from flatdocs.documents.models import Document, DocumentView, DuplicateGroup, VersionedSnapshot
from flatdocs.documents.service import DocumentService
from flatdocs.documents.store import DocumentStore
from flatdocs.documents.versions import VersionStore

__all__ = [
    "Document",
    "DocumentView",
    "DuplicateGroup",
    "VersionedSnapshot",
    "DocumentStore",
    "VersionStore",
    "DuplicateResolver",
    "DocumentService",
]
