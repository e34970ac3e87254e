"""
flatdocs Document Models — Pydantic views over the flat-file store.

Document: a named content blob, one live copy per name.
VersionedSnapshot: immutable pre-edit copy of a document's content.
DuplicateGroup: derived view of the numbered copies of a document.

Physical storage:
    {data_dir}/{name}                       live document
    {data_dir}/{name} versions/{n}.{ext}    snapshot n
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from flatdocs.documents import naming


class Document(BaseModel):
    """A live document read from the store."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Unique name within the namespace, '<base>.<ext>'")
    content: bytes = Field(default=b"", description="Raw document bytes")
    modified_at: Optional[datetime] = Field(default=None, description="Last write")

    @property
    def extension(self) -> str:
        return naming.split(self.name)[1]

    @property
    def content_type(self) -> str:
        return naming.content_type(self.name)

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")


class VersionedSnapshot(BaseModel):
    """
    Content of a document captured immediately before an edit overwrote it.

    Version numbers start at 0 and strictly increase per document.
    """

    model_config = ConfigDict(frozen=True)

    document_name: str = Field(description="Owning document")
    version: int = Field(ge=0, description="Sequential version number")
    content: bytes = Field(default=b"", description="Pre-edit content")

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")


class DuplicateGroup(BaseModel):
    """
    Documents sharing a target's base and extension that carry a ``(D)``
    suffix. Never persisted; recomputed from the store listing.
    """

    target: str
    base: str
    extension: str
    members: List[str] = Field(default_factory=list)
    highest: Optional[str] = Field(default=None, description="Highest suffix seen")

    @property
    def next_number(self) -> int:
        return 1 if self.highest is None else int(self.highest) + 1

    @property
    def next_name(self) -> str:
        return naming.build_duplicate_name(self.base, self.extension, self.next_number)


class DocumentView(BaseModel):
    """What the rendering collaborator needs to display a document."""

    model_config = ConfigDict(frozen=True)

    name: str
    content: bytes
    content_type: str

    @property
    def is_markdown(self) -> bool:
        return self.content_type == "text/markdown"

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")
