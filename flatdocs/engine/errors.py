"""
flatdocs Error Hierarchy — Structured exceptions for the document engine.

Every error carries the canonical user-facing message as ``message`` so the
route layer can copy it straight into ``session["message"]``. Extra context
(document name, version, username) is kept alongside for audit logging.

Hierarchy:
    FlatDocsError
    ├── NotFoundError              — Document / version / account absent
    ├── AlreadyExistsError         — Name collision on create/rename/register
    ├── InvalidNameError           — Malformed name, missing extension
    │   └── UnsupportedExtensionError — Extension outside the supported set
    ├── ValidationError            — Username/password/input constraints
    ├── AuthRequiredError          — Mutation without an authenticated session
    ├── InvalidCredentialsError    — Login with a bad username/password
    ├── StorageError               — Backing store failure (wraps OSError)
    └── ConfigError                — Invalid flatdocs.yaml
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class FlatDocsError(Exception):
    """
    Base error for all flatdocs failures.
    All context is serializable to JSON for the audit log.
    """

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.object_ref: Optional[str] = context.get("object_ref")
        self.error_type: str = self.__class__.__name__
        self.context: Dict[str, Any] = context
        self.timestamp: str = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize error to a JSON-compatible dict."""
        return {
            "error_type": self.error_type,
            "message": self.message,
            "object_ref": self.object_ref,
            "timestamp": self.timestamp,
            "context": {
                k: str(v) for k, v in self.context.items()
                if k != "object_ref"
            },
        }

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), default=str)

    def __repr__(self) -> str:
        parts = [f"{self.error_type}: {self.message}"]
        if self.object_ref:
            parts.append(f"object_ref={self.object_ref}")
        return " | ".join(parts)


class NotFoundError(FlatDocsError):
    """Document, version or account does not exist."""
    pass


class AlreadyExistsError(FlatDocsError):
    """A name is already taken in the namespace."""
    pass


class InvalidNameError(FlatDocsError):
    """
    Document name is malformed: no extension, empty base, or a path component.
    """

    def __init__(self, message: str, **context: Any):
        self.name: Optional[str] = context.get("name")
        super().__init__(message, **context)


class UnsupportedExtensionError(InvalidNameError):
    """Extension is not one of the supported document types."""

    def __init__(self, message: str, **context: Any):
        self.extension: Optional[str] = context.get("extension")
        super().__init__(message, **context)


class ValidationError(FlatDocsError):
    """
    Input validation failed (username, password, blank name, empty upload).
    Includes field-level error details when available.
    """

    def __init__(self, message: str, **context: Any):
        self.field: Optional[str] = context.get("field")
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["field"] = self.field
        return d


class AuthRequiredError(FlatDocsError):
    """A mutation was attempted without an authenticated session."""
    pass


class InvalidCredentialsError(FlatDocsError):
    """Login failed. Does not reveal whether the username exists."""

    def __init__(self, message: str, **context: Any):
        self.username: Optional[str] = context.get("username")
        super().__init__(message, **context)


class StorageError(FlatDocsError):
    """Backing store operation failed. Propagated unmodified, never retried."""

    def __init__(self, message: str, **context: Any):
        self.operation: Optional[str] = context.get("operation")
        self.path: Optional[str] = context.get("path")
        self.cause: Optional[BaseException] = context.get("cause")
        super().__init__(message, **context)


class ConfigError(FlatDocsError):
    """Configuration error — invalid flatdocs.yaml."""
    pass
