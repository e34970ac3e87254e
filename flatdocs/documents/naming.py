"""
flatdocs NameCodec — document name parsing, duplicate suffixes, extensions.

Names have the form ``<base>.<ext>``. Copies carry a ``(N)`` marker right
before the extension: ``about.md`` → ``about(1).md`` → ``about(2).md``.

Only ``txt`` and ``md`` documents are supported. Adding a type means
extending SUPPORTED_EXTENSIONS and CONTENT_TYPES together.
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

from flatdocs.engine import messages
from flatdocs.engine.errors import (
    InvalidNameError,
    UnsupportedExtensionError,
    ValidationError,
)

SUPPORTED_EXTENSIONS = frozenset({"txt", "md"})

CONTENT_TYPES = {
    "txt": "text/plain",
    "md": "text/markdown",
}

IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "gif"})

_NAME_RE = re.compile(r"^(?P<base>.+)\.(?P<ext>[^.]+)$")


def _duplicate_re(max_digits: int) -> "re.Pattern[str]":
    return re.compile(
        r"^(?P<base>.+)\((?P<digit>\d{1,%d})\)\.(?P<ext>[^.]+)$" % max_digits
    )


def split(name: str) -> Tuple[str, str]:
    """
    Split ``name`` into ``(base, ext)``.

    Raises:
        InvalidNameError: If there is no trailing ``.<ext>`` segment.
    """
    match = _NAME_RE.match(name or "")
    if match is None:
        raise InvalidNameError(
            messages.invalid_extension(SUPPORTED_EXTENSIONS),
            name=name,
            object_ref=name,
        )
    return match.group("base"), match.group("ext")


def is_supported_extension(ext: str) -> bool:
    return ext.lstrip(".") in SUPPORTED_EXTENSIONS


def match_duplicate_suffix(
    name: str,
    max_digits: int = 1,
) -> Optional[Tuple[str, str, str]]:
    """
    Recognize ``base(D).ext`` and return ``(base, D, ext)``, else None.

    With the default ``max_digits=1`` only ``(0)``..``(9)`` match; a name like
    ``about(10).md`` is not recognized as a copy.
    """
    match = _duplicate_re(max_digits).match(name)
    if match is None:
        return None
    return match.group("base"), match.group("digit"), match.group("ext")


def build_duplicate_name(base: str, ext: str, number: int) -> str:
    return f"{base}({number}).{ext}"


def check_safe(name: str) -> None:
    """
    Reject names that would escape the flat namespace.

    Raises:
        ValidationError: If the name is blank.
        InvalidNameError: On path separators, NUL bytes or a leading dot.
    """
    if name is None or not name.strip():
        raise ValidationError(messages.NAME_REQUIRED, field="name")
    if "/" in name or "\\" in name or "\x00" in name or name.startswith("."):
        raise InvalidNameError(
            f"Invalid document name: {name!r}",
            name=name,
            object_ref=name,
        )


def validate_document_name(name: str) -> Tuple[str, str]:
    """
    Full validation for a document name. Returns ``(base, ext)``.

    Raises:
        ValidationError: Blank name.
        InvalidNameError: Unsafe name or missing extension.
        UnsupportedExtensionError: Extension outside SUPPORTED_EXTENSIONS.
    """
    check_safe(name)
    base, ext = split(name)
    if not is_supported_extension(ext):
        raise UnsupportedExtensionError(
            messages.invalid_extension(SUPPORTED_EXTENSIONS),
            name=name,
            extension=ext,
            object_ref=name,
        )
    return base, ext


def validate_image_name(name: str) -> Tuple[str, str]:
    """Validation for uploaded image names. Returns ``(base, ext)``."""
    check_safe(name)
    base, ext = split(name)
    if ext.lower() not in IMAGE_EXTENSIONS:
        raise UnsupportedExtensionError(
            messages.invalid_extension(IMAGE_EXTENSIONS),
            name=name,
            extension=ext,
            object_ref=name,
        )
    return base, ext


def content_type(name: str) -> str:
    """Content kind by extension: ``text/plain`` or ``text/markdown``."""
    _, ext = validate_document_name(name)
    return CONTENT_TYPES[ext]
