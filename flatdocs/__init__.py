"""
flatdocs — Flat-file document repository
Version: 1.0

Documents live as plain files in one directory. Edits keep the previous
content as a numbered version, copies get a ``(N)`` suffix, and every
mutation requires a signed-in session checked against a bcrypt
credential file.
"""

__version__ = "1.0.0"
__all__ = ["engine", "documents", "accounts", "repository", "cli"]
