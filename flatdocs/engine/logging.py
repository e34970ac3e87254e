"""
flatdocs Audit Log — durable JSONL record of document and account events.

Implements:
- LogEntry: one audit record bound for an object type and category
- FileLogger: appends to daily files, reads recent days back newest-first
- Entry builders for document, security and system events
- LogRetentionManager: gzips aged files, deletes expired ones
- init_logging() / log() / shutdown_logging() global helpers

Diagnostics go through stdlib loggers under the "flatdocs" namespace; this
module only owns the audit trail. Writes are synchronous.

Layout: {log_dir}/{object_type}/{category}/{YYYY-MM-DD}.jsonl[.gz]
"""

from __future__ import annotations

import gzip
import json
import logging
import shutil
import threading
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger("flatdocs.engine.logging")

# Object types and the categories each one may log under
OBJECT_TYPE_CATEGORIES = {
    "documents": ["execution", "security"],
    "versions": ["execution"],
    "images": ["execution", "security"],
    "accounts": ["execution", "security"],
    "system": ["execution", "security"],
}

# Days a file is kept, per category
DEFAULT_RETENTION = {
    "execution": 90,
    "security": 365,
}


@dataclass(frozen=True)
class LogEntry:
    """An audit record and the object type/category file it belongs in."""

    object_type: str
    category: str
    data: Dict[str, Any]

    def __post_init__(self) -> None:
        if self.category not in OBJECT_TYPE_CATEGORIES.get(self.object_type, ()):
            raise ValueError(f"No audit log for {self.object_type}/{self.category}")

    def to_json(self) -> str:
        return json.dumps(self.data, default=str, separators=(",", ":"))


class FileLogger:
    """
    Appends entries to ``{object_type}/{category}/{day}.jsonl`` under
    ``log_dir``. Directories are created on first write.
    """

    def __init__(self, log_dir: str = "logs"):
        self._log_dir = Path(log_dir)
        self._log_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    @property
    def log_dir(self) -> Path:
        return self._log_dir

    def day_file(self, object_type: str, category: str, day: Optional[date] = None) -> Path:
        day = day or date.today()
        return self._log_dir / object_type / category / f"{day.isoformat()}.jsonl"

    def write(self, entry: LogEntry) -> None:
        path = self.day_file(entry.object_type, entry.category)
        line = entry.to_json() + "\n"
        with self._lock:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "a", encoding="utf-8") as f:
                f.write(line)

    def query(
        self,
        object_type: str,
        category: str,
        *,
        days: int = 7,
        filters: Optional[Dict[str, Any]] = None,
        limit: int = 500,
    ) -> List[Dict[str, Any]]:
        """
        Entries from today and the previous ``days`` days, newest first.

        Only entries whose fields equal every ``filters`` value are returned.
        Days already compressed by LogRetentionManager are not read.
        """
        today = date.today()
        matches: List[Dict[str, Any]] = []
        for offset in range(days + 1):
            path = self.day_file(object_type, category, today - timedelta(days=offset))
            if not path.is_file():
                continue
            for data in reversed(self._read(path)):
                if filters and any(data.get(k) != v for k, v in filters.items()):
                    continue
                matches.append(data)
                if len(matches) >= limit:
                    return matches
        return matches

    @staticmethod
    def _read(path: Path) -> List[Dict[str, Any]]:
        try:
            lines = path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            logger.warning(f"Could not read audit file {path}: {e}")
            return []

        entries = []
        for line in lines:
            if not line.strip():
                continue
            try:
                entries.append(json.loads(line))
            except json.JSONDecodeError:
                logger.warning(f"Skipping corrupt audit line in {path}")
        return entries


# ---------------------------------------------------------------------------
# Entry Builders
# ---------------------------------------------------------------------------

def _base_entry(
    event: str,
    level: str,
    object_ref: str,
    username: Optional[str] = None,
    **extra: Any,
) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": level,
        "event": event,
        "object_ref": object_ref,
    }
    if username:
        entry["username"] = username
    entry.update(extra)
    return entry


def log_document_event(
    operation: str,
    document: str,
    username: Optional[str] = None,
    object_type: str = "documents",
    version: Optional[int] = None,
    new_name: Optional[str] = None,
    size_bytes: Optional[int] = None,
) -> LogEntry:
    """Build a document mutation entry (create/edit/delete/duplicate/rename/...)."""
    data = _base_entry(
        event=f"document_{operation}",
        level="INFO",
        object_ref=document,
        username=username,
        operation=operation,
    )
    if version is not None:
        data["version"] = version
    if new_name:
        data["new_name"] = new_name
    if size_bytes is not None:
        data["size_bytes"] = size_bytes
    return LogEntry(object_type, "execution", data)


def log_security_event(
    event: str,
    object_ref: str,
    username: Optional[str] = None,
    object_type: str = "accounts",
    reason: Optional[str] = None,
    level: str = "WARNING",
) -> LogEntry:
    """
    Build a security entry (login, denied mutation, registration).
    Types without a security log fall back to ``system``.
    """
    data = _base_entry(event=event, level=level, object_ref=object_ref, username=username)
    if reason:
        data["reason"] = reason
    if "security" not in OBJECT_TYPE_CATEGORIES.get(object_type, ()):
        object_type = "system"
    return LogEntry(object_type, "security", data)


def log_system_event(
    event: str,
    level: str = "INFO",
    details: Optional[Dict[str, Any]] = None,
) -> LogEntry:
    data = _base_entry(event=event, level=level, object_ref="system")
    if details:
        data["details"] = details
    return LogEntry("system", "execution", data)


# ---------------------------------------------------------------------------
# Retention
# ---------------------------------------------------------------------------

class LogRetentionManager:
    """
    Applies per-category retention to the audit tree.

    A file older than its category's retention is deleted; an uncompressed
    file older than ``compress_after_days`` is replaced by a ``.gz`` copy.
    """

    def __init__(
        self,
        log_dir: str = "logs",
        retention_days: Optional[Dict[str, int]] = None,
        compress_after_days: int = 7,
    ):
        self._log_dir = Path(log_dir)
        self._retention = {**DEFAULT_RETENTION, **(retention_days or {})}
        self._compress_after = compress_after_days

    def cleanup(self, today: Optional[date] = None) -> Dict[str, int]:
        """Returns ``{"deleted": N, "compressed": M}``."""
        today = today or date.today()
        counts = {"deleted": 0, "compressed": 0}

        for path in sorted(self._log_dir.glob("*/*/*.jsonl*")):
            day = self._file_day(path)
            if day is None:
                continue
            action = self._action(path, (today - day).days)
            if action == "delete":
                path.unlink()
                counts["deleted"] += 1
            elif action == "compress" and self._compress(path):
                counts["compressed"] += 1

        logger.info(f"Log cleanup: {counts}")
        return counts

    def _action(self, path: Path, age_days: int) -> Optional[str]:
        retention = self._retention.get(path.parent.name, DEFAULT_RETENTION["execution"])
        if age_days > retention:
            return "delete"
        if age_days > self._compress_after and path.suffix == ".jsonl":
            return "compress"
        return None

    @staticmethod
    def _file_day(path: Path) -> Optional[date]:
        try:
            return date.fromisoformat(path.name.split(".", 1)[0])
        except ValueError:
            return None

    @staticmethod
    def _compress(path: Path) -> bool:
        target = path.with_name(path.name + ".gz")
        try:
            with open(path, "rb") as src, gzip.open(target, "wb") as dst:
                shutil.copyfileobj(src, dst)
        except OSError as e:
            logger.error(f"Failed to compress {path}: {e}")
            target.unlink(missing_ok=True)
            return False
        path.unlink()
        return True


# ---------------------------------------------------------------------------
# Global Audit Logger
# ---------------------------------------------------------------------------

_audit_logger: Optional[FileLogger] = None


def init_logging(log_dir: str = "logs", level: str = "INFO") -> FileLogger:
    """Set the "flatdocs" logger level and start the audit log in ``log_dir``."""
    global _audit_logger
    logging.getLogger("flatdocs").setLevel(level)
    _audit_logger = FileLogger(log_dir=log_dir)
    return _audit_logger


def get_audit_logger() -> Optional[FileLogger]:
    return _audit_logger


def log(entry: LogEntry) -> bool:
    """Write to the global audit log. False if it is not started or the write failed."""
    if _audit_logger is None:
        return False
    try:
        _audit_logger.write(entry)
    except OSError as e:
        logger.error(f"Audit log write failed: {e}")
        return False
    return True


def shutdown_logging() -> None:
    global _audit_logger
    _audit_logger = None
