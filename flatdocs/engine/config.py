"""
flatdocs Configuration — Load and validate flatdocs.yaml.

The loaded ``RepositoryConfig`` is passed explicitly to every component at
construction; nothing reads paths from the environment at call time.

Usage:
    from flatdocs.engine.config import load_config

    config = load_config("flatdocs.yaml")
    store = DocumentStore(config.data_path)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from flatdocs.engine.errors import ConfigError


# ---------------------------------------------------------------------------
# Pydantic models for flatdocs.yaml
# ---------------------------------------------------------------------------

class StorageConfig(BaseModel):
    data_dir: str = "data"
    test_data_dir: str = "tests/data"
    images_dir: str = "images"
    credentials_file: str = "users.yml"


class DocumentsConfig(BaseModel):
    # 1 keeps the historical "(1)".."(9)" suffix matching
    duplicate_suffix_digits: int = Field(default=1, ge=1)
    delete_history_with_document: bool = True
    max_image_size_mb: int = 5


class SecurityConfig(BaseModel):
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    admin_username: str = "admin"


class LogRetentionConfig(BaseModel):
    execution_days: int = 90
    security_days: int = 365


class LoggingConfig(BaseModel):
    level: str = "INFO"
    directory: str = ".flatdocs/logs"
    audit_enabled: bool = True
    compress_after_days: int = 7
    retention: LogRetentionConfig = LogRetentionConfig()

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"level must be a logging level name, got '{v}'")
        return v


class RepositoryConfig(BaseModel):
    """Root model for flatdocs.yaml."""
    name: str = "flatdocs"
    environment: str = "dev"
    root: str = "."

    storage: StorageConfig = StorageConfig()
    documents: DocumentsConfig = DocumentsConfig()
    security: SecurityConfig = SecurityConfig()
    logging: LoggingConfig = LoggingConfig()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        if v not in ("dev", "test", "prod"):
            raise ValueError(f"environment must be dev/test/prod, got '{v}'")
        return v

    def _resolve(self, path: str) -> Path:
        p = Path(path)
        return p if p.is_absolute() else Path(self.root) / p

    @property
    def data_path(self) -> Path:
        """Document root. The test environment gets its own directory."""
        if self.environment == "test":
            return self._resolve(self.storage.test_data_dir)
        return self._resolve(self.storage.data_dir)

    @property
    def images_path(self) -> Path:
        return self.data_path / self.storage.images_dir

    @property
    def credentials_path(self) -> Path:
        return self._resolve(self.storage.credentials_file)

    @property
    def log_path(self) -> Path:
        return self._resolve(self.logging.directory)


# ---------------------------------------------------------------------------
# Config Loading
# ---------------------------------------------------------------------------

def _find_project_root() -> Path:
    """Find the project root by looking for flatdocs.yaml."""
    current = Path.cwd()
    for parent in [current, *current.parents]:
        if (parent / "flatdocs.yaml").exists():
            return parent
    return current


def load_config(
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> RepositoryConfig:
    """
    Load and validate flatdocs.yaml.

    Args:
        config_path: Explicit path to flatdocs.yaml. If None, auto-discovers.
        overrides: Top-level keys that replace values from the file
            (e.g. ``{"environment": "test"}``).

    Returns:
        Validated RepositoryConfig. Relative paths resolve against the
        directory holding the config file.

    Raises:
        ConfigError: If the file is not valid YAML or fails validation.
    """
    if config_path is None:
        root = _find_project_root()
        config_path = str(root / "flatdocs.yaml")

    path = Path(config_path)
    raw: Dict[str, Any] = {}
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}", object_ref=str(path))
        if not isinstance(raw, dict):
            raise ConfigError(f"{path} must contain a mapping", object_ref=str(path))

    # flatdocs.yaml may nest identity under a "repository:" key
    repo_data = raw.get("repository", {})
    config_data = {
        "name": repo_data.get("name", raw.get("name", "flatdocs")),
        "environment": repo_data.get("environment", raw.get("environment", "dev")),
        "root": raw.get("root", str(path.parent.resolve())),
        "storage": raw.get("storage", {}),
        "documents": raw.get("documents", {}),
        "security": raw.get("security", {}),
        "logging": raw.get("logging", {}),
    }
    if overrides:
        config_data.update(overrides)

    try:
        return RepositoryConfig(**config_data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}", object_ref=str(path))
