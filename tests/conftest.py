"""
flatdocs Test Suite — Shared fixtures and configuration.

Run:  pytest tests/ -v
"""

from __future__ import annotations

from pathlib import Path

import pytest

from flatdocs.accounts.credentials import CredentialStore
from flatdocs.documents.service import DocumentService
from flatdocs.documents.store import DocumentStore
from flatdocs.documents.versions import VersionStore
from flatdocs.engine.config import RepositoryConfig


@pytest.fixture(autouse=True)
def _isolate_logging():
    """Detach the global audit logger between tests."""
    import flatdocs.engine.logging as log_mod

    log_mod.shutdown_logging()
    yield
    log_mod.shutdown_logging()


@pytest.fixture
def config(tmp_path) -> RepositoryConfig:
    """Test-environment config rooted in a temp directory, cheap bcrypt."""
    return RepositoryConfig(
        root=str(tmp_path),
        environment="test",
        security={"bcrypt_rounds": 4},
        logging={"directory": str(tmp_path / "logs")},
    )


@pytest.fixture
def data_dir(config) -> Path:
    path = config.data_path
    path.mkdir(parents=True, exist_ok=True)
    return path


@pytest.fixture
def store(data_dir) -> DocumentStore:
    return DocumentStore(data_dir)


@pytest.fixture
def versions(data_dir) -> VersionStore:
    return VersionStore(data_dir)


@pytest.fixture
def service(config) -> DocumentService:
    svc = DocumentService(config)
    svc.initialize()
    return svc


@pytest.fixture
def credentials(tmp_path) -> CredentialStore:
    return CredentialStore(tmp_path / "users.yml", bcrypt_rounds=4)


@pytest.fixture
def admin_session() -> dict:
    """Route-layer session bag for a signed-in admin."""
    return {"logged_in": True, "username": "admin"}


@pytest.fixture
def anonymous_session() -> dict:
    return {}


@pytest.fixture
def create_document(data_dir):
    """Write a document straight to disk, bypassing the service."""

    def _create(name: str, content: str = "") -> Path:
        path = data_dir / name
        path.write_text(content, encoding="utf-8")
        return path

    return _create
