"""
Integration test fixtures — a full repository on a temp filesystem.

Mark with @pytest.mark.integration to skip in unit-only runs.

Run: pytest tests/integration/ -v -m integration
"""

from __future__ import annotations

import pytest

from flatdocs.engine.config import load_config
from flatdocs.repository import open_repository


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: exercises a full repository on disk")


@pytest.fixture
def integration_project(tmp_path):
    """A project directory with flatdocs.yaml, seeded documents and an admin account."""
    root = tmp_path / "project"
    root.mkdir()
    (root / "flatdocs.yaml").write_text(
        "repository:\n"
        "  name: IntegrationDocs\n"
        "  environment: test\n"
        "security:\n"
        "  bcrypt_rounds: 4\n"
        "logging:\n"
        "  directory: logs\n",
        encoding="utf-8",
    )
    return root


@pytest.fixture
def repo(integration_project):
    repository = open_repository(load_config(str(integration_project / "flatdocs.yaml")))
    repository.accounts.credentials.register("admin", "secret")
    data = repository.config.data_path
    (data / "about.md").write_text("# Ruby is...", encoding="utf-8")
    (data / "changes.txt").write_text("", encoding="utf-8")
    (data / "history.txt").write_text("2015 - Ruby 2.3 released.", encoding="utf-8")
    return repository
