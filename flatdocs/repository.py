"""
flatdocs Repository — wires config, audit logging and services together.

Usage:
    from flatdocs.repository import open_repository

    repo = open_repository(load_config("flatdocs.yaml"))
    repo.accounts.login(session, "admin", "secret")
    repo.documents.create(session, "about.md")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from flatdocs.accounts.credentials import CredentialStore
from flatdocs.accounts.service import AccountService
from flatdocs.documents.service import DocumentService
from flatdocs.engine.config import RepositoryConfig
from flatdocs.engine.logging import init_logging, log, log_system_event
from flatdocs.engine.security import AuthGate

logger = logging.getLogger("flatdocs.repository")


@dataclass
class Repository:
    config: RepositoryConfig
    documents: DocumentService
    accounts: AccountService
    gate: AuthGate


def open_repository(config: RepositoryConfig, initialize: bool = True) -> Repository:
    """
    Build the services for ``config``. With ``initialize`` the data
    directories are created and the audit log is started.
    """
    gate = AuthGate()
    documents = DocumentService(config, gate=gate)
    credentials = CredentialStore(
        config.credentials_path,
        bcrypt_rounds=config.security.bcrypt_rounds,
    )
    accounts = AccountService(credentials, gate=gate)

    if initialize:
        if config.logging.audit_enabled:
            init_logging(log_dir=str(config.log_path), level=config.logging.level)
        documents.initialize()
        log(log_system_event(
            "repository_opened",
            details={"environment": config.environment, "data_path": str(config.data_path)},
        ))
        logger.info(f"Opened repository '{config.name}' at {config.data_path}")

    return Repository(config=config, documents=documents, accounts=accounts, gate=gate)
