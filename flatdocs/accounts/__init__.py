"""flatdocs Accounts — credential store and session-facing account flows."""

from flatdocs.accounts.credentials import CredentialStore, open_credential_store
from flatdocs.accounts.service import AccountService

__all__ = [
    "CredentialStore",
    "open_credential_store",
    "AccountService",
]
