"""
flatdocs Credential Store — username → bcrypt hash mapping in a YAML file.

File format (users.yml):
    admin: $2b$12$...
    john: $2b$12$...

Plaintext passwords are never written. Every registration rewrites the
whole file: read mapping → add entry → write temp file → os.replace.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional, Union

import yaml

from flatdocs.engine import messages
from flatdocs.engine.errors import (
    AlreadyExistsError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from flatdocs.engine.security import hash_password, verify_password

logger = logging.getLogger("flatdocs.accounts.credentials")

USERNAME_MIN_LENGTH = 4
USERNAME_MAX_LENGTH = 10
PASSWORD_MIN_LENGTH = 4
PASSWORD_MAX_LENGTH = 10

_USERNAME_RE = re.compile(r"^\w+$", re.ASCII)
_WHITESPACE_RE = re.compile(r"\s")


class CredentialStore:
    """
    Persisted account registry.

    All read-modify-write cycles run under one lock so two registrations in
    the same process cannot clobber each other.
    """

    def __init__(self, path: Union[str, Path], bcrypt_rounds: int = 12):
        self._path = Path(path)
        self._rounds = bcrypt_rounds
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    # -------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------

    @staticmethod
    def validate_username(username: str) -> bool:
        """4–10 characters, letters, digits and underscore only."""
        if not isinstance(username, str):
            return False
        return (
            USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH
            and _USERNAME_RE.match(username) is not None
        )

    @staticmethod
    def validate_password(password: str) -> bool:
        """4–10 characters, no whitespace."""
        if not isinstance(password, str):
            return False
        return (
            PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH
            and _WHITESPACE_RE.search(password) is None
        )

    # -------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------

    def load(self) -> Dict[str, str]:
        """Return the full mapping. A missing file is an empty registry."""
        if not self._path.exists():
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except OSError as e:
            raise StorageError(
                f"Cannot read credentials: {e}",
                operation="load",
                path=str(self._path),
                cause=e,
            )
        except yaml.YAMLError as e:
            raise StorageError(
                f"Credential file is not valid YAML: {e}",
                operation="load",
                path=str(self._path),
                cause=e,
            )
        if not isinstance(raw, dict):
            raise StorageError(
                "Credential file must contain a mapping",
                operation="load",
                path=str(self._path),
            )
        return {str(k): str(v) for k, v in raw.items()}

    def _save(self, accounts: Dict[str, str]) -> None:
        """Replace the credential file in one step (temp file + rename)."""
        data = yaml.safe_dump(accounts, default_flow_style=False, sort_keys=True)
        self._path.parent.mkdir(parents=True, exist_ok=True)

        fd = None
        temp_path = None
        try:
            fd, temp_path = tempfile.mkstemp(
                dir=str(self._path.parent),
                prefix=".tmp_",
                suffix=".yml",
            )
            os.write(fd, data.encode("utf-8"))
            os.close(fd)
            fd = None

            os.replace(temp_path, self._path)
            temp_path = None
        except OSError as e:
            raise StorageError(
                f"Cannot write credentials: {e}",
                operation="save",
                path=str(self._path),
                cause=e,
            )
        finally:
            if fd is not None:
                os.close(fd)
            if temp_path is not None and os.path.exists(temp_path):
                os.unlink(temp_path)

    # -------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------

    def exists(self, username: str) -> bool:
        return username in self.load()

    def check_credentials(self, username: str, password: str) -> bool:
        """Salted one-way comparison. False for unknown usernames."""
        with self._lock:
            stored = self.load().get(username)
        if stored is None:
            return False
        return verify_password(password, stored)

    def register(self, username: str, password: str) -> None:
        """
        Add an account.

        Raises:
            ValidationError: Username or password outside the constraints.
            AlreadyExistsError: Username is taken.
        """
        if not self.validate_username(username):
            raise ValidationError(messages.INVALID_USERNAME, field="username")
        if not self.validate_password(password):
            raise ValidationError(messages.INVALID_PASSWORD, field="password")

        with self._lock:
            accounts = self.load()
            if username in accounts:
                raise AlreadyExistsError(messages.ACCOUNT_EXISTS, object_ref=username)
            accounts[username] = hash_password(password, rounds=self._rounds)
            self._save(accounts)

        logger.info(f"Registered account '{username}'")

    def change_password(self, username: str, old_password: str, new_password: str) -> None:
        """
        Raises:
            NotFoundError: Unknown username.
            ValidationError: Wrong old password or invalid new password.
        """
        if not self.validate_password(new_password):
            raise ValidationError(messages.INVALID_PASSWORD, field="password")

        with self._lock:
            accounts = self.load()
            stored = accounts.get(username)
            if stored is None:
                raise NotFoundError(f"Account '{username}' does not exist.", object_ref=username)
            if not verify_password(old_password, stored):
                raise ValidationError(messages.INVALID_CREDENTIALS, field="old_password")
            accounts[username] = hash_password(new_password, rounds=self._rounds)
            self._save(accounts)

        logger.info(f"Changed password for '{username}'")

    def delete(self, username: str) -> bool:
        """Remove an account. Returns False if it did not exist."""
        with self._lock:
            accounts = self.load()
            if accounts.pop(username, None) is None:
                return False
            self._save(accounts)
        logger.info(f"Deleted account '{username}'")
        return True

    def __repr__(self) -> str:
        return f"<CredentialStore path='{self._path}'>"


def open_credential_store(
    path: Union[str, Path],
    bcrypt_rounds: int = 12,
    seed_admin: Optional[Dict[str, str]] = None,
) -> CredentialStore:
    """
    Open a credential store, seeding accounts when the file does not exist.

    ``seed_admin`` maps username → plaintext password; it is hashed before
    being written and ignored once the file exists.
    """
    store = CredentialStore(path, bcrypt_rounds=bcrypt_rounds)
    if seed_admin and not store.path.exists():
        for username, password in seed_admin.items():
            store.register(username, password)
    return store
