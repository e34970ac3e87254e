"""
flatdocs Account Service — login, logout and self-registration.

Login and registration produce an AuthenticatedSession, record it in the
route layer's session bag and set the canonical message. Failures raise
typed errors whose ``message`` is the text to show the user.
"""

from __future__ import annotations

import logging
from typing import Any, MutableMapping, Optional

from flatdocs.accounts.credentials import CredentialStore
from flatdocs.engine import messages
from flatdocs.engine.errors import InvalidCredentialsError, ValidationError
from flatdocs.engine.logging import log, log_security_event
from flatdocs.engine.security import AuthenticatedSession, AuthGate

logger = logging.getLogger("flatdocs.accounts.service")


class AccountService:
    """Session-facing account flows on top of a CredentialStore."""

    def __init__(self, credentials: CredentialStore, gate: Optional[AuthGate] = None):
        self._credentials = credentials
        self._gate = gate or AuthGate()

    @property
    def credentials(self) -> CredentialStore:
        return self._credentials

    def login(
        self,
        session: MutableMapping[str, Any],
        username: str,
        password: str,
    ) -> AuthenticatedSession:
        """
        Raises:
            InvalidCredentialsError: ``"Invalid Credentials!"`` for an unknown
                user or a wrong password alike.
        """
        username = (username or "").strip()
        if not self._credentials.check_credentials(username, password or ""):
            log(log_security_event("login_failed", object_ref=username, username=username))
            logger.info(f"Failed login for '{username}'")
            raise InvalidCredentialsError(messages.INVALID_CREDENTIALS, username=username)

        auth = AuthenticatedSession(username=username)
        self._gate.sign_in(session, auth)
        session["message"] = messages.WELCOME

        log(log_security_event("login", object_ref=username, username=username, level="INFO"))
        logger.info(f"User '{username}' signed in (session: {auth.session_id[:16]}...)")
        return auth

    def logout(self, session: MutableMapping[str, Any]) -> None:
        username = session.get("username")
        self._gate.sign_out(session)
        session["message"] = messages.SIGNED_OUT
        if username:
            log(log_security_event("logout", object_ref=username, username=username, level="INFO"))

    def register(
        self,
        session: MutableMapping[str, Any],
        username: str,
        password: str,
    ) -> AuthenticatedSession:
        """
        Create an account and sign it in.

        Raises:
            ValidationError: Already signed in, or username/password invalid.
            AlreadyExistsError: ``"That account name already exists."``
        """
        if self._gate.is_authenticated(session):
            raise ValidationError(messages.ALREADY_LOGGED_IN, field="session")

        username = (username or "").strip()
        self._credentials.register(username, password or "")

        auth = AuthenticatedSession(username=username)
        self._gate.sign_in(session, auth)
        session["message"] = messages.ACCOUNT_REGISTERED

        log(log_security_event("register", object_ref=username, username=username, level="INFO"))
        return auth
