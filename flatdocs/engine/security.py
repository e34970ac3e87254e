"""
flatdocs Security — AuthGate, authenticated sessions, password hashing.

Implements:
- AuthenticatedSession: explicit capability value produced by login and
  threaded into every mutating call
- AuthGate: checks a session before create/edit/delete/duplicate/rename
- hash_password / verify_password: salted bcrypt digests

The route layer owns the session bag (``logged_in``, ``username``,
``message``). AuthGate accepts either that bag or an AuthenticatedSession.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, MutableMapping, Optional, Union

import bcrypt

from flatdocs.engine import messages
from flatdocs.engine.errors import AuthRequiredError
from flatdocs.engine.logging import log, log_security_event

logger = logging.getLogger("flatdocs.engine.security")


@dataclass(frozen=True)
class AuthenticatedSession:
    """
    Record of a signed-in user, issued by AccountService.login/register.

    This is not an unforgeable token: AuthGate accepts any instance, so
    code that can construct one is trusted as that user. Build it only
    after a credential check, never from request input.
    """

    username: str
    session_id: str = field(default_factory=lambda: f"sess_{uuid.uuid4().hex}")
    issued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        """Serialize for logging."""
        return {
            "username": self.username,
            "session_id": self.session_id,
            "issued_at": self.issued_at.isoformat(),
        }


SessionLike = Union[AuthenticatedSession, Mapping[str, Any], None]


class AuthGate:
    """
    Session-scoped gate consulted at the start of every mutation.

    The gate only signals; redirecting or denying is the caller's job.

    Callers in the same process are trusted. An AuthenticatedSession passes
    as-is, and a session mapping passes when ``logged_in`` is set. Keeping
    both out of reach of untrusted input belongs to the route layer.
    """

    def is_authenticated(self, session_state: SessionLike) -> bool:
        """True if the session carries a signed-in user."""
        if isinstance(session_state, AuthenticatedSession):
            return True
        if session_state is None:
            return False
        return bool(session_state.get("logged_in", False))

    def require_authenticated(
        self,
        session_state: SessionLike,
        object_ref: Optional[str] = None,
    ) -> AuthenticatedSession:
        """
        Return the AuthenticatedSession for a signed-in session.

        Raises:
            AuthRequiredError: If the session is not signed in.
        """
        if isinstance(session_state, AuthenticatedSession):
            return session_state

        if not self.is_authenticated(session_state):
            log(log_security_event(
                "mutation_denied",
                object_ref=object_ref or "documents",
                object_type="documents",
                reason="not_signed_in",
            ))
            logger.info(f"Denied unauthenticated mutation on {object_ref or 'documents'}")
            raise AuthRequiredError(messages.SIGN_IN_REQUIRED, object_ref=object_ref)

        auth = session_state.get("auth")
        if isinstance(auth, AuthenticatedSession):
            return auth
        return AuthenticatedSession(username=session_state.get("username") or "")

    @staticmethod
    def sign_in(session_state: MutableMapping[str, Any], auth: AuthenticatedSession) -> None:
        """Record a successful login in the externally-owned session bag."""
        session_state["logged_in"] = True
        session_state["username"] = auth.username
        session_state["auth"] = auth

    @staticmethod
    def sign_out(session_state: MutableMapping[str, Any]) -> None:
        """Clear login flags from the session bag."""
        session_state["logged_in"] = False
        session_state.pop("username", None)
        session_state.pop("auth", None)


# ---------------------------------------------------------------------------
# Password Utilities
# ---------------------------------------------------------------------------

def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password using bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its bcrypt hash. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt digest")
        return False
