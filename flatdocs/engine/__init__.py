"""flatdocs Engine — Config, errors, audit logging, security."""

from flatdocs.engine.config import RepositoryConfig, load_config  # noqa: F401
from flatdocs.engine.security import AuthenticatedSession, AuthGate  # noqa: F401

__all__ = [
    "RepositoryConfig",
    "load_config",
    "AuthenticatedSession",
    "AuthGate",
]
