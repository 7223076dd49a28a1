"""Session storage package."""

from mpt.infrastructure.storage.session_store import InMemorySessionStore, SessionStore

__all__ = ["InMemorySessionStore", "SessionStore"]
