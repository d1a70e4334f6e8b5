from .store import (
    InMemorySessionStore,
    RedisSessionStore,
    SessionStore,
    build_session,
    session_key,
    trim_history,
)

__all__ = [
    "InMemorySessionStore",
    "RedisSessionStore",
    "SessionStore",
    "build_session",
    "session_key",
    "trim_history",
]
