from __future__ import annotations

import copy
import json
import logging
import time
from abc import ABC, abstractmethod
from threading import RLock
from typing import Any, Callable, Dict, List, Optional, Tuple

from redis import Redis, RedisError

logger = logging.getLogger(__name__)

SessionData = Dict[str, Any]

KEY_PREFIX = "session:"
DEFAULT_TTL_SECONDS = 3600


def session_key(session_id: str) -> str:
    return f"{KEY_PREFIX}{session_id}"


def trim_history(history: List[Dict[str, Any]], limit: int) -> List[Dict[str, Any]]:
    """
    Keep at most the last `limit` messages.

    The kept window never opens on an assistant turn or on a tool_result
    reply, whose tool_use would have been cut away.
    """
    if limit <= 0:
        return []

    kept = list(history[-limit:])
    while kept and not _opens_turn(kept[0]):
        kept.pop(0)
    return kept


def _opens_turn(message: Dict[str, Any]) -> bool:
    if message.get("role") != "user":
        return False
    content = message.get("content")
    if isinstance(content, list):
        return not any(
            isinstance(block, dict) and block.get("type") == "tool_result"
            for block in content
        )
    return True


def build_session(history: List[Dict[str, Any]], limit: Optional[int] = None) -> SessionData:
    """Session payload: the (optionally trimmed) history plus a ms timestamp."""
    if limit is not None:
        history = trim_history(history, limit)
    return {
        "conversation_history": list(history),
        "last_active": int(time.time() * 1000),
    }


class SessionStore(ABC):
    """
    Key-value persistence for conversation sessions.

    Entries expire `ttl_seconds` after their last write. Writes are
    last-writer-wins: two concurrent requests on the same session both
    succeed and the later `put` replaces the earlier one.

    Backend failures never propagate: a failed read is a miss and a
    failed write is logged and skipped.
    """

    def __init__(self, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive.")
        self.ttl_seconds = ttl_seconds

    @abstractmethod
    def get(self, session_id: str) -> Optional[SessionData]:
        raise NotImplementedError

    @abstractmethod
    def put(self, session_id: str, data: SessionData) -> None:
        raise NotImplementedError


class InMemorySessionStore(SessionStore):
    """Process-local store for development and tests."""

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(ttl_seconds)
        self._clock = clock
        self._entries: Dict[str, Tuple[float, SessionData]] = {}
        self._lock = RLock()

    def get(self, session_id: str) -> Optional[SessionData]:
        key = session_key(session_id)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            expires_at, data = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                logger.debug("[SESSION] Expired: %s", key)
                return None

            return copy.deepcopy(data)

    def put(self, session_id: str, data: SessionData) -> None:
        key = session_key(session_id)
        with self._lock:
            now = self._clock()
            self._purge(now)
            self._entries[key] = (now + self.ttl_seconds, copy.deepcopy(data))
        logger.debug("[SESSION] Stored: %s", key)

    def _purge(self, now: float) -> None:
        """Drop every expired entry; the caller holds the lock."""
        expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("[SESSION] Purged %d expired session(s)", len(expired))

    def __len__(self) -> int:
        with self._lock:
            now = self._clock()
            return sum(1 for expires_at, _ in self._entries.values() if expires_at > now)


class RedisSessionStore(SessionStore):
    """Redis-backed store; entries carry a native `EX` expiry."""

    def __init__(
        self,
        redis_url: Optional[str] = None,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        *,
        client: Optional[Redis] = None,
        socket_timeout: float = 5.0,
    ) -> None:
        super().__init__(ttl_seconds)

        if client is None:
            if not redis_url:
                raise ValueError("RedisSessionStore requires redis_url or client.")
            client = Redis.from_url(
                redis_url,
                decode_responses=True,
                socket_timeout=socket_timeout,
                socket_connect_timeout=socket_timeout,
            )

        self.client = client

    def get(self, session_id: str) -> Optional[SessionData]:
        key = session_key(session_id)
        try:
            raw = self.client.get(key)
        except RedisError as e:
            logger.warning("[SESSION] Failed to load %s: %s", key, e)
            return None

        if raw is None:
            return None

        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning("[SESSION] Corrupt session %s: %s", key, e)
            return None

        return data if isinstance(data, dict) else None

    def put(self, session_id: str, data: SessionData) -> None:
        key = session_key(session_id)
        try:
            self.client.set(key, json.dumps(data), ex=self.ttl_seconds)
        except (RedisError, TypeError) as e:
            logger.warning("[SESSION] Failed to save %s: %s", key, e)
