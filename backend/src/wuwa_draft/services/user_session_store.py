"""In-memory store of authenticated user sessions."""

import threading
import time
import uuid

from wuwa_draft.models.room import DiscordUser

SESSION_COOKIE = "wuwa_session"
DEFAULT_TTL_SECONDS = 7 * 24 * 60 * 60
CLEANUP_INTERVAL_SECONDS = 60


class UserSessionStore:
    """Opaque session tokens mapped to Discord users, with expiry."""

    def __init__(self, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        self.ttl_seconds = ttl_seconds
        self._sessions: dict[str, tuple[DiscordUser, float]] = {}
        self._lock = threading.Lock()
        self._last_cleanup = 0.0

    def create(self, user: DiscordUser, now: float | None = None) -> str:
        """Create a session for ``user`` and return its token."""
        now = now or time.time()
        self._prune_expired(now)
        token = uuid.uuid4().hex
        with self._lock:
            self._sessions[token] = (user, now)
        return token

    def get(self, token: str | None, now: float | None = None) -> DiscordUser | None:
        """User for ``token``, or None if unknown or expired."""
        if not token:
            return None
        now = now or time.time()
        with self._lock:
            entry = self._sessions.get(token)
            if entry is None:
                return None
            user, created_at = entry
            if now - created_at >= self.ttl_seconds:
                del self._sessions[token]
                return None
        return user

    def remove(self, token: str | None) -> None:
        if not token:
            return
        with self._lock:
            self._sessions.pop(token, None)

    def __len__(self) -> int:
        return len(self._sessions)

    def _prune_expired(self, now: float) -> None:
        """Remove expired sessions opportunistically."""
        if now - self._last_cleanup < CLEANUP_INTERVAL_SECONDS:
            return
        with self._lock:
            expired = [
                token
                for token, (_, created_at) in self._sessions.items()
                if now - created_at >= self.ttl_seconds
            ]
            for token in expired:
                del self._sessions[token]
            self._last_cleanup = now
