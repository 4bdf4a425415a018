from __future__ import annotations

from datetime import datetime
from threading import RLock


class RevocationStore:
    """Revoked token ids, each kept only until the token would expire anyway.

    Process-local: with more than one worker process a logout is only seen
    by the process that handled it.
    """

    def __init__(self) -> None:
        self.lock = RLock()
        self._revoked: dict[str, datetime] = {}

    def revoke(self, jti: str, expires_at: datetime) -> None:
        with self.lock:
            self._revoked[jti] = expires_at

    def is_revoked(self, jti: str | None, now: datetime) -> bool:
        if not jti:
            return False
        with self.lock:
            self._purge(now)
            return jti in self._revoked

    def _purge(self, now: datetime) -> None:
        expired = [jti for jti, exp in self._revoked.items() if exp <= now]
        for jti in expired:
            del self._revoked[jti]
