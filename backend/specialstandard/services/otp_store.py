"""
SpecialStandard Backend — Expiring OTP Store
=============================================

What:  In-process store of one-time password-reset codes keyed by email.
How:   Each entry carries its expiry. Reads evict an expired entry and
       every write sweeps out all expired entries. The caller discards a code once the reset it authorizes has
       gone through, so a code works at most once.
Who:   AuthService (send-reset-otp / reset-password).

Scope:
    Codes live in this process only; a restart or a second worker does not
    see them. The store is the only mutable in-process state in the app and
    is guarded by an asyncio lock.
"""

import asyncio
import logging
import secrets
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from specialstandard.config import settings

logger = logging.getLogger(__name__)


def generate_code(digits: int = 6) -> str:
    """Uniformly random numeric code, zero-padded."""
    return f"{secrets.randbelow(10 ** digits):0{digits}d}"


@dataclass
class _Entry:
    code: str
    expires_at: float


class ExpiringStore:
    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, _Entry] = {}
        self._lock = asyncio.Lock()

    @staticmethod
    def _key(email: str) -> str:
        return email.strip().lower()

    async def put(self, email: str, code: str) -> None:
        """Store `code` for `email`, replacing any earlier code."""
        async with self._lock:
            now = self._clock()
            self._sweep(now)
            self._entries[self._key(email)] = _Entry(code, now + self.ttl_seconds)

    async def matches(self, email: str, code: str) -> bool:
        """True when `code` is the live code for `email`. The entry is kept."""
        async with self._lock:
            stored = self._live(self._key(email))
        return stored is not None and secrets.compare_digest(stored.encode(), code.encode())

    async def discard(self, email: str) -> None:
        async with self._lock:
            self._entries.pop(self._key(email), None)

    def _live(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            logger.debug("Evicted expired reset code")
            return None
        return entry.code

    def _sweep(self, now: float) -> None:
        expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Swept %d expired reset code(s)", len(expired))

    def __len__(self) -> int:
        return len(self._entries)


reset_otp_store = ExpiringStore(ttl_seconds=settings.reset_otp_ttl_minutes * 60)
