"""Test doubles and helpers shared by the test modules."""

from datetime import UTC, datetime, timedelta

from eth_keys import keys

from aibtcauth.config import Config
from aibtcauth.core.db import KeyValueStore
from aibtcauth.core.modules.signature.models import ChallengeMode

FRONTEND_KEY = "frontend-shared-key"
BACKEND_KEY = "backend-shared-key"


class FakeClock:
    """Controllable clock for expiry tests."""

    def __init__(self) -> None:
        self.current = datetime(2025, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


class MemoryKeyValueStore(KeyValueStore):
    """In-memory store with lazy expiry, driven by a FakeClock."""

    def __init__(self, clock: FakeClock, **kwargs) -> None:
        kwargs.setdefault("retry_delay", 0)
        super().__init__(clock=clock, **kwargs)
        self.entries: dict[str, tuple[str, datetime | None]] = {}

    def set(self, key: str, value: str) -> None:
        """Write an entry without expiry, bypassing the async API."""
        self.entries[key] = (value, None)

    def live_keys(self, prefix: str = "") -> list[str]:
        return [
            key
            for key, (_, expires_at) in self.entries.items()
            if key.startswith(prefix) and not self._is_expired(expires_at)
        ]

    async def _get(self, key: str) -> str | None:
        entry = self.entries.get(key)
        if entry is None or self._is_expired(entry[1]):
            return None
        return entry[0]

    async def _put(self, key: str, value: str, expires_at: datetime | None) -> None:
        self.entries[key] = (value, expires_at)

    async def _delete(self, key: str) -> None:
        self.entries.pop(key, None)


def make_config(**overrides) -> Config:
    values = {
        "database_url": "mongodb://localhost:27017/aibtcauth-test",
        "challenge_mode": ChallengeMode.STRUCTURED,
    }
    values.update(overrides)
    return Config(**values)


def sign_digest(private_key: keys.PrivateKey, digest: bytes) -> str:
    """Hex RSV signature, as produced by Stacks wallets."""
    return private_key.sign_msg_hash(digest).to_bytes().hex()
