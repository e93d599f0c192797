import asyncio
import uuid

import structlog

from aibtcauth.core.core import Service
from aibtcauth.core.modules.session.models import (
    SessionInfo,
    SessionToken,
    address_key,
    pubkey_key,
    session_key,
)
from aibtcauth.errors import AuthenticationError

logger = structlog.get_logger(__name__)


class SessionService(Service):
    """Issues session tokens and resolves them through the key-value store.

    The index entries are written without a transaction. Readers treat every
    lookup on its own: a missing entry means "not authenticated", whatever the
    state of the other direction of the index.
    """

    async def issue_session(self, address: str, public_key: str) -> SessionInfo:
        """Mint a token for address and (re)write all index entries with a fresh TTL."""
        if self.config.revoke_previous_sessions:
            await self._revoke_indexed_session(address)

        token = SessionToken(str(uuid.uuid4()))
        ttl = self.config.session_ttl_seconds
        await asyncio.gather(
            self.store.put(pubkey_key(address), public_key, ttl),
            self.store.put(session_key(token), address, ttl),
            self.store.put(address_key(address), token, ttl),
        )
        logger.info("session_issued", address=address, ttl_seconds=ttl)
        return SessionInfo(address=address, session_token=token)

    async def get_session_token(self, address: str) -> SessionToken:
        """Latest token issued for address. Raises AuthenticationError if absent or expired."""
        token = await self.store.get(address_key(address))
        if token is None:
            raise AuthenticationError(f"Address not found: {address}")
        return SessionToken(token)

    async def get_address(self, token: str) -> str:
        """Address a token was issued to. Raises AuthenticationError if absent or expired."""
        address = await self.store.get(session_key(token))
        if address is None:
            raise AuthenticationError("Invalid or expired session token")
        return address

    async def get_public_key(self, address: str) -> str:
        """Public key recorded at the latest issuance for address."""
        public_key = await self.store.get(pubkey_key(address))
        if public_key is None:
            raise AuthenticationError(f"Address not found: {address}")
        return public_key

    async def _revoke_indexed_session(self, address: str) -> None:
        previous = await self.store.get(address_key(address))
        if previous is not None:
            await self.store.delete(session_key(previous))
            logger.info("session_revoked", address=address)
