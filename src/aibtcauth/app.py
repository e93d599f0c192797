from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from aibtcauth.config import Config
from aibtcauth.core.core import Core
from aibtcauth.core.db import KeyValueStore
from aibtcauth.core.modules.session.models import SessionInfo, SessionToken
from aibtcauth.core.modules.signature.c32 import is_valid_address
from aibtcauth.errors import ValidationError


class App:
    """Facade for all authentication operations exposed to the web layer."""

    def __init__(self, config: Config, store: KeyValueStore | None = None) -> None:
        self._core = Core(config, store)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    async def authorize_service(self, authorization: str | None) -> None:
        """Check the shared secret of a calling service."""
        await self._core.services.access.ensure_trusted_caller(authorization)

    async def request_auth_token(self, signature: str, public_key: str) -> SessionInfo:
        """Verify a signed challenge and issue a session for the signer's address."""
        signer = self._core.services.signature.verify_and_derive_address(signature, public_key)
        return await self._core.services.session.issue_session(signer.address, signer.public_key)

    async def verify_address(self, address: str) -> SessionToken:
        """Get the current session token of an address."""
        if not is_valid_address(address):
            raise ValidationError(f"Invalid address: {address}")
        return await self._core.services.session.get_session_token(address)

    async def verify_session_token(self, session_token: str) -> str:
        """Get the address owning a session token."""
        return await self._core.services.session.get_address(session_token)
