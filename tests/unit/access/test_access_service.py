"""Tests for the shared-secret gate."""

import pytest
from helpers import BACKEND_KEY, FRONTEND_KEY

from aibtcauth.errors import AuthenticationError, ConfigurationError


@pytest.fixture
def access(core):
    return core.services.access


class TestEnsureTrustedCaller:
    """Tests for checking the Authorization header."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header", [FRONTEND_KEY, BACKEND_KEY])
    async def test_configured_secrets_pass(self, access, header):
        await access.ensure_trusted_caller(header)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header", [None, ""])
    async def test_missing_header(self, access, header):
        with pytest.raises(AuthenticationError, match="Missing Authorization header"):
            await access.ensure_trusted_caller(header)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header", ["wrong-key", f"Bearer {FRONTEND_KEY}", FRONTEND_KEY.upper(), FRONTEND_KEY + " "])
    async def test_non_matching_header(self, access, header):
        """Test that only an exact match is accepted."""
        with pytest.raises(AuthenticationError, match="Invalid Authorization key"):
            await access.ensure_trusted_caller(header)

    @pytest.mark.asyncio
    async def test_rotation_applies_to_next_call(self, access, store):
        await access.ensure_trusted_caller(FRONTEND_KEY)
        store.set("key:aibtcdev-frontend", "rotated-key")

        with pytest.raises(AuthenticationError):
            await access.ensure_trusted_caller(FRONTEND_KEY)
        await access.ensure_trusted_caller("rotated-key")

    @pytest.mark.asyncio
    async def test_missing_secret_fails_closed(self, access, store):
        """Test that a missing secret entry rejects every caller, even one with a valid key."""
        del store.entries["key:aibtcdev-backend"]

        with pytest.raises(ConfigurationError, match="aibtcdev-backend"):
            await access.ensure_trusted_caller(FRONTEND_KEY)

    @pytest.mark.asyncio
    async def test_missing_header_checked_before_store(self, access, store):
        store.entries.clear()
        with pytest.raises(AuthenticationError, match="Missing Authorization header"):
            await access.ensure_trusted_caller(None)
