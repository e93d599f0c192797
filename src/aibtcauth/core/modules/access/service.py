import asyncio
import secrets

import structlog

from aibtcauth.core.core import Service
from aibtcauth.errors import AuthenticationError, ConfigurationError

logger = structlog.get_logger(__name__)

SHARED_KEY_PREFIX = "key"


def shared_key(caller: str) -> str:
    return f"{SHARED_KEY_PREFIX}:{caller}"


class AccessService(Service):
    """Shared-secret gate for service-to-service calls.

    Secrets are read from the store on every call, never cached, so a rotated
    secret applies to the very next request on every instance.
    """

    async def load_shared_secrets(self) -> list[str]:
        """Fetch the secret of every trusted caller. Fails closed if any is missing."""
        values = await asyncio.gather(*(self.store.get(shared_key(caller)) for caller in self.config.trusted_callers))
        missing = [caller for caller, value in zip(self.config.trusted_callers, values, strict=True) if value is None]
        if missing or not values:
            raise ConfigurationError(f"Unable to load shared keys for: {', '.join(missing) or 'no trusted callers'}")
        return [value for value in values if value is not None]

    async def ensure_trusted_caller(self, authorization: str | None) -> None:
        """Ensure the Authorization header carries one of the trusted callers' secrets."""
        if not authorization:
            logger.info("service_auth_rejected", reason="missing_header")
            raise AuthenticationError("Missing Authorization header")

        valid_secrets = await self.load_shared_secrets()
        # Compare against every secret to keep timing independent of which one matches
        matches = [secrets.compare_digest(authorization.encode(), secret.encode()) for secret in valid_secrets]
        if not any(matches):
            logger.info("service_auth_rejected", reason="invalid_key")
            raise AuthenticationError("Invalid Authorization key")
