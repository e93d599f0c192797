from typing import Self

from pydantic import model_validator
from pydantic_settings import BaseSettings

from aibtcauth.core.modules.signature.models import ChallengeMode, Network


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str  # MongoDB URL, database name is taken from the path
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = []
    store_collection: str = "kv"
    store_timeout_seconds: float = 2.0
    store_max_retries: int = 2
    # Must match what the frontend asks wallets to sign
    network: Network = Network.MAINNET
    challenge_mode: ChallengeMode = ChallengeMode.STRUCTURED
    # Compared byte for byte in both modes, case included ("Welcome" and "welcome" differ)
    challenge_message: str = "welcome to aibtcdev!"
    domain_name: str = "sprint.aibtc.dev"
    domain_version: str = "0.0.1"
    session_ttl_seconds: int = 30 * 24 * 60 * 60
    revoke_previous_sessions: bool = False  # False keeps older tokens valid until their own TTL lapses
    trusted_callers: list[str] = ["aibtcdev-frontend", "aibtcdev-backend"]

    model_config = {
        "env_file": [".env"],
        "env_prefix": "AIBTCAUTH_",
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def check_structured_fields_are_ascii(self) -> Self:
        """Clarity string-ascii values cannot hold other characters."""
        fields = ["domain_name", "domain_version"]
        if self.challenge_mode == ChallengeMode.STRUCTURED:
            fields.append("challenge_message")
        for name in fields:
            if not getattr(self, name).isascii():
                raise ValueError(f"{name} must be ASCII")
        return self
