"""Signature verification models."""

from enum import StrEnum

from pydantic import BaseModel, Field


class Network(StrEnum):
    """Stacks network an address is derived for."""

    MAINNET = "mainnet"
    TESTNET = "testnet"

    @property
    def address_version(self) -> int:
        """c32check version byte of single-signature (P2PKH) addresses."""
        return 22 if self is Network.MAINNET else 26

    @property
    def chain_id(self) -> int:
        """Chain id used in the SIP-018 signing domain."""
        return 1 if self is Network.MAINNET else 2147483648


class ChallengeMode(StrEnum):
    """How the signed challenge is turned into a digest."""

    MESSAGE = "message"  # plain Stacks signed message
    STRUCTURED = "structured"  # SIP-018 structured data with a signing domain


class VerifiedSigner(BaseModel):
    """Result of a successful signature verification."""

    address: str = Field(..., description="Stacks address derived from the public key")
    public_key: str = Field(..., description="Public key as hex, exactly as supplied by the caller")
