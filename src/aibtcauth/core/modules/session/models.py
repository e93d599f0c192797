"""Session management models."""

from typing import NewType

from pydantic import BaseModel, ConfigDict, Field

SessionToken = NewType("SessionToken", str)

KEY_PREFIX = "auth"


def session_key(token: str) -> str:
    return f"{KEY_PREFIX}:session:{token}"


def address_key(address: str) -> str:
    return f"{KEY_PREFIX}:address:{address}"


def pubkey_key(address: str) -> str:
    return f"{KEY_PREFIX}:pubkey:{address}"


class SessionInfo(BaseModel):
    """A session token together with the address it belongs to.

    Stored as three independent key-value entries sharing one TTL:
    session -> address, address -> session and address -> public key.
    """

    address: str = Field(..., description="Stacks address of the signer")
    session_token: SessionToken = Field(..., alias="sessionToken", description="Bearer token for later requests")

    model_config = ConfigDict(populate_by_name=True)


class AddressSession(BaseModel):
    """Current session token of an address."""

    address: str = Field(..., description="Stacks address")
    session_key: SessionToken = Field(..., alias="sessionKey", description="Latest token issued for the address")

    model_config = ConfigDict(populate_by_name=True)
