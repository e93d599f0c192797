"""Clarity value serialization and SIP-018 structured data encoding."""

import hashlib
from collections.abc import Mapping

TYPE_UINT = 0x01
TYPE_TUPLE = 0x0C
TYPE_STRING_ASCII = 0x0D

STRUCTURED_DATA_PREFIX = b"SIP018"


def serialize_uint(value: int) -> bytes:
    if not 0 <= value < 2**128:
        raise ValueError(f"uint out of range: {value}")
    return bytes([TYPE_UINT]) + value.to_bytes(16, "big")


def serialize_string_ascii(value: str) -> bytes:
    data = value.encode("ascii")
    return bytes([TYPE_STRING_ASCII]) + len(data).to_bytes(4, "big") + data


def serialize_tuple(fields: Mapping[str, bytes]) -> bytes:
    """Serialize a tuple from already-serialized field values, keys in sorted order."""
    parts = [bytes([TYPE_TUPLE]), len(fields).to_bytes(4, "big")]
    for name in sorted(fields):
        encoded_name = name.encode("ascii")
        if len(encoded_name) > 128:
            raise ValueError(f"Tuple key too long: {name}")
        parts.append(bytes([len(encoded_name)]) + encoded_name + fields[name])
    return b"".join(parts)


def signing_domain(name: str, version: str, chain_id: int) -> bytes:
    return serialize_tuple(
        {
            "name": serialize_string_ascii(name),
            "version": serialize_string_ascii(version),
            "chain-id": serialize_uint(chain_id),
        }
    )


def encode_structured_data(message: bytes, domain: bytes) -> bytes:
    """SIP-018 payload: prefix, hash of the domain, hash of the message."""
    return STRUCTURED_DATA_PREFIX + hashlib.sha256(domain).digest() + hashlib.sha256(message).digest()
