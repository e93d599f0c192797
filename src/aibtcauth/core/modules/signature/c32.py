"""Crockford-style base32 (c32) and c32check encoding of Stacks addresses."""

import hashlib
import re

from Crypto.Hash import RIPEMD160

C32_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
C32_RE = re.compile(f"^[{C32_ALPHABET}]*$")
ADDRESS_PREFIX = "S"
HASH160_LENGTH = 20
CHECKSUM_LENGTH = 4


def hash160(data: bytes) -> bytes:
    """RIPEMD-160 of SHA-256."""
    return RIPEMD160.new(hashlib.sha256(data).digest()).digest()


def c32_normalize(text: str) -> str:
    """Uppercase and map look-alike characters onto the alphabet."""
    return text.upper().replace("O", "0").replace("L", "1").replace("I", "1")


def c32_encode(data: bytes) -> str:
    """Encode bytes as c32, keeping one leading '0' per leading zero byte."""
    value = int.from_bytes(data, "big")
    digits = []
    while value:
        value, remainder = divmod(value, 32)
        digits.append(C32_ALPHABET[remainder])
    leading_zeros = len(data) - len(data.lstrip(b"\x00"))
    return "0" * leading_zeros + "".join(reversed(digits))


def c32_decode(text: str) -> bytes:
    """Decode c32 text. Raises ValueError on characters outside the alphabet."""
    text = c32_normalize(text)
    if not C32_RE.fullmatch(text):
        raise ValueError("Not a c32 string")
    stripped = text.lstrip("0")
    leading_zeros = len(text) - len(stripped)
    value = 0
    for char in stripped:
        value = value * 32 + C32_ALPHABET.index(char)
    body = value.to_bytes((value.bit_length() + 7) // 8, "big") if value else b""
    return b"\x00" * leading_zeros + body


def _checksum(version: int, data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(bytes([version]) + data).digest()).digest()[:CHECKSUM_LENGTH]


def c32check_encode(version: int, data: bytes) -> str:
    if not 0 <= version < 32:
        raise ValueError(f"Invalid c32check version: {version}")
    return C32_ALPHABET[version] + c32_encode(data + _checksum(version, data))


def c32check_decode(text: str) -> tuple[int, bytes]:
    """Return (version, data). Raises ValueError on a bad checksum."""
    text = c32_normalize(text)
    if len(text) < 2:
        raise ValueError("c32check string too short")
    version = C32_ALPHABET.find(text[0])
    if version < 0:
        raise ValueError("Invalid c32check version character")
    payload = c32_decode(text[1:])
    if len(payload) <= CHECKSUM_LENGTH:
        raise ValueError("c32check payload too short")
    data, checksum = payload[:-CHECKSUM_LENGTH], payload[-CHECKSUM_LENGTH:]
    if _checksum(version, data) != checksum:
        raise ValueError("Invalid c32check checksum")
    return version, data


def c32_address(version: int, hash_bytes: bytes) -> str:
    if len(hash_bytes) != HASH160_LENGTH:
        raise ValueError(f"Address hash must be {HASH160_LENGTH} bytes")
    return ADDRESS_PREFIX + c32check_encode(version, hash_bytes)


def parse_address(address: str) -> tuple[int, bytes]:
    """Return (version, hash160) of a Stacks address. Raises ValueError if malformed."""
    if len(address) <= 5 or address[0] != ADDRESS_PREFIX:
        raise ValueError(f"Invalid Stacks address: {address}")
    version, hash_bytes = c32check_decode(address[1:])
    if len(hash_bytes) != HASH160_LENGTH:
        raise ValueError(f"Invalid Stacks address: {address}")
    return version, hash_bytes


def is_valid_address(address: str, version: int | None = None) -> bool:
    """Check the address grammar and, when given, the expected version byte."""
    try:
        parsed_version, _ = parse_address(address)
    except ValueError:
        return False
    return version is None or parsed_version == version


def address_from_public_key(public_key: bytes, version: int) -> str:
    """Single-signature address of a public key, hashed exactly as encoded."""
    return c32_address(version, hash160(public_key))
