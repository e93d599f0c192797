import hashlib

import structlog
from eth_keys import keys
from eth_keys.constants import SECPK1_N
from eth_keys.exceptions import BadSignature
from eth_keys.exceptions import ValidationError as KeyValidationError

from aibtcauth.core.core import Service
from aibtcauth.core.modules.signature.c32 import address_from_public_key, is_valid_address
from aibtcauth.core.modules.signature.clarity import encode_structured_data, serialize_string_ascii, signing_domain
from aibtcauth.core.modules.signature.models import ChallengeMode, VerifiedSigner
from aibtcauth.errors import AddressDerivationError, ConfigurationError, MalformedInputError, SignatureInvalidError
from aibtcauth.utils import strip_hex_prefix

logger = structlog.get_logger(__name__)

MESSAGE_PREFIX = b"\x17Stacks Signed Message:\n"
SIGNATURE_LENGTH = 65
COMPRESSED_PUBLIC_KEY_LENGTH = 33
UNCOMPRESSED_PUBLIC_KEY_LENGTH = 65


def encode_varint(value: int) -> bytes:
    """Bitcoin-style variable length integer."""
    if value < 0xFD:
        return bytes([value])
    if value <= 0xFFFF:
        return b"\xfd" + value.to_bytes(2, "little")
    if value <= 0xFFFFFFFF:
        return b"\xfe" + value.to_bytes(4, "little")
    return b"\xff" + value.to_bytes(8, "little")


def hash_message(message: str) -> bytes:
    """Digest a wallet signs for a plain Stacks signed message."""
    data = message.encode("utf-8")
    return hashlib.sha256(MESSAGE_PREFIX + encode_varint(len(data)) + data).digest()


def hash_structured_message(message: str, domain_name: str, domain_version: str, chain_id: int) -> bytes:
    """Digest a wallet signs for a SIP-018 string-ascii message under a signing domain."""
    domain = signing_domain(domain_name, domain_version, chain_id)
    return hashlib.sha256(encode_structured_data(serialize_string_ascii(message), domain)).digest()


def parse_signature(signature: str) -> keys.Signature:
    """Parse a hex RSV signature (r, s, then the recovery id)."""
    try:
        raw = bytes.fromhex(strip_hex_prefix(signature))
    except ValueError:
        raise MalformedInputError("Signature must be hex encoded") from None
    if len(raw) != SIGNATURE_LENGTH:
        raise MalformedInputError(f"Signature must be {SIGNATURE_LENGTH} bytes")
    try:
        parsed = keys.Signature(signature_bytes=raw)
    except (KeyValidationError, BadSignature, ValueError):
        raise SignatureInvalidError from None
    # Only the low-s form is accepted, so each signature has a single encoding
    if parsed.s > SECPK1_N // 2:
        raise SignatureInvalidError
    return parsed


def parse_public_key(public_key: str) -> tuple[bytes, keys.PublicKey]:
    """Parse a hex SEC1 public key. Returns the raw bytes and the curve point."""
    try:
        raw = bytes.fromhex(strip_hex_prefix(public_key))
        if len(raw) == COMPRESSED_PUBLIC_KEY_LENGTH:
            return raw, keys.PublicKey.from_compressed_bytes(raw)
        if len(raw) == UNCOMPRESSED_PUBLIC_KEY_LENGTH and raw[0] == 0x04:
            return raw, keys.PublicKey(raw[1:])
    except (KeyValidationError, ValueError):
        pass
    raise MalformedInputError("Public key must be a hex encoded compressed or uncompressed secp256k1 key")


class SignatureService(Service):
    """Verifies signed challenges and derives the signer's address. No side effects."""

    def challenge_digest(self) -> bytes:
        """Digest of the configured challenge, as the wallet signed it."""
        if self.config.challenge_mode == ChallengeMode.STRUCTURED:
            try:
                return hash_structured_message(
                    self.config.challenge_message,
                    self.config.domain_name,
                    self.config.domain_version,
                    self.config.network.chain_id,
                )
            except UnicodeEncodeError as e:
                raise ConfigurationError("Structured challenge message and signing domain must be ASCII") from e
        return hash_message(self.config.challenge_message)

    def verify_and_derive_address(self, signature: str, public_key: str) -> VerifiedSigner:
        """Check that signature is the supplied key's signature over the challenge.

        The key is recovered from the signature and must match the supplied one,
        so any tampering ends in SignatureInvalidError rather than in another address.
        """
        parsed_signature = parse_signature(signature)
        public_key_bytes, supplied_key = parse_public_key(public_key)
        digest = self.challenge_digest()

        try:
            recovered_key = parsed_signature.recover_public_key_from_msg_hash(digest)
        except (BadSignature, KeyValidationError, ValueError):
            logger.info("signature_rejected", reason="recovery_failed")
            raise SignatureInvalidError from None

        if recovered_key.to_bytes() != supplied_key.to_bytes():
            logger.info("signature_rejected", reason="public_key_mismatch")
            raise SignatureInvalidError

        version = self.config.network.address_version
        address = address_from_public_key(public_key_bytes, version)
        if not is_valid_address(address, version):
            raise AddressDerivationError(f"Failed to derive a valid address from public key {public_key}")

        return VerifiedSigner(address=address, public_key=public_key_bytes.hex())
