"""Keccak-256 helpers for record fingerprints."""

import re

from Crypto.Hash import keccak

from app.exceptions import InvalidFormatError

BYTES32_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


def keccak256(data: bytes) -> bytes:
    return keccak.new(digest_bits=256, data=data).digest()


def keccak256_hex(data: bytes) -> str:
    return "0x" + keccak256(data).hex()


def record_hash(data: str) -> str:
    """
    Fingerprint of a credential statement.

    Only the payload's ``data`` string is hashed, metadata and attachments
    are not part of the commitment.
    """
    return keccak256_hex(data.encode("utf-8"))


def is_bytes32(value: str) -> bool:
    return isinstance(value, str) and bool(BYTES32_RE.match(value))


def normalize_bytes32(value: str) -> str:
    """Lowercase a 0x-prefixed 32-byte hex string so comparisons are exact."""
    if not is_bytes32(value):
        raise InvalidFormatError(
            "Record hash must be a 0x-prefixed 32-byte hex string",
            field="recordHash",
        )
    return value.lower()


def coerce_record_hash(value: str) -> str:
    """
    Accept either a bytes32 hash or the raw statement text.

    Verification forms let users paste the statement itself, anything that
    is not already a bytes32 string is hashed.
    """
    if is_bytes32(value):
        return value.lower()
    return record_hash(value)
