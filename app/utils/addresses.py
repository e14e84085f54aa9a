"""Account address validation and EIP-55 checksum normalisation."""

import re
from typing import Any

from app.exceptions import InvalidAddressError
from app.utils.hashing import keccak256

ADDRESS_RE = re.compile(r"^(0x)?[0-9a-fA-F]{40}$")
ZERO_ADDRESS = "0x" + "0" * 40


def to_checksum_address(address: str) -> str:
    """Return the EIP-55 mixed-case form of a 20-byte hex address."""
    hex_part = address.lower().removeprefix("0x")
    digest = keccak256(hex_part.encode("ascii")).hex()
    return "0x" + "".join(
        char.upper() if int(digest[i], 16) >= 8 else char
        for i, char in enumerate(hex_part)
    )


def is_address(value: Any) -> bool:
    """
    True for a well formed address.

    All-lowercase and all-uppercase forms are accepted as is, mixed case
    must carry a correct checksum.
    """
    if not isinstance(value, str) or not ADDRESS_RE.match(value):
        return False
    hex_part = value.removeprefix("0x")
    if hex_part == hex_part.lower() or hex_part == hex_part.upper():
        return True
    return to_checksum_address(value)[2:] == hex_part


def normalize_address(value: Any, field: str = "address") -> str:
    """Validate and return the checksummed address, or raise InvalidAddressError."""
    if not is_address(value):
        raise InvalidAddressError(value, field=field)
    return to_checksum_address(value)
