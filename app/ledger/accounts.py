"""
Signing keys and the account identities derived from them.

Admin capability is proven by presenting a secp256k1 private key with a
mutating command. The ledger derives the account address the same way an
Ethereum node does: the last 20 bytes of keccak256 over the uncompressed
public key, without its 0x04 prefix.
"""

import re
from dataclasses import dataclass

from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from app.exceptions import InvalidSignerError
from app.utils.addresses import to_checksum_address
from app.utils.hashing import keccak256

PRIVATE_KEY_RE = re.compile(r"^(0x)?[0-9a-fA-F]{64}$")

# Order of the secp256k1 group, valid keys are in [1, n - 1]
SECP256K1_N = int(
    "FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141", 16
)


@dataclass(frozen=True)
class Account:
    address: str

    def __repr__(self) -> str:
        return f"Account({self.address})"


def account_from_key(private_key: str) -> Account:
    """
    Resolve a hex private key to its account.

    Raises:
        InvalidSignerError: If the key is malformed or outside the curve order
    """
    if not isinstance(private_key, str) or not PRIVATE_KEY_RE.match(private_key):
        raise InvalidSignerError("Private key must be a 32-byte hex string")

    secret = int(private_key.removeprefix("0x"), 16)
    if not 0 < secret < SECP256K1_N:
        raise InvalidSignerError("Private key is outside the secp256k1 range")

    key = ec.derive_private_key(secret, ec.SECP256K1())
    public_bytes = key.public_key().public_bytes(
        Encoding.X962, PublicFormat.UncompressedPoint
    )
    address = keccak256(public_bytes[1:])[-20:]
    return Account(address=to_checksum_address("0x" + address.hex()))
