from dataclasses import dataclass


@dataclass
class CredentialModel:
    """One entry of a student's append-only record ledger."""

    student: str
    index: int
    record_hash: str
    content_hash: str
    issuer: str
    timestamp: int
    valid: bool = True
