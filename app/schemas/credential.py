from typing import Dict, List, Optional, Union

from pydantic import Field

from app.models.credential_model import CredentialModel
from app.schemas.base import CamelModel, SuccessResponse

MetadataValue = Union[str, int, float, bool, None]


class PdfDocument(CamelModel):
    content_hash: str
    filename: str
    filesize: int
    mime_type: str = "application/pdf"


class StoredPayload(CamelModel):
    """Full credential content kept off-chain. Only `data` is hashed on-chain."""

    data: str
    metadata: Dict[str, MetadataValue] = Field(default_factory=dict)
    pdf_document: Optional[PdfDocument] = None


class CredentialIssue(CamelModel):
    student_address: Optional[str] = None
    data: Optional[str] = None
    metadata: Dict[str, MetadataValue] = Field(default_factory=dict)
    pdf_document: Optional[PdfDocument] = None
    private_key: Optional[str] = Field(None, repr=False)


class CredentialUpdate(CredentialIssue):
    index: Optional[int] = None


class CredentialRevoke(CamelModel):
    student_address: Optional[str] = None
    index: Optional[int] = None
    private_key: Optional[str] = Field(None, repr=False)


class CredentialVerify(CamelModel):
    student_address: Optional[str] = None
    index: Optional[int] = None
    # Either the bytes32 record hash or the statement text itself
    record_hash: Optional[str] = None


class AdminAdd(CamelModel):
    account: Optional[str] = None
    private_key: Optional[str] = Field(None, repr=False)


class Credential(CamelModel):
    student_address: str
    index: int
    record_hash: str
    content_hash: str
    issuer: str
    timestamp: int
    valid: bool

    @classmethod
    def from_model(cls, model: CredentialModel) -> "Credential":
        return cls(
            student_address=model.student,
            index=model.index,
            record_hash=model.record_hash,
            content_hash=model.content_hash,
            issuer=model.issuer,
            timestamp=model.timestamp,
            valid=model.valid,
        )


class CredentialIssued(SuccessResponse):
    student_address: str
    index: int
    record_hash: str
    content_hash: str
    transaction_hash: str
    block_number: int


class CredentialTransaction(SuccessResponse):
    student_address: str
    index: int
    transaction_hash: str
    block_number: int
    record_hash: Optional[str] = None
    content_hash: Optional[str] = None


class CredentialResponse(SuccessResponse):
    credential: Credential


class CredentialListResponse(SuccessResponse):
    student_address: str
    count: int
    credentials: List[Credential]


class VerificationResponse(SuccessResponse):
    student_address: str
    index: int
    record_hash: str
    verified: bool


class PayloadVerificationResponse(SuccessResponse):
    credential: Credential
    payload: Optional[StoredPayload] = None
    computed_record_hash: Optional[str] = None
    # True when the stored payload still hashes to the on-chain commitment
    intact: bool
    verified: bool
    message: str


class AdminResponse(SuccessResponse):
    account: str
    transactions: List[str]
