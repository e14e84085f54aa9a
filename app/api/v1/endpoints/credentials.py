from fastapi import APIRouter, status

from app.schemas.credential import (
    AdminAdd,
    AdminResponse,
    Credential,
    CredentialIssue,
    CredentialIssued,
    CredentialListResponse,
    CredentialResponse,
    CredentialRevoke,
    CredentialTransaction,
    CredentialUpdate,
    CredentialVerify,
    PayloadVerificationResponse,
    StoredPayload,
    VerificationResponse,
)
from app.utils.deps import Credentials
from app.utils.validation import require_fields

router = APIRouter()


def _payload(body: CredentialIssue) -> StoredPayload:
    return StoredPayload(
        data=body.data, metadata=body.metadata, pdf_document=body.pdf_document
    )


@router.post(
    "/issue", response_model=CredentialIssued, status_code=status.HTTP_201_CREATED
)
async def issue_credential(body: CredentialIssue, credentials: Credentials):
    """
    Store the credential payload on IPFS, then commit its hashes on-chain.
    """
    require_fields(body, "student_address", "data", "private_key")
    return await credentials.issue_credential(
        body.private_key, body.student_address, _payload(body)
    )


@router.put("/update", response_model=CredentialTransaction)
async def update_credential(body: CredentialUpdate, credentials: Credentials):
    require_fields(body, "student_address", "index", "data", "private_key")
    return await credentials.update_credential(
        body.private_key, body.student_address, body.index, _payload(body)
    )


@router.put("/revoke", response_model=CredentialTransaction)
async def revoke_credential(body: CredentialRevoke, credentials: Credentials):
    require_fields(body, "student_address", "index", "private_key")
    return await credentials.revoke_credential(
        body.private_key, body.student_address, body.index
    )


@router.post("/verify", response_model=VerificationResponse)
async def verify_credential(body: CredentialVerify, credentials: Credentials):
    """Check a record hash, or the statement text, against the ledger."""
    require_fields(body, "student_address", "index", "record_hash")
    return await credentials.verify_credential(
        body.student_address, body.index, body.record_hash
    )


@router.post("/admins", response_model=AdminResponse, status_code=status.HTTP_201_CREATED)
async def add_admin(body: AdminAdd, credentials: Credentials):
    require_fields(body, "account", "private_key")
    return await credentials.add_admin(body.private_key, body.account)


@router.get("/{student_address}", response_model=CredentialListResponse)
async def list_credentials(student_address: str, credentials: Credentials):
    result = await credentials.list_credentials(student_address)
    records = result["credentials"]
    return CredentialListResponse(
        student_address=result["student_address"],
        count=len(records),
        credentials=[Credential.from_model(r) for r in records],
    )


@router.get("/{student_address}/{index}", response_model=CredentialResponse)
async def get_credential(student_address: str, index: int, credentials: Credentials):
    record = await credentials.get_credential(student_address, index)
    return CredentialResponse(credential=Credential.from_model(record))


@router.get("/{student_address}/{index}/payload", response_model=PayloadVerificationResponse)
async def get_credential_payload(
    student_address: str, index: int, credentials: Credentials
):
    """Fetch the off-chain payload and check it against the on-chain hash."""
    result = await credentials.verify_stored_payload(student_address, index)
    return PayloadVerificationResponse(
        credential=Credential.from_model(result["credential"]),
        payload=result["payload"],
        computed_record_hash=result["computed_record_hash"],
        intact=result["intact"],
        verified=result["verified"],
        message=result["message"],
    )
