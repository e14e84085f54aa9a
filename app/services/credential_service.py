"""
Credential issuance, maintenance and verification.

Issuing is a two step flow that is not atomic: the payload is stored first,
then its hashes are committed to the ledger. If the ledger call fails the
stored payload is simply left behind, content addressing makes a retry
reuse the same entry.
"""

from typing import Any, Dict, List

from pydantic import ValidationError as PydanticValidationError

from app.exceptions import InvalidFormatError, NotFoundError, ValidationError
from app.ledger.chain import Ledger
from app.ledger.contracts.academic_records import AcademicRecords
from app.ledger.contracts.student_directory import StudentDirectory
from app.models.credential_model import CredentialModel
from app.schemas.credential import StoredPayload
from app.services.ipfs_store import ContentStore
from app.utils.addresses import normalize_address
from app.utils.hashing import coerce_record_hash, record_hash
from app.utils.logger import get_logger

logger = get_logger(__name__)

CONTRACT = AcademicRecords.NAME


def _check_index(index: int) -> int:
    if not isinstance(index, int) or isinstance(index, bool) or index < 0:
        raise ValidationError("index must be a non-negative integer", field="index")
    return index


class CredentialService:
    def __init__(self, ledger: Ledger, store: ContentStore):
        self.ledger = ledger
        self.store = store

    async def _store_payload(self, payload: StoredPayload) -> tuple[str, str]:
        """Store the payload, return (content_hash, record_hash)."""
        content_hash = await self.store.put(
            payload.model_dump(by_alias=True, exclude_none=True)
        )
        return content_hash, record_hash(payload.data)

    async def issue_credential(
        self, private_key: str, student_address: str, payload: StoredPayload
    ) -> Dict[str, Any]:
        student = normalize_address(student_address, field="studentAddress")
        content_hash, hash_ = await self._store_payload(payload)
        logger.info("Credential payload stored", student=student, content_hash=content_hash)

        receipt = await self.ledger.transact(
            CONTRACT, "issue", private_key, student, hash_, content_hash
        )
        index = receipt.return_value
        logger.info(
            "Credential issued",
            student=student,
            index=index,
            tx_hash=receipt.transaction_hash,
        )
        return {
            "student_address": student,
            "index": index,
            "record_hash": hash_,
            "content_hash": content_hash,
            "transaction_hash": receipt.transaction_hash,
            "block_number": receipt.block_number,
        }

    async def update_credential(
        self,
        private_key: str,
        student_address: str,
        index: int,
        payload: StoredPayload,
    ) -> Dict[str, Any]:
        student = normalize_address(student_address, field="studentAddress")
        index = _check_index(index)
        # Fail before storing anything when the credential doesn't exist
        await self.ledger.call(CONTRACT, "get", student, index)

        content_hash, hash_ = await self._store_payload(payload)
        receipt = await self.ledger.transact(
            CONTRACT, "update", private_key, student, index, hash_, content_hash
        )
        logger.info("Credential updated", student=student, index=index)
        return {
            "student_address": student,
            "index": index,
            "record_hash": hash_,
            "content_hash": content_hash,
            "transaction_hash": receipt.transaction_hash,
            "block_number": receipt.block_number,
        }

    async def revoke_credential(
        self, private_key: str, student_address: str, index: int
    ) -> Dict[str, Any]:
        student = normalize_address(student_address, field="studentAddress")
        index = _check_index(index)
        receipt = await self.ledger.transact(CONTRACT, "revoke", private_key, student, index)
        logger.info("Credential revoked", student=student, index=index)
        return {
            "student_address": student,
            "index": index,
            "transaction_hash": receipt.transaction_hash,
            "block_number": receipt.block_number,
        }

    async def get_credential(self, student_address: str, index: int) -> CredentialModel:
        student = normalize_address(student_address, field="studentAddress")
        return await self.ledger.call(CONTRACT, "get", student, _check_index(index))

    async def get_credential_count(self, student_address: str) -> int:
        student = normalize_address(student_address, field="studentAddress")
        return await self.ledger.call(CONTRACT, "count", student)

    async def list_credentials(self, student_address: str) -> Dict[str, Any]:
        """Every credential ever issued to the student, revoked ones included."""
        student = normalize_address(student_address, field="studentAddress")
        count = await self.ledger.call(CONTRACT, "count", student)
        records: List[CredentialModel] = [
            await self.ledger.call(CONTRACT, "get", student, i) for i in range(count)
        ]
        return {"student_address": student, "credentials": records}

    async def verify_credential(
        self, student_address: str, index: int, candidate: str
    ) -> Dict[str, Any]:
        """
        Check a candidate against the ledger.

        `candidate` may be the bytes32 record hash or the statement itself.
        """
        student = normalize_address(student_address, field="studentAddress")
        index = _check_index(index)
        hash_ = coerce_record_hash(candidate)
        verified = await self.ledger.call(CONTRACT, "verify", student, index, hash_)
        logger.info("Credential verified", student=student, index=index, verified=verified)
        return {
            "student_address": student,
            "index": index,
            "record_hash": hash_,
            "verified": verified,
        }

    async def verify_stored_payload(
        self, student_address: str, index: int
    ) -> Dict[str, Any]:
        """
        Re-derive the record hash from the off-chain payload.

        Detects payloads that were altered or swapped after the on-chain
        commitment was made.
        """
        credential = await self.get_credential(student_address, index)
        try:
            raw = await self.store.get(credential.content_hash)
        except (NotFoundError, InvalidFormatError) as e:
            logger.warning(
                "Stored payload unavailable",
                content_hash=credential.content_hash,
                error=e.message,
            )
            return {
                "credential": credential,
                "payload": None,
                "computed_record_hash": None,
                "intact": False,
                "verified": False,
                "message": f"Stored payload unavailable: {e.message}",
            }

        try:
            payload = StoredPayload.model_validate(raw)
        except PydanticValidationError:
            return {
                "credential": credential,
                "payload": None,
                "computed_record_hash": None,
                "intact": False,
                "verified": False,
                "message": "Stored content is not a credential payload",
            }

        computed = record_hash(payload.data)
        intact = computed == credential.record_hash
        verified = intact and credential.valid
        if not intact:
            message = "Stored payload does not match the on-chain record hash"
        elif not credential.valid:
            message = "Credential has been revoked"
        else:
            message = "Credential is valid and its payload is intact"
        return {
            "credential": credential,
            "payload": payload,
            "computed_record_hash": computed,
            "intact": intact,
            "verified": verified,
            "message": message,
        }

    async def add_admin(self, private_key: str, account: str) -> Dict[str, Any]:
        """Grant the admin role on both contracts."""
        account = normalize_address(account, field="account")
        transactions = []
        for contract in (StudentDirectory.NAME, AcademicRecords.NAME):
            receipt = await self.ledger.transact(contract, "add_admin", private_key, account)
            transactions.append(receipt.transaction_hash)
        logger.info("Admin added", account=account)
        return {"account": account, "transactions": transactions}
