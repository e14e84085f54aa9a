from typing import ClassVar

from app.exceptions import AlreadyRevokedError, NotFoundError, ValidationError
from app.ledger.contracts.base import AdminControlled, CallContext
from app.models.credential_model import CredentialModel
from app.utils.addresses import is_address, to_checksum_address
from app.utils.hashing import is_bytes32, normalize_bytes32


class AcademicRecords(AdminControlled):
    """
    Append-only ledger of credentials per student address.

    Independent of the StudentDirectory: credentials can be issued to any
    well formed address.
    """

    NAME = "AcademicRecords"
    TRANSACTIONS: ClassVar[frozenset[str]] = AdminControlled.TRANSACTIONS | {
        "issue",
        "update",
        "revoke",
    }
    VIEWS: ClassVar[frozenset[str]] = AdminControlled.VIEWS | {
        "get",
        "count",
        "verify",
    }

    def __init__(self, address: str, deployer: str | None = None):
        super().__init__(address, deployer)
        self._records: dict[str, list[CredentialModel]] = {}

    @staticmethod
    def _require_content_hash(content_hash: str) -> None:
        if not isinstance(content_hash, str) or not content_hash.strip():
            raise ValidationError("contentHash must not be empty", field="contentHash")

    def _record(self, student: str, index: int) -> CredentialModel:
        records = self._records.get(student, [])
        if not 0 <= index < len(records):
            raise NotFoundError(
                f"Credential {index} not found for {student}",
                resource_type="credential",
            )
        return records[index]

    def issue(
        self, ctx: CallContext, student: str, record_hash: str, content_hash: str
    ) -> int:
        self._only_admin(ctx)
        student = self._checked(student, "studentAddress")
        record_hash = normalize_bytes32(record_hash)
        self._require_content_hash(content_hash)

        records = self._records.setdefault(student, [])
        index = len(records)
        records.append(
            CredentialModel(
                student=student,
                index=index,
                record_hash=record_hash,
                content_hash=content_hash,
                issuer=ctx.sender,
                timestamp=ctx.timestamp,
            )
        )
        ctx.emit(
            "CredentialIssued",
            student=student,
            index=index,
            issuer=ctx.sender,
            recordHash=record_hash,
            contentHash=content_hash,
            timestamp=ctx.timestamp,
        )
        return index

    def update(
        self,
        ctx: CallContext,
        student: str,
        index: int,
        record_hash: str,
        content_hash: str,
    ) -> None:
        """Replace both hashes in place. Validity, issuer and timestamp are kept."""
        self._only_admin(ctx)
        student = self._checked(student, "studentAddress")
        record = self._record(student, index)
        record_hash = normalize_bytes32(record_hash)
        self._require_content_hash(content_hash)

        record.record_hash = record_hash
        record.content_hash = content_hash
        ctx.emit(
            "CredentialUpdated",
            student=student,
            index=index,
            updater=ctx.sender,
            recordHash=record_hash,
            contentHash=content_hash,
            timestamp=ctx.timestamp,
        )

    def revoke(self, ctx: CallContext, student: str, index: int) -> None:
        self._only_admin(ctx)
        student = self._checked(student, "studentAddress")
        record = self._record(student, index)
        if not record.valid:
            raise AlreadyRevokedError(student, index)

        record.valid = False
        ctx.emit(
            "CredentialRevoked",
            student=student,
            index=index,
            revoker=ctx.sender,
            timestamp=ctx.timestamp,
        )

    def get(self, student: str, index: int) -> CredentialModel:
        student = self._checked(student, "studentAddress")
        return CredentialModel(**vars(self._record(student, index)))

    def count(self, student: str) -> int:
        student = self._checked(student, "studentAddress")
        return len(self._records.get(student, []))

    def verify(self, student: str, index: int, record_hash: str) -> bool:
        """True only for a valid credential whose stored hash matches exactly."""
        if not is_address(student) or not is_bytes32(record_hash):
            return False
        records = self._records.get(to_checksum_address(student), [])
        if not 0 <= index < len(records):
            return False
        record = records[index]
        return record.valid and record.record_hash == record_hash.lower()
