import pytest

from app.exceptions import (
    AuthorizationError,
    InvalidAddressError,
    NotFoundError,
    ValidationError,
)
from app.schemas.credential import PdfDocument, StoredPayload
from app.utils.hashing import record_hash
from tests.conftest import ADMIN_ADDRESS, ADMIN_KEY, OTHER_ADDRESS, OTHER_KEY, STUDENT_ADDRESS

PAYLOAD = StoredPayload(data="Degree: CS", metadata={"university": "UPC", "year": 2024})


@pytest.fixture
def credentials(services):
    return services.credentials


async def test_issue_stores_payload_then_commits_hashes(credentials, services, ipfs_network):
    result = await credentials.issue_credential(ADMIN_KEY, STUDENT_ADDRESS, PAYLOAD)

    assert result["index"] == 0
    assert result["record_hash"] == record_hash("Degree: CS")
    assert result["content_hash"] in ipfs_network.node_files
    stored = await services.store.get(result["content_hash"])
    assert stored == {"data": "Degree: CS", "metadata": {"university": "UPC", "year": 2024}}


async def test_issue_keeps_attachment_in_payload(credentials, services):
    document = await services.store.put_file(b"%PDF-1.4", "diploma.pdf", "application/pdf")
    payload = StoredPayload(
        data="Degree: CS", pdf_document=PdfDocument.model_validate(document)
    )

    result = await credentials.issue_credential(ADMIN_KEY, STUDENT_ADDRESS, payload)

    stored = await services.store.get(result["content_hash"])
    assert stored["pdfDocument"]["contentHash"] == document["contentHash"]
    # Attachments are not part of the on-chain commitment
    assert result["record_hash"] == record_hash("Degree: CS")


async def test_issue_by_non_admin_leaves_no_credential(credentials):
    with pytest.raises(AuthorizationError):
        await credentials.issue_credential(OTHER_KEY, STUDENT_ADDRESS, PAYLOAD)
    assert await credentials.get_credential_count(STUDENT_ADDRESS) == 0


async def test_issue_rejects_malformed_address_before_storing(credentials, ipfs_network):
    with pytest.raises(InvalidAddressError):
        await credentials.issue_credential(ADMIN_KEY, "0x123", PAYLOAD)
    assert ipfs_network.node_files == {}


async def test_verify_with_hash_or_statement(credentials):
    await credentials.issue_credential(ADMIN_KEY, STUDENT_ADDRESS, PAYLOAD)

    by_hash = await credentials.verify_credential(
        STUDENT_ADDRESS, 0, record_hash("Degree: CS")
    )
    by_text = await credentials.verify_credential(STUDENT_ADDRESS, 0, "Degree: CS")
    wrong = await credentials.verify_credential(STUDENT_ADDRESS, 0, "Degree: Art")

    assert by_hash["verified"] is True
    assert by_text["verified"] is True
    assert wrong["verified"] is False


async def test_revoke_then_verify(credentials):
    await credentials.issue_credential(ADMIN_KEY, STUDENT_ADDRESS, PAYLOAD)
    await credentials.revoke_credential(ADMIN_KEY, STUDENT_ADDRESS, 0)

    result = await credentials.verify_credential(STUDENT_ADDRESS, 0, "Degree: CS")

    assert result["verified"] is False
    listing = await credentials.list_credentials(STUDENT_ADDRESS)
    assert [c.valid for c in listing["credentials"]] == [False]


async def test_update_missing_credential_stores_nothing(credentials, ipfs_network):
    with pytest.raises(NotFoundError):
        await credentials.update_credential(ADMIN_KEY, STUDENT_ADDRESS, 0, PAYLOAD)
    assert ipfs_network.node_files == {}


async def test_update_replaces_payload(credentials, services):
    issued = await credentials.issue_credential(ADMIN_KEY, STUDENT_ADDRESS, PAYLOAD)
    corrected = StoredPayload(data="Degree: Computer Science")

    result = await credentials.update_credential(ADMIN_KEY, STUDENT_ADDRESS, 0, corrected)

    record = await credentials.get_credential(STUDENT_ADDRESS, 0)
    assert record.content_hash == result["content_hash"] != issued["content_hash"]
    assert record.record_hash == record_hash("Degree: Computer Science")


async def test_negative_index_is_rejected(credentials):
    with pytest.raises(ValidationError):
        await credentials.get_credential(STUDENT_ADDRESS, -1)


async def test_stored_payload_intact(credentials):
    await credentials.issue_credential(ADMIN_KEY, STUDENT_ADDRESS, PAYLOAD)

    result = await credentials.verify_stored_payload(STUDENT_ADDRESS, 0)

    assert result["intact"] is True
    assert result["verified"] is True
    assert result["payload"].data == "Degree: CS"


async def test_stored_payload_tampered(credentials, services, ledger):
    await credentials.issue_credential(ADMIN_KEY, STUDENT_ADDRESS, PAYLOAD)
    forged = await services.store.put({"data": "Degree: Medicine"})
    # Point the credential at different content while keeping the old hash
    await ledger.transact(
        "AcademicRecords",
        "update",
        ADMIN_KEY,
        STUDENT_ADDRESS,
        0,
        record_hash("Degree: CS"),
        forged,
    )

    result = await credentials.verify_stored_payload(STUDENT_ADDRESS, 0)

    assert result["intact"] is False
    assert result["verified"] is False
    assert result["computed_record_hash"] == record_hash("Degree: Medicine")


async def test_stored_payload_unavailable(credentials, ledger):
    await ledger.transact(
        "AcademicRecords",
        "issue",
        ADMIN_KEY,
        STUDENT_ADDRESS,
        record_hash("Degree: CS"),
        "QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG",
    )

    result = await credentials.verify_stored_payload(STUDENT_ADDRESS, 0)

    assert result["intact"] is False
    assert result["payload"] is None
    assert result["message"].startswith("Stored payload unavailable")


async def test_add_admin_grants_both_contracts(credentials, services):
    result = await credentials.add_admin(ADMIN_KEY, OTHER_ADDRESS)

    assert result["account"] == OTHER_ADDRESS
    assert len(result["transactions"]) == 2
    await services.students.register_student(
        OTHER_KEY, STUDENT_ADDRESS, "Ada", "Lovelace", "", "Mathematics"
    )
    await credentials.issue_credential(OTHER_KEY, STUDENT_ADDRESS, PAYLOAD)
    record = await credentials.get_credential(STUDENT_ADDRESS, 0)
    assert record.issuer == OTHER_ADDRESS
    assert record.issuer != ADMIN_ADDRESS
