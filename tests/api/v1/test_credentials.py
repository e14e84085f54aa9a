from app.utils.addresses import to_checksum_address
from app.utils.hashing import record_hash
from tests.conftest import ADMIN_ADDRESS, ADMIN_KEY, OTHER_ADDRESS, OTHER_KEY

BOB = to_checksum_address("0x" + "b" * 40)


def issue(client, key=ADMIN_KEY, data="Degree: CS", **extra):
    body = {
        "studentAddress": BOB,
        "data": data,
        "metadata": {"university": "UPC"},
        "privateKey": key,
    }
    body.update(extra)
    return client.post("/api/v1/credentials/issue", json=body)


def verify(client, candidate, index=0):
    return client.post(
        "/api/v1/credentials/verify",
        json={"studentAddress": BOB, "index": index, "recordHash": candidate},
    )


def test_issue_verify_revoke_scenario(client):
    response = issue(client)
    assert response.status_code == 201
    issued = response.json()
    assert issued["index"] == 0
    assert issued["recordHash"] == record_hash("Degree: CS")
    assert issued["contentHash"].startswith("Qm")

    assert verify(client, record_hash("Degree: CS")).json()["verified"] is True

    response = client.put(
        "/api/v1/credentials/revoke",
        json={"studentAddress": BOB, "index": 0, "privateKey": ADMIN_KEY},
    )
    assert response.status_code == 200

    assert verify(client, record_hash("Degree: CS")).json()["verified"] is False

    response = client.put(
        "/api/v1/credentials/revoke",
        json={"studentAddress": BOB, "index": 0, "privateKey": ADMIN_KEY},
    )
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "ALREADY_REVOKED"


def test_issue_missing_fields(client):
    response = client.post(
        "/api/v1/credentials/issue", json={"studentAddress": BOB, "privateKey": ADMIN_KEY}
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Missing required fields: data"


def test_issue_by_non_admin(client):
    response = issue(client, key=OTHER_KEY)

    assert response.status_code == 403
    assert client.get(f"/api/v1/credentials/{BOB}").json()["count"] == 0


def test_verify_with_statement_text(client):
    issue(client)

    assert verify(client, "Degree: CS").json()["verified"] is True
    assert verify(client, "Degree: Art").json()["verified"] is False
    assert verify(client, "Degree: CS", index=4).json()["verified"] is False


def test_list_and_get_credentials(client):
    issue(client)
    issue(client, data="Master: AI")

    listing = client.get(f"/api/v1/credentials/{BOB}").json()
    assert listing["studentAddress"] == BOB
    assert listing["count"] == 2
    assert [c["index"] for c in listing["credentials"]] == [0, 1]

    credential = client.get(f"/api/v1/credentials/{BOB}/1").json()["credential"]
    assert credential["recordHash"] == record_hash("Master: AI")
    assert credential["issuer"] == ADMIN_ADDRESS
    assert credential["valid"] is True


def test_get_missing_credential(client):
    response = client.get(f"/api/v1/credentials/{BOB}/0")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_update_credential(client):
    issue(client)

    response = client.put(
        "/api/v1/credentials/update",
        json={
            "studentAddress": BOB,
            "index": 0,
            "data": "Degree: Computer Science",
            "privateKey": ADMIN_KEY,
        },
    )

    assert response.status_code == 200
    assert response.json()["recordHash"] == record_hash("Degree: Computer Science")
    assert verify(client, "Degree: Computer Science").json()["verified"] is True


def test_payload_check(client):
    issue(client)

    body = client.get(f"/api/v1/credentials/{BOB}/0/payload").json()

    assert body["intact"] is True
    assert body["verified"] is True
    assert body["payload"]["data"] == "Degree: CS"
    assert body["payload"]["metadata"] == {"university": "UPC"}
    assert body["computedRecordHash"] == body["credential"]["recordHash"]


def test_issue_with_attachment(client):
    upload = client.post(
        "/api/v1/ipfs/upload-file",
        files={"file": ("diploma.pdf", b"%PDF-1.4 diploma", "application/pdf")},
    ).json()

    response = issue(
        client,
        pdfDocument={
            "contentHash": upload["hash"],
            "filename": upload["filename"],
            "filesize": upload["size"],
            "mimeType": upload["mimetype"],
        },
    )

    assert response.status_code == 201
    payload = client.get(f"/api/v1/credentials/{BOB}/0/payload").json()["payload"]
    assert payload["pdfDocument"]["contentHash"] == upload["hash"]


def test_add_admin(client):
    response = client.post(
        "/api/v1/credentials/admins",
        json={"account": OTHER_ADDRESS, "privateKey": ADMIN_KEY},
    )
    assert response.status_code == 201
    assert len(response.json()["transactions"]) == 2

    assert issue(client, key=OTHER_KEY).status_code == 201
