import asyncio
import time

import httpx
import pytest

from app.exceptions import InvalidFormatError, NotFoundError, ValidationError
from app.services.ipfs_backends import FingerprintBackend
from app.services.ipfs_store import ContentStore, build_content_store, serialize_payload
from app.utils.cid import fingerprint_cid

PAYLOAD = {"data": "Degree: CS", "metadata": {"university": "UPC"}}
UNKNOWN_CID = fingerprint_cid(b"nobody stored this")


@pytest.fixture
def store(settings, transport):
    return build_content_store(settings, transport=transport)


async def test_put_then_get_round_trip(store, ipfs_network):
    cid = await store.put(PAYLOAD)

    assert cid == fingerprint_cid(serialize_payload(PAYLOAD))
    assert cid in ipfs_network.node_files
    assert await store.get(cid) == PAYLOAD


async def test_put_is_idempotent(store):
    first = await store.put({"b": 1, "a": 2})
    second = await store.put({"a": 2, "b": 1})

    assert first == second


async def test_get_reads_node_when_not_cached(settings, transport, ipfs_network):
    writer = build_content_store(settings, transport=transport)
    cid = await writer.put(PAYLOAD)

    reader = build_content_store(settings, transport=transport)

    assert await reader.get(cid) == PAYLOAD
    assert "ipfs.test/api/v0/cat" in ipfs_network.requests
    assert reader.cache_size == 1


async def test_put_falls_back_to_fingerprint_when_node_down(store, ipfs_network):
    ipfs_network.node_up = False

    cid = await store.put(PAYLOAD)

    assert cid.startswith("Qm")
    assert ipfs_network.node_files == {}
    # Degraded writes are still readable from this process
    assert await store.get(cid) == PAYLOAD


async def test_gateways_tried_in_order_after_timeout(store, ipfs_network):
    ipfs_network.node_up = False
    ipfs_network.gateway_timeouts.add("gw-one.test")
    ipfs_network.serve_from_gateway("gw-two.test", UNKNOWN_CID, PAYLOAD)

    assert await store.get(UNKNOWN_CID) == PAYLOAD

    gateway_requests = [r for r in ipfs_network.requests if r.startswith("gw-")]
    assert gateway_requests == [
        f"gw-one.test/ipfs/{UNKNOWN_CID}",
        f"gw-two.test/ipfs/{UNKNOWN_CID}",
    ]


async def test_first_gateway_hit_stops_the_search(store, ipfs_network):
    ipfs_network.serve_from_gateway("gw-one.test", UNKNOWN_CID, PAYLOAD)
    ipfs_network.serve_from_gateway("gw-two.test", UNKNOWN_CID, {"data": "other"})

    assert await store.get(UNKNOWN_CID) == PAYLOAD
    assert not any(r.startswith("gw-two") for r in ipfs_network.requests)


async def test_get_unknown_cid_is_not_found(store):
    with pytest.raises(NotFoundError):
        await store.get(UNKNOWN_CID)


async def test_get_malformed_cid_is_rejected_before_any_lookup(store, ipfs_network):
    with pytest.raises(InvalidFormatError):
        await store.get("not-a-cid")
    assert ipfs_network.requests == []


async def test_get_non_json_content(store, ipfs_network):
    ipfs_network.serve_from_gateway("gw-one.test", UNKNOWN_CID, b"%PDF-1.4 binary")

    with pytest.raises(InvalidFormatError):
        await store.get(UNKNOWN_CID)


async def test_put_rejects_unserializable_payload(store):
    with pytest.raises(ValidationError):
        await store.put({"data": object()})


async def test_put_file_descriptor(store):
    descriptor = await store.put_file(b"%PDF-1.4 diploma", "diploma.pdf", "application/pdf")

    assert descriptor == {
        "contentHash": fingerprint_cid(b"%PDF-1.4 diploma"),
        "filename": "diploma.pdf",
        "filesize": 16,
        "mimeType": "application/pdf",
    }
    stored = await store.get_content(descriptor["contentHash"])
    assert stored.mime_type == "application/pdf"
    assert stored.filename == "diploma.pdf"


@pytest.mark.parametrize(
    "content, mime_type",
    [
        (b"plain text", "text/plain"),
        (b"", "application/pdf"),
        (b"x" * 1025, "application/pdf"),
    ],
)
async def test_put_file_limits(store, content, mime_type):
    with pytest.raises(ValidationError):
        await store.put_file(content, "upload.bin", mime_type)


async def test_status(store, ipfs_network):
    status = await store.status()
    assert status["primary"] == "ipfs"
    assert status["primaryAvailable"] is True
    assert status["backends"] == ["ipfs", "fingerprint"]

    ipfs_network.node_up = False
    assert (await store.status())["primaryAvailable"] is False


async def test_stalled_gateway_is_cut_off_at_the_deadline():
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "gw-one.test":
            # Slow enough to pass per-phase timeouts, too slow for the deadline
            await asyncio.sleep(5)
            return httpx.Response(200, content=b"late")
        return httpx.Response(200, json=PAYLOAD)

    store = ContentStore(
        backends=[FingerprintBackend()],
        gateways=["https://gw-one.test/ipfs/", "https://gw-two.test/ipfs/"],
        gateway_timeout=0.05,
        transport=httpx.MockTransport(handler),
    )

    started = time.monotonic()
    assert await store.get(UNKNOWN_CID) == PAYLOAD
    assert time.monotonic() - started < 2
