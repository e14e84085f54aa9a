import json
from collections.abc import Iterator

import httpx
import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.ledger.chain import Ledger, build_ledger
from app.main import create_app
from app.services.factory import ServiceContainer, build_services
from app.utils.cid import fingerprint_cid

# Well-known local development accounts (hardhat/anvil default mnemonic)
ADMIN_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
ADMIN_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
OTHER_KEY = "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"
OTHER_ADDRESS = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
STUDENT_KEY = "0x5de4111afa1a4b94908f83103eb1f1706367c2e68ca870fc3fb9a804cdab365a"
STUDENT_ADDRESS = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"

IPFS_API_URL = "http://ipfs.test:5001"
GATEWAYS = ["https://gw-one.test/ipfs/", "https://gw-two.test/ipfs/"]


class FakeIpfsNetwork:
    """
    Stand-in for an IPFS node and public gateways behind httpx.MockTransport.

    `node_up` toggles the node, `gateway_content` maps gateway host to the
    content it serves, `gateway_timeouts` lists hosts that hang.
    """

    def __init__(self):
        self.node_up = True
        self.node_files: dict[str, bytes] = {}
        self.gateway_content: dict[str, dict[str, bytes]] = {}
        self.gateway_timeouts: set[str] = set()
        self.requests: list[str] = []

    @staticmethod
    def _multipart_file(request: httpx.Request) -> bytes:
        boundary = request.headers["content-type"].split("boundary=")[1].encode()
        body = request.content
        part = body.split(b"\r\n\r\n", 1)[1]
        return part.rsplit(b"\r\n--" + boundary + b"--", 1)[0]

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = request.url
        self.requests.append(f"{url.host}{url.path}")

        if f"{url.scheme}://{url.host}:{url.port}" == IPFS_API_URL:
            if not self.node_up:
                raise httpx.ConnectError("Connection refused", request=request)
            if url.path == "/api/v0/version":
                return httpx.Response(200, json={"Version": "0.29.0"})
            if url.path == "/api/v0/add":
                content = self._multipart_file(request)
                cid = fingerprint_cid(content)
                self.node_files[cid] = content
                return httpx.Response(200, json={"Hash": cid, "Size": str(len(content))})
            if url.path == "/api/v0/cat":
                cid = url.params["arg"]
                if cid in self.node_files:
                    return httpx.Response(200, content=self.node_files[cid])
                return httpx.Response(500, text="block not found")
            return httpx.Response(404)

        if url.host in self.gateway_timeouts:
            raise httpx.ReadTimeout("Gateway timed out", request=request)
        cid = url.path.rsplit("/", 1)[-1]
        content = self.gateway_content.get(url.host, {}).get(cid)
        if content is None:
            return httpx.Response(404, text="not found")
        return httpx.Response(200, content=content)

    def serve_from_gateway(self, host: str, cid: str, payload) -> None:
        content = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
        self.gateway_content.setdefault(host, {})[cid] = content


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        ADMIN_PRIVATE_KEY=ADMIN_KEY,
        IPFS_API_URL=IPFS_API_URL,
        IPFS_GATEWAYS=GATEWAYS,
        PINATA_JWT="",
        MAX_UPLOAD_SIZE=1024,
    )


@pytest.fixture
def ipfs_network() -> FakeIpfsNetwork:
    return FakeIpfsNetwork()


@pytest.fixture
def transport(ipfs_network) -> httpx.MockTransport:
    return httpx.MockTransport(ipfs_network.handler)


@pytest.fixture
def ledger(settings) -> Ledger:
    return build_ledger(settings)


@pytest.fixture
def services(settings, ledger, transport) -> ServiceContainer:
    return build_services(settings, ledger=ledger, transport=transport)


@pytest.fixture
def client(settings, services) -> Iterator[TestClient]:
    app = create_app(settings=settings, services=services)
    with TestClient(app) as test_client:
        yield test_client
