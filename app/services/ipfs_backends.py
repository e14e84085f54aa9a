"""
Interchangeable content store backends.

The ContentStore picks the first available backend for each upload, the
local fingerprint backend is always available and acts as degraded mode.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

import httpx

from app.config import Settings
from app.utils.cid import fingerprint_cid
from app.utils.logger import get_logger

logger = get_logger(__name__)


class StoreBackend(ABC):
    """Abstract base class for content store backends."""

    name: str = "backend"
    # True when content written here can be fetched back from the network
    persistent: bool = True

    @abstractmethod
    async def is_available(self) -> bool:
        """Probe whether the backend can take uploads right now."""
        pass

    @abstractmethod
    async def add(self, content: bytes, filename: str) -> str:
        """Store content and return its content identifier."""
        pass

    async def cat(self, cid: str) -> Optional[bytes]:
        """Fetch content by identifier, None when this backend can't serve it."""
        return None


class IpfsHttpBackend(StoreBackend):
    """IPFS node reached through its HTTP RPC API (/api/v0)."""

    name = "ipfs"

    def __init__(
        self,
        api_url: str,
        timeout: float = 10.0,
        probe_timeout: float = 2.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.probe_timeout = probe_timeout
        self._transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    async def is_available(self) -> bool:
        try:
            async with self._client(self.probe_timeout) as client:
                response = await client.post(f"{self.api_url}/api/v0/version")
                return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning("IPFS node unreachable", api_url=self.api_url, error=str(e))
            return False

    async def add(self, content: bytes, filename: str) -> str:
        async with self._client(self.timeout) as client:
            response = await client.post(
                f"{self.api_url}/api/v0/add",
                params={"pin": "true", "cid-version": "0"},
                files={"file": (filename, content)},
            )
            response.raise_for_status()
            return response.json()["Hash"]

    async def cat(self, cid: str) -> Optional[bytes]:
        try:
            async with self._client(self.timeout) as client:
                response = await client.post(
                    f"{self.api_url}/api/v0/cat", params={"arg": cid}
                )
                if response.status_code == 200:
                    return response.content
                logger.info(
                    "IPFS node miss", cid=cid, status_code=response.status_code
                )
        except httpx.HTTPError as e:
            logger.warning("IPFS node cat failed", cid=cid, error=str(e))
        return None


class PinataBackend(StoreBackend):
    """Managed pinning provider, authenticated with a JWT."""

    name = "pinata"

    def __init__(
        self,
        jwt: str,
        api_url: str = "https://api.pinata.cloud",
        timeout: float = 10.0,
        probe_timeout: float = 2.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.probe_timeout = probe_timeout
        self._headers = {"Authorization": f"Bearer {jwt}"}
        self._transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout, headers=self._headers, transport=self._transport
        )

    async def is_available(self) -> bool:
        try:
            async with self._client(self.probe_timeout) as client:
                response = await client.get(f"{self.api_url}/data/testAuthentication")
                return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning("Pinata unreachable", error=str(e))
            return False

    async def add(self, content: bytes, filename: str) -> str:
        async with self._client(self.timeout) as client:
            response = await client.post(
                f"{self.api_url}/pinning/pinFileToIPFS",
                files={"file": (filename, content)},
                data={"pinataOptions": '{"cidVersion": 0}'},
            )
            response.raise_for_status()
            return response.json()["IpfsHash"]


class FingerprintBackend(StoreBackend):
    """Degraded mode: identifiers are computed locally, content stays in the cache."""

    name = "fingerprint"
    persistent = False

    async def is_available(self) -> bool:
        return True

    async def add(self, content: bytes, filename: str) -> str:
        return fingerprint_cid(content)


def build_backends(
    settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
) -> List[StoreBackend]:
    """
    Backends in write priority order.

    Args:
        settings: Application settings
        transport: Optional httpx transport, shared by all network backends

    Returns:
        Local node, managed provider when configured, then local fingerprinting
    """
    backends: List[StoreBackend] = [
        IpfsHttpBackend(
            settings.IPFS_API_URL,
            timeout=settings.IPFS_TIMEOUT,
            probe_timeout=settings.IPFS_PROBE_TIMEOUT,
            transport=transport,
        )
    ]
    if settings.has_pinata:
        backends.append(
            PinataBackend(
                settings.PINATA_JWT,
                api_url=settings.PINATA_API_URL,
                timeout=settings.IPFS_TIMEOUT,
                probe_timeout=settings.IPFS_PROBE_TIMEOUT,
                transport=transport,
            )
        )
    backends.append(FingerprintBackend())
    return backends
