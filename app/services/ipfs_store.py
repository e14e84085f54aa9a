"""
Content-addressed store adapter.

Uploads go to the first backend whose availability probe succeeds, falling
back to local fingerprinting so an upload never fails while the network is
down. Reads go through the process cache, the primary node, then the public
gateways in their configured order.
"""

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from app.config import Settings
from app.exceptions import (
    InvalidFormatError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from app.services.ipfs_backends import StoreBackend, build_backends
from app.utils.cid import is_valid_cid
from app.utils.logger import get_logger

logger = get_logger(__name__)

JSON_MIME_TYPE = "application/json"


@dataclass(frozen=True)
class StoredContent:
    content: bytes
    mime_type: Optional[str] = None
    filename: Optional[str] = None
    source: str = "cache"


def serialize_payload(payload: Any) -> bytes:
    """Stable JSON encoding, the same payload always maps to the same bytes."""
    return json.dumps(
        payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")


class ContentStore:
    def __init__(
        self,
        backends: List[StoreBackend],
        gateways: List[str],
        gateway_timeout: float = 5.0,
        max_upload_size: int = 10 * 1024 * 1024,
        allowed_upload_types: Optional[List[str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not backends:
            raise ValueError("ContentStore needs at least one backend")
        self.backends = backends
        self.gateways = [g if g.endswith("/") else g + "/" for g in gateways]
        self.gateway_timeout = gateway_timeout
        self.max_upload_size = max_upload_size
        self.allowed_upload_types = allowed_upload_types or ["application/pdf"]
        self._transport = transport
        self._cache: Dict[str, StoredContent] = {}

    @property
    def primary(self) -> StoreBackend:
        return self.backends[0]

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def _remember(self, cid: str, entry: StoredContent) -> StoredContent:
        # First write wins, content for a given cid never changes
        return self._cache.setdefault(cid, entry)

    async def _store(self, content: bytes, filename: str, mime_type: str) -> str:
        # Backends are probed at call time, in priority order
        for backend in self.backends:
            if not await backend.is_available():
                continue
            try:
                cid = await backend.add(content, filename)
            except (httpx.HTTPError, KeyError, ValueError) as e:
                logger.warning(
                    "Upload failed, trying next backend",
                    backend=backend.name,
                    error=str(e),
                )
                continue

            if not backend.persistent:
                logger.warning(
                    "Content store unreachable, using local fingerprint", cid=cid
                )
            self._remember(
                cid,
                StoredContent(
                    content=content,
                    mime_type=mime_type,
                    filename=filename,
                    source=backend.name,
                ),
            )
            logger.info("Content stored", cid=cid, backend=backend.name, size=len(content))
            return cid

        raise StoreUnavailableError("No content store backend accepted the upload")

    async def put(self, payload: Any) -> str:
        """Store a JSON-serializable payload and return its content hash."""
        try:
            content = serialize_payload(payload)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Payload is not JSON serializable: {e}") from e
        return await self._store(content, "payload.json", JSON_MIME_TYPE)

    async def put_file(
        self, content: bytes, filename: str, mime_type: str
    ) -> Dict[str, Any]:
        """
        Store a binary document.

        Returns:
            The attachment descriptor: contentHash, filename, filesize, mimeType
        """
        if mime_type not in self.allowed_upload_types:
            raise ValidationError(
                f"Unsupported file type {mime_type}, allowed: "
                + ", ".join(self.allowed_upload_types),
                field="file",
            )
        if not content:
            raise ValidationError("File is empty", field="file")
        if len(content) > self.max_upload_size:
            raise ValidationError(
                f"File exceeds the {self.max_upload_size} byte limit", field="file"
            )

        cid = await self._store(content, filename, mime_type)
        return {
            "contentHash": cid,
            "filename": filename,
            "filesize": len(content),
            "mimeType": mime_type,
        }

    async def _fetch_gateway(self, gateway: str, cid: str) -> Optional[bytes]:
        try:
            async with httpx.AsyncClient(
                timeout=self.gateway_timeout,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                # httpx timeouts bound each phase, this bounds the whole request
                response = await asyncio.wait_for(
                    client.get(f"{gateway}{cid}"), self.gateway_timeout
                )
                if response.status_code == 200:
                    return response.content
                logger.info(
                    "Gateway miss",
                    gateway=gateway,
                    cid=cid,
                    status_code=response.status_code,
                )
        except asyncio.TimeoutError:
            logger.warning(
                "Gateway deadline exceeded",
                gateway=gateway,
                cid=cid,
                timeout=self.gateway_timeout,
            )
        except httpx.HTTPError as e:
            logger.warning("Gateway request failed", gateway=gateway, cid=cid, error=str(e))
        return None

    async def get_content(self, cid: str) -> StoredContent:
        """
        Resolve raw content for an identifier.

        Raises:
            InvalidFormatError: If cid is not an IPFS content identifier
            NotFoundError: If neither the cache nor any remote source has it
        """
        if not is_valid_cid(cid):
            raise InvalidFormatError(f"Invalid IPFS hash format: {cid}", field="hash")

        cached = self._cache.get(cid)
        if cached is not None:
            return cached

        content = await self.primary.cat(cid)
        if content is not None:
            return self._remember(cid, StoredContent(content=content, source=self.primary.name))

        for gateway in self.gateways:
            content = await self._fetch_gateway(gateway, cid)
            if content is not None:
                return self._remember(cid, StoredContent(content=content, source=gateway))

        logger.warning("Content not found on any source", cid=cid)
        raise NotFoundError(f"Content not found for hash {cid}", resource_type="ipfs")

    async def get(self, cid: str) -> Any:
        """Resolve and decode a JSON payload."""
        stored = await self.get_content(cid)
        try:
            return json.loads(stored.content)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise InvalidFormatError(f"Content at {cid} is not JSON") from e

    async def status(self) -> Dict[str, Any]:
        return {
            "primary": self.primary.name,
            "primaryAvailable": await self.primary.is_available(),
            "backends": [b.name for b in self.backends],
            "gateways": self.gateways,
            "cachedEntries": self.cache_size,
        }


def build_content_store(
    settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
) -> ContentStore:
    return ContentStore(
        backends=build_backends(settings, transport=transport),
        gateways=settings.IPFS_GATEWAYS,
        gateway_timeout=settings.IPFS_GATEWAY_TIMEOUT,
        max_upload_size=settings.MAX_UPLOAD_SIZE,
        allowed_upload_types=settings.ALLOWED_UPLOAD_TYPES,
        transport=transport,
    )
