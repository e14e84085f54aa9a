from typing import Any
from urllib.parse import quote

from fastapi import APIRouter, Body, File, Response, UploadFile

from app.exceptions import ValidationError
from app.schemas.ipfs import (
    FileUploadResponse,
    RetrieveResponse,
    StoreStatusResponse,
    UploadResponse,
)
from app.utils.deps import Store
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)

PDF_MAGIC = b"%PDF"


def _content_disposition(filename: str) -> str:
    # Header values are latin-1, non-ASCII names go in the RFC 5987 parameter
    fallback = "".join(
        c if c.isascii() and c.isprintable() and c not in '"\\' else "_"
        for c in filename
    )
    encoded = quote(filename, safe="")
    return f"inline; filename=\"{fallback}\"; filename*=UTF-8''{encoded}"


@router.post("/upload", response_model=UploadResponse)
async def upload_json(store: Store, payload: Any = Body(None)):
    """Store a JSON payload and return its content hash."""
    if payload is None or payload == {}:
        raise ValidationError("Missing JSON payload")
    return UploadResponse(hash=await store.put(payload))


@router.post("/upload-file", response_model=FileUploadResponse)
async def upload_file(store: Store, file: UploadFile = File(...)):
    """Store a PDF document, bounded by MAX_UPLOAD_SIZE."""
    # Read one byte past the limit so oversized files are detected without
    # buffering the whole body
    content = await file.read(store.max_upload_size + 1)
    mime_type = file.content_type or "application/octet-stream"
    document = await store.put_file(content, file.filename or "document.pdf", mime_type)
    logger.info(
        "File uploaded",
        hash=document["contentHash"],
        filename=document["filename"],
        size=document["filesize"],
    )
    return FileUploadResponse(
        hash=document["contentHash"],
        filename=document["filename"],
        size=document["filesize"],
        mimetype=document["mimeType"],
    )


@router.get("/file/{cid}")
async def get_file(cid: str, store: Store):
    """Raw content with content headers."""
    stored = await store.get_content(cid)
    mime_type = stored.mime_type
    if mime_type is None:
        mime_type = (
            "application/pdf"
            if stored.content.startswith(PDF_MAGIC)
            else "application/octet-stream"
        )
    filename = stored.filename or cid
    return Response(
        content=stored.content,
        media_type=mime_type,
        headers={"Content-Disposition": _content_disposition(filename)},
    )


@router.get("/retrieve/{cid}", response_model=RetrieveResponse)
async def retrieve_json(cid: str, store: Store):
    return RetrieveResponse(hash=cid, data=await store.get(cid))


@router.get("/status", response_model=StoreStatusResponse)
async def store_status(store: Store):
    return StoreStatusResponse(**await store.status())
