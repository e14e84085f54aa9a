from typing import Any, List

from app.schemas.base import SuccessResponse


class UploadResponse(SuccessResponse):
    hash: str


class FileUploadResponse(SuccessResponse):
    hash: str
    filename: str
    size: int
    mimetype: str


class RetrieveResponse(SuccessResponse):
    hash: str
    data: Any


class StoreStatusResponse(SuccessResponse):
    primary: str
    primary_available: bool
    backends: List[str]
    gateways: List[str]
    cached_entries: int
