from fastapi import APIRouter

from app.api.v1.endpoints import credentials, diagnostics, health, ipfs, students

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["Health"])
api_router.include_router(students.router, prefix="/students", tags=["Students"])
api_router.include_router(
    credentials.router, prefix="/credentials", tags=["Credentials"]
)
api_router.include_router(ipfs.router, prefix="/ipfs", tags=["IPFS"])
api_router.include_router(
    diagnostics.router, prefix="/diagnostics", tags=["Diagnostics"]
)
