"""
Dependency utilities for FastAPI endpoints.
"""

from typing import Annotated

from fastapi import Depends, Request

from app.services.credential_service import CredentialService
from app.services.diagnostic_service import DiagnosticService
from app.services.factory import ServiceContainer
from app.services.ipfs_store import ContentStore
from app.services.student_directory_service import StudentDirectoryService


def get_services(request: Request) -> ServiceContainer:
    """
    Get the service container built during application startup.

    Args:
        request: The incoming request

    Returns:
        The ServiceContainer stored on app.state
    """
    return request.app.state.services


def get_student_service(
    services: ServiceContainer = Depends(get_services),
) -> StudentDirectoryService:
    return services.students


def get_credential_service(
    services: ServiceContainer = Depends(get_services),
) -> CredentialService:
    return services.credentials


def get_content_store(services: ServiceContainer = Depends(get_services)) -> ContentStore:
    return services.store


def get_diagnostic_service(
    services: ServiceContainer = Depends(get_services),
) -> DiagnosticService:
    return services.diagnostics


Services = Annotated[ServiceContainer, Depends(get_services)]
StudentService = Annotated[StudentDirectoryService, Depends(get_student_service)]
Credentials = Annotated[CredentialService, Depends(get_credential_service)]
Store = Annotated[ContentStore, Depends(get_content_store)]
Diagnostics = Annotated[DiagnosticService, Depends(get_diagnostic_service)]
