"""
Builds the service graph from explicit settings.

The application creates one ServiceContainer at startup and keeps it on
app.state, endpoints receive services through FastAPI dependencies.
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from app.config import Settings
from app.ledger.chain import Ledger, build_ledger
from app.services.credential_service import CredentialService
from app.services.diagnostic_service import DiagnosticService
from app.services.ipfs_store import ContentStore, build_content_store
from app.services.student_directory_service import StudentDirectoryService


@dataclass
class ServiceContainer:
    settings: Settings
    ledger: Ledger
    store: ContentStore
    students: StudentDirectoryService
    credentials: CredentialService
    diagnostics: DiagnosticService


def build_services(
    settings: Settings,
    ledger: Optional[Ledger] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ServiceContainer:
    """
    Wire every service for the given settings.

    Args:
        settings: Application settings
        ledger: Existing ledger to reuse, a new one is deployed otherwise
        transport: httpx transport for the content store, used by tests

    Returns:
        The populated ServiceContainer
    """
    ledger = ledger or build_ledger(settings)
    store = build_content_store(settings, transport=transport)
    return ServiceContainer(
        settings=settings,
        ledger=ledger,
        store=store,
        students=StudentDirectoryService(ledger),
        credentials=CredentialService(ledger, store),
        diagnostics=DiagnosticService(settings, ledger, store),
    )
