from fastapi import APIRouter

from app.schemas.health_schema import HealthCheck
from app.utils.deps import Services

router = APIRouter()


@router.get("", response_model=HealthCheck)
async def health_check(services: Services) -> HealthCheck:
    """
    Health check endpoint that also reports ledger and IPFS reachability.
    """
    ledger_status = "healthy" if services.ledger.contracts else "no_contracts"
    ipfs_up = await services.store.primary.is_available()

    return HealthCheck(
        status="healthy",
        ledger_status=ledger_status,
        ipfs_status="healthy" if ipfs_up else "degraded",
    )
