from datetime import datetime, timezone

from fastapi import APIRouter

from app.utils.deps import Diagnostics

router = APIRouter()


@router.get("/health")
async def diagnostics_health(diagnostics: Diagnostics):
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": diagnostics.settings.ENVIRONMENT,
    }


@router.get("/provider")
async def check_provider(diagnostics: Diagnostics):
    """Ledger connection status."""
    return diagnostics.check_provider()


@router.get("/contract")
async def check_contract(diagnostics: Diagnostics):
    """Deployed contract addresses and read-call checks."""
    return await diagnostics.check_contract()


@router.get("/full")
async def full_diagnostics(diagnostics: Diagnostics):
    return await diagnostics.run_full_diagnostics()
