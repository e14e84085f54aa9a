from pydantic import BaseModel


class HealthCheck(BaseModel):
    status: str
    ledger_status: str
    ipfs_status: str
