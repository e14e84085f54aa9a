from functools import lru_cache
from typing import List

import structlog
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger()

# Public gateways tried in this order when the primary node misses a hash
DEFAULT_IPFS_GATEWAYS = [
    "https://ipfs.io/ipfs/",
    "https://gateway.pinata.cloud/ipfs/",
    "https://cloudflare-ipfs.com/ipfs/",
    "https://dweb.link/ipfs/",
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        case_sensitive=True,
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    # App Settings
    ENVIRONMENT: str = "local"
    LOG_LEVEL: str = "INFO"

    # API Settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Academic Records"
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:3002"]

    # Ledger Settings
    RPC_URL: str = "http://127.0.0.1:8545"
    CHAIN_ID: int = 31337
    CONTRACT_ADDRESS: str = ""
    STUDENT_DIRECTORY_ADDRESS: str = ""
    # Deployer key, becomes the first admin of both contracts
    ADMIN_PRIVATE_KEY: str = ""

    # IPFS Settings
    IPFS_API_URL: str = "http://127.0.0.1:5001"
    IPFS_GATEWAYS: List[str] = DEFAULT_IPFS_GATEWAYS
    IPFS_TIMEOUT: float = 10.0
    IPFS_GATEWAY_TIMEOUT: float = 5.0
    IPFS_PROBE_TIMEOUT: float = 2.0

    # Managed pinning provider, used when the local node is unreachable
    PINATA_JWT: str = ""
    PINATA_API_URL: str = "https://api.pinata.cloud"

    # Uploads
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024
    ALLOWED_UPLOAD_TYPES: List[str] = ["application/pdf"]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT in ("prod", "production")

    @property
    def has_pinata(self) -> bool:
        return bool(self.PINATA_JWT)

    @classmethod
    def load_from_env_file(cls):
        """Load settings from .env file in local development."""
        from pathlib import Path

        from dotenv import load_dotenv

        env_file = Path(".env")
        if env_file.exists():
            load_dotenv(env_file, override=True)

        instance = cls()
        if not instance.ADMIN_PRIVATE_KEY:
            logger.warning(
                "ADMIN_PRIVATE_KEY not set, ledger will start without an admin"
            )
        return instance


@lru_cache
def get_settings() -> Settings:
    return Settings.load_from_env_file()
