"""Configuration management using Pydantic Settings"""

from decimal import Decimal
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Local wallet -> plan index
    database_url: str = "sqlite:///./savelo.db"

    # External Services
    ledger_api_base: str = "http://localhost:8002"

    # Service
    service_name: str = "savelo-gateway"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 10.0
    ledger_max_retries: int = 3
    ledger_backoff_base: float = 0.5  # Exponential backoff base in seconds, reads only

    # Re-fetch schedule after a confirmed create/pay, absorbs ledger propagation lag
    refetch_delays_seconds: List[float] = [1.0, 3.0]

    # Display
    token_decimals: int = 18
    celo_usd_rate: Decimal = Decimal("0.16")  # 1 CELO = $0.16


settings = Settings()
