from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TASKLANE_", env_file=".env", extra="ignore")

    app_name: str = "tasklane"

    # Backend RPC (TASKLANE_BACKEND_URL, TASKLANE_RPC_TIMEOUT)
    backend_url: str = "http://127.0.0.1:7878"
    # None disables the transport timeout; the cache layer never times out on its own
    rpc_timeout: float | None = None

    # Caching
    cache_ttl_seconds: float = Field(default=300.0, gt=0)
    page_size: int = Field(default=20, gt=0)

    # Observability
    log_level: str = "INFO"
    log_json: bool = False


settings = Settings()
