import os
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from vi_annotate import PollingConfig
from vi_annotate.config import SUPPORTED_API_VERSIONS


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    return float(raw) if raw else None


class Settings(BaseModel):
    app_name: str = Field(default="video-annotation-jobs")
    environment: str = Field(default=os.getenv("ENV", "dev"))

    api_version: str = Field(default=os.getenv("VI_API_VERSION", "v1"))
    api_endpoint: str | None = Field(default=os.getenv("VI_API_ENDPOINT"))
    rpc_retries: int = Field(default=int(os.getenv("RPC_RETRIES", "3")))

    # Polling knobs
    poll_initial_interval: float = Field(default=float(os.getenv("POLL_INITIAL_INTERVAL", "5")))
    poll_max_interval: float = Field(default=float(os.getenv("POLL_MAX_INTERVAL", "45")))
    poll_backoff_multiplier: float = Field(default=float(os.getenv("POLL_BACKOFF_MULTIPLIER", "1.5")))
    poll_max_retries: int = Field(default=int(os.getenv("POLL_MAX_RETRIES", "5")))
    # Per-job polling deadline in seconds; unset polls until the service finishes
    poll_timeout: float | None = Field(default=_optional_float("POLL_TIMEOUT"))

    @field_validator("api_version")
    @classmethod
    def _known_version(cls, v: str) -> str:
        if v not in SUPPORTED_API_VERSIONS:
            raise ValueError(f"VI_API_VERSION must be one of {', '.join(SUPPORTED_API_VERSIONS)}")
        return v

    @field_validator("poll_timeout")
    @classmethod
    def _positive_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("POLL_TIMEOUT must be > 0")
        return v

    def polling_config(self) -> PollingConfig:
        return PollingConfig(
            initial_interval=self.poll_initial_interval,
            max_interval=self.poll_max_interval,
            backoff_multiplier=self.poll_backoff_multiplier,
            max_retries=self.poll_max_retries,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
