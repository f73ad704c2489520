from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .dto import PollingConfig
from .errors import ConfigError

SUPPORTED_API_VERSIONS = ("v1", "v1beta2", "v1p1beta1", "v1p2beta1", "v1p3beta1")


@dataclass
class Settings:
    api_version: str
    api_endpoint: Optional[str]
    poll_initial_interval: float
    poll_max_interval: float
    poll_backoff_multiplier: float
    poll_max_retries: int
    poll_timeout: Optional[float]
    rpc_retries: int

    @staticmethod
    def from_env() -> "Settings":
        api_version = os.environ.get("VI_API_VERSION", "v1")
        api_endpoint = os.environ.get("VI_API_ENDPOINT")
        poll_timeout_raw = os.environ.get("POLL_TIMEOUT")
        try:
            poll_initial_interval = float(os.environ.get("POLL_INITIAL_INTERVAL", "5"))
            poll_max_interval = float(os.environ.get("POLL_MAX_INTERVAL", "45"))
            poll_backoff_multiplier = float(os.environ.get("POLL_BACKOFF_MULTIPLIER", "1.5"))
            poll_max_retries = int(os.environ.get("POLL_MAX_RETRIES", "5"))
            poll_timeout = float(poll_timeout_raw) if poll_timeout_raw else None
            rpc_retries = int(os.environ.get("RPC_RETRIES", "3"))
        except ValueError as e:
            raise ConfigError(f"Invalid numeric setting: {e}") from e

        if api_version not in SUPPORTED_API_VERSIONS:
            raise ConfigError(f"VI_API_VERSION must be one of {', '.join(SUPPORTED_API_VERSIONS)}")

        return Settings(
            api_version=api_version,
            api_endpoint=api_endpoint,
            poll_initial_interval=poll_initial_interval,
            poll_max_interval=poll_max_interval,
            poll_backoff_multiplier=poll_backoff_multiplier,
            poll_max_retries=poll_max_retries,
            poll_timeout=poll_timeout,
            rpc_retries=rpc_retries,
        )

    def polling_config(self) -> PollingConfig:
        try:
            cfg = PollingConfig(
                initial_interval=self.poll_initial_interval,
                max_interval=self.poll_max_interval,
                backoff_multiplier=self.poll_backoff_multiplier,
                max_retries=self.poll_max_retries,
            )
        except ValueError as e:
            raise ConfigError(f"Invalid polling settings: {e}") from e
        return cfg.with_timeout(self.poll_timeout)
