from __future__ import annotations

from functools import lru_cache

from vi_annotate import VideoIntelligenceClient

from ..config import get_settings


@lru_cache(maxsize=None)
def get_client(api_version: str | None = None) -> VideoIntelligenceClient:
    """One client per API version, shared by every job the service starts."""
    settings = get_settings()
    return VideoIntelligenceClient(
        api_version=api_version or settings.api_version,
        api_endpoint=settings.api_endpoint,
        polling=settings.polling_config(),
        initial_call_retries=settings.rpc_retries,
    )
