from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class OperationErrorInfo(BaseModel):
    code: int
    message: str = ""
    # True when the error was produced by this client (cancel, deadline,
    # exhausted transport retries) rather than reported by the service
    local: bool = False


class OperationStatus(BaseModel):
    """One snapshot of a remote operation as returned by a status check."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    metadata: Any = None
    done: bool = False
    result: Any = None
    error: Optional[OperationErrorInfo] = None


class PollingConfig(BaseModel):
    initial_interval: float = Field(default=5.0, ge=0)
    max_interval: float = Field(default=45.0, ge=0)
    backoff_multiplier: float = Field(default=1.5, ge=1.0)
    max_retries: int = Field(default=5, ge=0)
    # absolute, on the poller clock (time.monotonic by default)
    deadline: Optional[float] = None

    @model_validator(mode="after")
    def _interval_order(self) -> "PollingConfig":
        if self.max_interval < self.initial_interval:
            raise ValueError("max_interval must be >= initial_interval")
        return self

    def with_timeout(self, timeout: Optional[float]) -> "PollingConfig":
        if timeout is None:
            return self.model_copy(update={"deadline": None})
        return self.model_copy(update={"deadline": time.monotonic() + timeout})


class AnnotateVideoRequest(BaseModel):
    input_uri: Optional[str] = None
    input_content: Optional[bytes] = None
    features: List[str] = Field(min_length=1)
    video_context: Optional[Dict[str, Any]] = None
    output_uri: Optional[str] = None
    location_id: Optional[str] = None

    @model_validator(mode="after")
    def _single_input(self) -> "AnnotateVideoRequest":
        if bool(self.input_uri) == bool(self.input_content):
            raise ValueError("exactly one of input_uri or input_content must be set")
        return self

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
