from .client import API_MODULES, PORT, SCOPES, SERVICE_PATH, VideoIntelligenceClient
from .dto import AnnotateVideoRequest, OperationErrorInfo, OperationStatus, PollingConfig
from .errors import (
    CanceledError,
    ConfigError,
    DeadlineExceededError,
    OperationError,
    RemoteOperationError,
    TransportError,
    WaitTimeoutError,
)
from .lro import OperationHandle, OperationState, Poller, ResultFuture

__all__ = [
    "API_MODULES",
    "PORT",
    "SCOPES",
    "SERVICE_PATH",
    "VideoIntelligenceClient",
    "AnnotateVideoRequest",
    "OperationErrorInfo",
    "OperationStatus",
    "PollingConfig",
    "CanceledError",
    "ConfigError",
    "DeadlineExceededError",
    "OperationError",
    "RemoteOperationError",
    "TransportError",
    "WaitTimeoutError",
    "OperationHandle",
    "OperationState",
    "Poller",
    "ResultFuture",
]
