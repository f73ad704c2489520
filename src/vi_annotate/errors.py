from __future__ import annotations

from typing import Optional

from google.rpc import code_pb2


class ConfigError(Exception):
    """Raised when configuration is missing or invalid."""


class OperationError(Exception):
    """Base exception for long-running operation failures."""

    code: int = code_pb2.UNKNOWN

    def __init__(self, message: str, code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class TransportError(OperationError):
    """Raised when a status check fails at the network/transport level."""

    code = code_pb2.UNAVAILABLE


class RemoteOperationError(OperationError):
    """Raised when the service reports the operation itself failed."""

    def __init__(self, message: str, code: int) -> None:
        super().__init__(message, code=code)

    def __str__(self) -> str:
        return f"{self.message} (code={self.code})"


class CanceledError(OperationError):
    """Raised when the operation was abandoned locally by cancel()."""

    code = code_pb2.CANCELLED


class DeadlineExceededError(OperationError):
    """Raised when the polling deadline passed before the operation finished."""

    code = code_pb2.DEADLINE_EXCEEDED


class WaitTimeoutError(OperationError):
    """Raised when wait() gives up; the operation itself keeps running."""

    code = code_pb2.DEADLINE_EXCEEDED
