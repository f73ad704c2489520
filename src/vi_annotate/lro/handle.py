from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Optional

from google.rpc import code_pb2

from ..dto import OperationErrorInfo, OperationStatus


class OperationState(StrEnum):
    pending = "PENDING"
    succeeded = "SUCCEEDED"
    failed = "FAILED"
    canceled = "CANCELED"
    timed_out = "TIMED_OUT"


@dataclass
class OperationHandle:
    """Cached state of one long-running operation.

    Pure state container: ``done`` only ever goes from False to True, and at
    most one of ``result``/``error`` is set, at the moment ``done`` flips.
    """

    id: str
    done: bool = False
    metadata: Any = None
    result: Any = None
    error: Optional[OperationErrorInfo] = None

    def apply_update(
        self,
        metadata: Any,
        done: bool,
        result: Any = None,
        error: Optional[OperationErrorInfo] = None,
    ) -> bool:
        """Record one status snapshot; returns True if it made the handle terminal."""
        self.metadata = metadata
        if self.done or not done:
            return False
        self.done = True
        if error is not None:
            self.error = error
        else:
            self.result = result
        return True

    def apply_status(self, status: OperationStatus) -> bool:
        return self.apply_update(status.metadata, status.done, result=status.result, error=status.error)

    @property
    def state(self) -> OperationState:
        if not self.done:
            return OperationState.pending
        if self.error is None:
            return OperationState.succeeded
        if self.error.local and self.error.code == code_pb2.CANCELLED:
            return OperationState.canceled
        if self.error.local and self.error.code == code_pb2.DEADLINE_EXCEEDED:
            return OperationState.timed_out
        return OperationState.failed
