from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from google.api_core import exceptions as core_exceptions
from google.longrunning import operations_pb2

from .dto import OperationErrorInfo, OperationStatus
from .errors import TransportError

logger = logging.getLogger(__name__)

RETRYABLE_EXCEPTIONS: tuple[type[BaseException], ...] = (
    core_exceptions.ServiceUnavailable,
    core_exceptions.DeadlineExceeded,
    core_exceptions.TooManyRequests,
    core_exceptions.InternalServerError,
    core_exceptions.RetryError,
)


class OperationsTransport:
    """Status-check and cancel calls against ``google.longrunning.Operations``.

    ``response_type``/``metadata_type`` are the proto-plus message classes the
    operation's ``Any`` payloads decode into, e.g. ``AnnotateVideoResponse``
    and ``AnnotateVideoProgress`` of the selected API version.
    """

    def __init__(self, operations_client: Any, response_type: Any, metadata_type: Any, timeout: Optional[float] = 30.0) -> None:
        self._client = operations_client
        self.response_type = response_type
        self.metadata_type = metadata_type
        self.timeout = timeout

    async def fetch_status(self, name: str) -> OperationStatus:
        logger.debug("GetOperation %s", name)
        try:
            op = await asyncio.to_thread(self._client.get_operation, name, timeout=self.timeout)
        except RETRYABLE_EXCEPTIONS as e:
            raise TransportError(f"GetOperation {name} failed: {e}") from e
        return self.to_status(op)

    async def cancel(self, name: str) -> None:
        logger.info("CancelOperation %s", name)
        try:
            await asyncio.to_thread(self._client.cancel_operation, name, timeout=self.timeout)
        except (core_exceptions.GoogleAPICallError, core_exceptions.RetryError) as e:
            raise TransportError(f"CancelOperation {name} failed: {e}") from e

    def to_status(self, op: operations_pb2.Operation) -> OperationStatus:
        metadata = self._decode(self.metadata_type, op.metadata) if op.HasField("metadata") else None
        if not op.done:
            return OperationStatus(metadata=metadata, done=False)
        if op.WhichOneof("result") == "error":
            return OperationStatus(
                metadata=metadata,
                done=True,
                error=OperationErrorInfo(code=op.error.code, message=op.error.message),
            )
        result = self._decode(self.response_type, op.response) if op.HasField("response") else None
        return OperationStatus(metadata=metadata, done=True, result=result)

    @staticmethod
    def _decode(message_type: Any, payload: Any) -> Any:
        if message_type is None:
            return payload
        return message_type.deserialize(payload.value)
