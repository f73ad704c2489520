from __future__ import annotations

import asyncio
from typing import Any, Iterable, List

import pytest
from google.cloud import videointelligence_v1 as vi
from google.protobuf import any_pb2

from vi_annotate import OperationHandle, OperationStatus, Poller, PollingConfig, ResultFuture


class FakeStatusService:
    """Scripted status checks: each item is an OperationStatus or an exception to raise."""

    def __init__(self, responses: Iterable[Any]):
        self.responses: List[Any] = list(responses)
        self.calls: List[str] = []
        self.cancels: List[str] = []

    async def fetch_status(self, name: str) -> OperationStatus:
        self.calls.append(name)
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, BaseException):
            raise item
        return item

    async def cancel(self, name: str) -> None:
        self.cancels.append(name)


def run(coro):  # noqa: ANN001
    return asyncio.run(coro)


def make_future(service: FakeStatusService, config: PollingConfig, name: str = "op-1", **kwargs: Any) -> ResultFuture:
    handle = OperationHandle(id=name)
    poller = Poller(handle, service.fetch_status, config, request_remote_cancel=service.cancel, **kwargs)
    return ResultFuture(handle, poller)


@pytest.fixture
def fast_polling() -> PollingConfig:
    return PollingConfig(initial_interval=0.001, max_interval=0.005, backoff_multiplier=2.0, max_retries=3)


class FakeOperationsClient:
    """Stands in for google.api_core.operations_v1.OperationsClient."""

    def __init__(self, operations: Iterable[Any], cancel_error: BaseException | None = None):
        self.operations: List[Any] = list(operations)
        self.cancel_error = cancel_error
        self.get_calls: List[str] = []
        self.cancel_calls: List[str] = []

    def get_operation(self, name: str, timeout: float | None = None) -> Any:
        self.get_calls.append(name)
        item = self.operations.pop(0) if len(self.operations) > 1 else self.operations[0]
        if isinstance(item, BaseException):
            raise item
        return item

    def cancel_operation(self, name: str, timeout: float | None = None) -> None:
        self.cancel_calls.append(name)
        if self.cancel_error is not None:
            raise self.cancel_error


OP_NAME = "projects/demo/locations/us-east1/operations/123"


def pack(message: Any) -> any_pb2.Any:
    pb_type = type(message).pb()
    return any_pb2.Any(
        type_url=f"type.googleapis.com/{pb_type.DESCRIPTOR.full_name}",
        value=type(message).serialize(message),
    )


def progress_message(pct: int) -> vi.AnnotateVideoProgress:
    return vi.AnnotateVideoProgress(
        annotation_progress=[vi.VideoAnnotationProgress(input_uri="/bucket/cat.mp4", progress_percent=pct)]
    )


def response_message() -> vi.AnnotateVideoResponse:
    return vi.AnnotateVideoResponse(
        annotation_results=[
            vi.VideoAnnotationResults(
                input_uri="/bucket/cat.mp4",
                segment_label_annotations=[vi.LabelAnnotation(entity=vi.Entity(description="cat"))],
            )
        ]
    )
