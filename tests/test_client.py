from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Any, List

import pytest
from google.api_core import exceptions as core_exceptions
from google.cloud import videointelligence_v1 as vi
from google.cloud import videointelligence_v1p2beta1 as vi_p2
from google.longrunning import operations_pb2

from conftest import OP_NAME, FakeOperationsClient, pack, progress_message, response_message, run
from vi_annotate import (
    CanceledError,
    ConfigError,
    OperationState,
    PollingConfig,
    TransportError,
    VideoIntelligenceClient,
)

FAST = PollingConfig(initial_interval=0.001, max_interval=0.002, max_retries=2)


class FakeGapicClient:
    def __init__(self, ops: FakeOperationsClient, ack: operations_pb2.Operation, failures: List[BaseException] | None = None):
        self.transport = SimpleNamespace(operations_client=ops)
        self.ack = ack
        self.failures = list(failures or [])
        self.requests: List[Any] = []

    def annotate_video(self, request: Any) -> Any:
        self.requests.append(request)
        if self.failures:
            raise self.failures.pop(0)
        return SimpleNamespace(operation=self.ack)


def _client(gapic: FakeGapicClient, **kwargs: Any) -> VideoIntelligenceClient:
    kwargs.setdefault("polling", FAST)
    return VideoIntelligenceClient(gapic_client=gapic, retry_min_wait=0, **kwargs)


def test_annotate_video_polls_to_result() -> None:
    ack = operations_pb2.Operation(name=OP_NAME, done=False)
    ops = FakeOperationsClient(
        [
            operations_pb2.Operation(name=OP_NAME, done=False, metadata=pack(progress_message(30))),
            operations_pb2.Operation(name=OP_NAME, done=True, metadata=pack(progress_message(100)), response=pack(response_message())),
        ]
    )
    gapic = FakeGapicClient(ops, ack)
    progress = []

    async def scenario():
        future = await _client(gapic).annotate_video(
            {"input_uri": "gs://bucket/cat.mp4", "features": ["LABEL_DETECTION", "shot_change_detection"]}
        )
        future.on_progress(progress.append)
        return future, await future.wait()

    future, response = run(scenario())

    request = gapic.requests[0]
    assert isinstance(request, vi.AnnotateVideoRequest)
    assert list(request.features) == [vi.Feature.LABEL_DETECTION, vi.Feature.SHOT_CHANGE_DETECTION]
    assert request.input_uri == "gs://bucket/cat.mp4"
    assert future.name == OP_NAME
    assert future.state == OperationState.succeeded
    assert [p.annotation_progress[0].progress_percent for p in progress] == [30]
    assert response.annotation_results[0].segment_label_annotations[0].entity.description == "cat"


def test_ack_already_done_resolves_without_polling() -> None:
    ack = operations_pb2.Operation(name=OP_NAME, done=True, response=pack(response_message()))
    ops = FakeOperationsClient([])
    gapic = FakeGapicClient(ops, ack)

    async def scenario():
        future = await _client(gapic).annotate_video({"input_uri": "gs://b/cat.mp4", "features": ["LABEL_DETECTION"]})
        return await future.wait()

    response = run(scenario())

    assert ops.get_calls == []
    assert response.annotation_results[0].input_uri == "/bucket/cat.mp4"


def test_initial_call_retried_on_unavailable() -> None:
    ack = operations_pb2.Operation(name=OP_NAME, done=True, response=pack(response_message()))
    gapic = FakeGapicClient(FakeOperationsClient([]), ack, failures=[core_exceptions.ServiceUnavailable("try again")])

    async def scenario():
        future = await _client(gapic, initial_call_retries=2).annotate_video(
            {"input_uri": "gs://b/cat.mp4", "features": ["LABEL_DETECTION"]}
        )
        return future.name

    assert run(scenario()) == OP_NAME
    assert len(gapic.requests) == 2


def test_initial_call_exhausted_raises_transport_error() -> None:
    ack = operations_pb2.Operation(name=OP_NAME)
    gapic = FakeGapicClient(
        FakeOperationsClient([]),
        ack,
        failures=[core_exceptions.ServiceUnavailable("down")],
    )

    with pytest.raises(TransportError):
        run(_client(gapic, initial_call_retries=1).annotate_video({"input_uri": "gs://b/c.mp4", "features": ["LABEL_DETECTION"]}))


def test_invalid_requests_rejected_before_rpc() -> None:
    gapic = FakeGapicClient(FakeOperationsClient([]), operations_pb2.Operation(name=OP_NAME))
    client = _client(gapic)

    with pytest.raises(ValueError):
        run(client.annotate_video({"features": ["LABEL_DETECTION"]}))
    with pytest.raises(ValueError):
        run(client.annotate_video({"input_uri": "gs://b/c.mp4", "input_content": b"abc", "features": ["LABEL_DETECTION"]}))
    with pytest.raises(ValueError):
        run(client.annotate_video({"input_uri": "gs://b/c.mp4", "features": []}))
    with pytest.raises(ValueError, match="NOT_A_FEATURE"):
        run(client.annotate_video({"input_uri": "gs://b/c.mp4", "features": ["NOT_A_FEATURE"]}))
    assert gapic.requests == []


def test_api_version_selects_message_types() -> None:
    gapic = FakeGapicClient(FakeOperationsClient([]), operations_pb2.Operation(name=OP_NAME))
    client = _client(gapic, api_version="v1p2beta1")

    assert client.operations.response_type is vi_p2.AnnotateVideoResponse
    assert client.operations.metadata_type is vi_p2.AnnotateVideoProgress


def test_unknown_api_version() -> None:
    gapic = FakeGapicClient(FakeOperationsClient([]), operations_pb2.Operation(name=OP_NAME))
    with pytest.raises(ConfigError):
        VideoIntelligenceClient(api_version="v9", gapic_client=gapic)


def test_resume_and_cancel_existing_operation() -> None:
    ops = FakeOperationsClient([operations_pb2.Operation(name=OP_NAME, done=False, metadata=pack(progress_message(10)))])
    gapic = FakeGapicClient(ops, operations_pb2.Operation(name=OP_NAME))
    client = _client(gapic, polling=PollingConfig(initial_interval=30, max_interval=30))

    async def scenario():
        future = await client.resume(OP_NAME)
        while not ops.get_calls:
            await asyncio.sleep(0.001)
        future.cancel(remote=True)
        with pytest.raises(CanceledError):
            await future.wait()
        return future

    future = run(scenario())

    assert future.state == OperationState.canceled
    assert ops.cancel_calls == [OP_NAME]


def test_get_operation_snapshot() -> None:
    ops = FakeOperationsClient([operations_pb2.Operation(name=OP_NAME, done=False, metadata=pack(progress_message(55)))])
    client = _client(FakeGapicClient(ops, operations_pb2.Operation(name=OP_NAME)))

    status = run(client.get_operation(OP_NAME))

    assert status.done is False
    assert status.metadata.annotation_progress[0].progress_percent == 55
