from __future__ import annotations

"""
Video Intelligence client
-------------------------

Starts ``annotateVideo`` long-running operations and hands back a
:class:`~vi_annotate.lro.ResultFuture` that polls them to completion.

Examples
~~~~~~~~

    from vi_annotate import VideoIntelligenceClient, PollingConfig

    client = VideoIntelligenceClient(api_version="v1", polling=PollingConfig(initial_interval=5))
    future = await client.annotate_video(
        {"input_uri": "gs://cloud-samples-data/video/cat.mp4", "features": ["LABEL_DETECTION"]}
    )
    future.on_progress(lambda progress: print(progress))
    response = await future.wait()

Resume an operation started elsewhere:

    future = await client.resume("projects/.../operations/123")

Notes
~~~~~
- Authentication follows Application Default Credentials inside the gapic
  client; nothing here touches credentials.
- ``features`` are enum names of the selected API version, e.g.
  ``LABEL_DETECTION``, ``SHOT_CHANGE_DETECTION``, ``EXPLICIT_CONTENT_DETECTION``.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Union

from google.api_core.client_options import ClientOptions
from google.cloud import (
    videointelligence_v1,
    videointelligence_v1beta2,
    videointelligence_v1p1beta1,
    videointelligence_v1p2beta1,
    videointelligence_v1p3beta1,
)

from .dto import AnnotateVideoRequest, OperationStatus, PollingConfig
from .errors import ConfigError, TransportError
from .lro import OperationHandle, Poller, ResultFuture
from .transport import RETRYABLE_EXCEPTIONS, OperationsTransport
from .utils.retry import build_retry

logger = logging.getLogger(__name__)

SERVICE_PATH = "videointelligence.googleapis.com"
PORT = 443
SCOPES = ("https://www.googleapis.com/auth/cloud-platform",)

API_MODULES = {
    "v1": videointelligence_v1,
    "v1beta2": videointelligence_v1beta2,
    "v1p1beta1": videointelligence_v1p1beta1,
    "v1p2beta1": videointelligence_v1p2beta1,
    "v1p3beta1": videointelligence_v1p3beta1,
}


class VideoIntelligenceClient:
    def __init__(
        self,
        api_version: str = "v1",
        api_endpoint: Optional[str] = None,
        polling: Optional[PollingConfig] = None,
        initial_call_retries: int = 3,
        retry_min_wait: float = 1.0,
        gapic_client: Any = None,
    ) -> None:
        if api_version not in API_MODULES:
            raise ConfigError(f"Unsupported API version {api_version!r}; expected one of {', '.join(API_MODULES)}")
        self.api_version = api_version
        self.api_endpoint = api_endpoint or SERVICE_PATH
        self.polling = polling or PollingConfig()
        self._vi = API_MODULES[api_version]
        if gapic_client is None:
            options = ClientOptions(api_endpoint=self.api_endpoint, scopes=list(SCOPES))
            gapic_client = self._vi.VideoIntelligenceServiceClient(client_options=options)
        self._gapic = gapic_client
        self.operations = OperationsTransport(
            gapic_client.transport.operations_client,
            response_type=self._vi.AnnotateVideoResponse,
            metadata_type=self._vi.AnnotateVideoProgress,
        )
        self._annotate = build_retry(initial_call_retries, RETRYABLE_EXCEPTIONS, min_wait=retry_min_wait)(
            self._annotate_once
        )

    def build_request(self, req: AnnotateVideoRequest) -> Any:
        payload = req.to_payload()
        try:
            payload["features"] = [self._vi.Feature[name.upper()] for name in req.features]
        except KeyError as e:
            raise ValueError(f"Unknown feature {e.args[0]!r} for API {self.api_version}") from e
        return self._vi.AnnotateVideoRequest(**payload)

    def _annotate_once(self, request: Any) -> Any:
        return self._gapic.annotate_video(request=request)

    async def annotate_video(
        self,
        request: Union[AnnotateVideoRequest, Dict[str, Any]],
        polling: Optional[PollingConfig] = None,
        timeout: Optional[float] = None,
    ) -> ResultFuture:
        req = request if isinstance(request, AnnotateVideoRequest) else AnnotateVideoRequest.model_validate(request)
        api_request = self.build_request(req)
        try:
            operation = await asyncio.to_thread(self._annotate, api_request)
        except RETRYABLE_EXCEPTIONS as e:
            raise TransportError(f"annotateVideo failed: {e}") from e
        raw = operation.operation
        logger.info("annotateVideo started %s (features=%s)", raw.name, ",".join(req.features))
        return self._track(raw.name, self.operations.to_status(raw), polling, timeout)

    async def resume(
        self,
        name: str,
        polling: Optional[PollingConfig] = None,
        timeout: Optional[float] = None,
    ) -> ResultFuture:
        return self._track(name, None, polling, timeout)

    async def get_operation(self, name: str) -> OperationStatus:
        return await self.operations.fetch_status(name)

    async def cancel_operation(self, name: str) -> None:
        await self.operations.cancel(name)

    def _track(
        self,
        name: str,
        initial: Optional[OperationStatus],
        polling: Optional[PollingConfig],
        timeout: Optional[float],
    ) -> ResultFuture:
        config = polling or self.polling
        if timeout is not None:
            config = config.with_timeout(timeout)
        handle = OperationHandle(id=name)
        if initial is not None:
            handle.apply_status(initial)
        poller = Poller(
            handle,
            self.operations.fetch_status,
            config,
            request_remote_cancel=self.operations.cancel,
        )
        return ResultFuture(handle, poller).start()
