from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, List, Optional

from google.rpc import code_pb2

from ..errors import (
    CanceledError,
    DeadlineExceededError,
    OperationError,
    RemoteOperationError,
    TransportError,
    WaitTimeoutError,
)
from .handle import OperationHandle, OperationState
from .poller import Poller

logger = logging.getLogger(__name__)

ProgressListener = Callable[[Any], None]
CompleteListener = Callable[[Any, Any, Optional[OperationError]], None]


class ResultFuture:
    """Caller-facing handle for one long-running operation.

    Listeners registered with ``on_complete`` fire exactly once with
    ``(result, metadata, error)``. Registering after the operation finished
    delivers the terminal event immediately instead of dropping it.
    """

    def __init__(self, handle: OperationHandle, poller: Poller) -> None:
        self._handle = handle
        self._poller = poller
        self._progress_listeners: List[ProgressListener] = []
        self._complete_listeners: List[CompleteListener] = []
        self._task: Optional[asyncio.Task] = None
        self._completed = False
        poller.on_progress = self._deliver_progress

    @property
    def name(self) -> str:
        return self._handle.id

    @property
    def handle(self) -> OperationHandle:
        return self._handle

    @property
    def metadata(self) -> Any:
        return self._handle.metadata

    @property
    def state(self) -> OperationState:
        return self._handle.state

    def start(self) -> "ResultFuture":
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._drive(), name=f"poll:{self.name}")
        return self

    async def _drive(self) -> None:
        try:
            await self._poller.run()
        finally:
            if self._handle.done:
                self._deliver_complete()

    def done(self) -> bool:
        return self._completed

    def on_progress(self, listener: ProgressListener) -> Callable[[], None]:
        if not self._completed:
            self._progress_listeners.append(listener)
        return lambda: self._discard(self._progress_listeners, listener)

    def on_complete(self, listener: CompleteListener) -> Callable[[], None]:
        if self._completed:
            self._invoke(listener, self._handle.result, self._handle.metadata, self.exception())
            return lambda: None
        self._complete_listeners.append(listener)
        return lambda: self._discard(self._complete_listeners, listener)

    def cancel(self, remote: bool = False) -> None:
        if self._completed:
            return
        self._poller.cancel(remote=remote)

    async def wait(self, timeout: Optional[float] = None) -> Any:
        """Wait for the operation and return its result, raising its error on failure."""
        if self._task is None:
            self.start()
        try:
            await asyncio.wait_for(asyncio.shield(self._task), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise WaitTimeoutError(f"Timed out after {timeout}s waiting for {self.name}") from e
        return self.result()

    def result(self) -> Any:
        if not self._handle.done:
            raise asyncio.InvalidStateError(f"Operation {self.name} is not done")
        err = self.exception()
        if err is not None:
            raise err
        return self._handle.result

    def exception(self) -> Optional[OperationError]:
        info = self._handle.error
        if info is None:
            return None
        if not info.local:
            return RemoteOperationError(info.message, code=info.code)
        if info.code == code_pb2.CANCELLED:
            return CanceledError(info.message)
        if info.code == code_pb2.DEADLINE_EXCEEDED:
            return DeadlineExceededError(info.message)
        if info.code == code_pb2.UNAVAILABLE:
            return TransportError(info.message)
        return OperationError(info.message, code=info.code)

    def _deliver_progress(self, metadata: Any) -> None:
        for listener in list(self._progress_listeners):
            try:
                listener(metadata)
            except Exception:  # noqa: BLE001
                logger.exception("Operation %s: progress listener failed", self.name)

    def _deliver_complete(self) -> None:
        self._completed = True
        listeners, self._complete_listeners = self._complete_listeners, []
        self._progress_listeners = []
        err = self.exception()
        for listener in listeners:
            self._invoke(listener, self._handle.result, self._handle.metadata, err)

    def _invoke(self, listener: CompleteListener, result: Any, metadata: Any, err: Optional[OperationError]) -> None:
        try:
            listener(result, metadata, err)
        except Exception:  # noqa: BLE001
            logger.exception("Operation %s: completion listener failed", self.name)

    @staticmethod
    def _discard(listeners: list, listener: Callable) -> None:
        if listener in listeners:
            listeners.remove(listener)
