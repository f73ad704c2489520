from __future__ import annotations

"""
Operation poller
----------------

Drives repeated status checks for one long-running operation until it
reaches a terminal state, is canceled locally, or runs past its deadline.

Example
~~~~~~~

    handle = OperationHandle(id=operation_name)
    poller = Poller(handle, transport.fetch_status, PollingConfig(initial_interval=2))
    await poller.run()
    print(handle.state, handle.result)

Notes
~~~~~
- The first status check happens immediately; only later checks wait.
- ``fetch_status`` must raise ``TransportError`` for retryable network
  failures. A failed operation is a *successful* fetch carrying ``error``.
- ``cancel()`` abandons the operation locally. The remote operation keeps
  running unless ``remote=True`` and a ``request_remote_cancel`` callable is
  configured.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Optional

from google.rpc import code_pb2

from ..dto import OperationErrorInfo, OperationStatus, PollingConfig
from ..errors import TransportError
from .handle import OperationHandle

logger = logging.getLogger(__name__)

FetchStatus = Callable[[str], Awaitable[OperationStatus]]
RemoteCancel = Callable[[str], Awaitable[None]]
ProgressCallback = Callable[[Any], None]


class Poller:
    def __init__(
        self,
        handle: OperationHandle,
        fetch_status: FetchStatus,
        config: Optional[PollingConfig] = None,
        *,
        request_remote_cancel: Optional[RemoteCancel] = None,
        on_progress: Optional[ProgressCallback] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.handle = handle
        self.config = config or PollingConfig()
        self.interval = self.config.initial_interval
        self.attempts = 0
        self.transport_failures = 0
        self._fetch_status: Optional[FetchStatus] = fetch_status
        self._request_remote_cancel = request_remote_cancel
        self.on_progress = on_progress
        self._clock = clock
        self._cancel_requested = False
        self._remote_cancel_requested = False
        self._wake: Optional[asyncio.Event] = None
        self._running = False

    @property
    def deadline(self) -> Optional[float]:
        return self.config.deadline

    def cancel(self, remote: bool = False) -> None:
        if self.handle.done:
            return
        self._cancel_requested = True
        self._remote_cancel_requested = self._remote_cancel_requested or remote
        if self._wake is not None:
            self._wake.set()

    async def run(self) -> OperationHandle:
        """Poll until terminal; never raises for fetch failures."""
        if self._running:
            raise RuntimeError(f"Poller for {self.handle.id} is already running")
        self._running = True
        self._wake = asyncio.Event()
        try:
            await self._loop()
        finally:
            self._release()
        return self.handle

    async def _loop(self) -> None:
        handle = self.handle
        last_metadata = handle.metadata
        while not handle.done:
            if self._cancel_requested:
                await self._finish_canceled()
                return
            if self.deadline is not None and self._clock() >= self.deadline:
                self._finish_local(code_pb2.DEADLINE_EXCEEDED, "Polling deadline exceeded")
                logger.warning("Operation %s abandoned: deadline exceeded after %s fetches", handle.id, self.attempts)
                return

            self.attempts += 1
            try:
                status = await self._fetch_status(handle.id)
            except TransportError as e:
                self.transport_failures += 1
                if self.transport_failures > self.config.max_retries:
                    logger.error("Operation %s: giving up after %s transport failures: %s", handle.id, self.transport_failures, e)
                    self._finish_local(code_pb2.UNAVAILABLE, f"Status check failed: {e}")
                    return
                logger.warning(
                    "Operation %s: status check %s/%s failed: %s",
                    handle.id,
                    self.transport_failures,
                    self.config.max_retries,
                    e,
                )
            except Exception as e:  # noqa: BLE001
                logger.exception("Operation %s: unexpected status check failure", handle.id)
                self._finish_local(code_pb2.UNKNOWN, f"Status check failed: {e}")
                return
            else:
                self.transport_failures = 0
                if self._cancel_requested:
                    # result arrived after cancel(); the caller already gave up on it
                    await self._finish_canceled()
                    return
                if handle.apply_status(status):
                    logger.info("Operation %s finished: %s", handle.id, handle.state)
                    return
                if status.metadata != last_metadata:
                    last_metadata = status.metadata
                    self._emit_progress(status.metadata)

            await self._sleep()
            self.interval = min(self.interval * self.config.backoff_multiplier, self.config.max_interval)

    async def _sleep(self) -> None:
        delay = self.interval
        if self.deadline is not None:
            delay = max(0.0, min(delay, self.deadline - self._clock()))
        if delay <= 0 or self._wake is None:
            await asyncio.sleep(0)
            return
        try:
            await asyncio.wait_for(self._wake.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass

    def _emit_progress(self, metadata: Any) -> None:
        if self.on_progress is None:
            return
        try:
            self.on_progress(metadata)
        except Exception:  # noqa: BLE001
            logger.exception("Operation %s: progress callback failed", self.handle.id)

    def _finish_local(self, code: int, message: str) -> None:
        self.handle.apply_update(
            self.handle.metadata,
            True,
            error=OperationErrorInfo(code=code, message=message, local=True),
        )

    async def _finish_canceled(self) -> None:
        self._finish_local(code_pb2.CANCELLED, "Operation canceled by caller")
        logger.info("Operation %s canceled locally", self.handle.id)
        if not (self._remote_cancel_requested and self._request_remote_cancel):
            return
        try:
            await self._request_remote_cancel(self.handle.id)
        except TransportError as e:
            logger.warning("Operation %s: remote cancel failed: %s", self.handle.id, e)
        except Exception:  # noqa: BLE001
            logger.exception("Operation %s: remote cancel raised", self.handle.id)

    def _release(self) -> None:
        self._wake = None
        self._fetch_status = None
        self.on_progress = None
