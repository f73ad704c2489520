from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from vi_annotate import CanceledError, OperationError, ResultFuture
from vi_annotate.utils.jsonable import to_jsonable

from .schemas import JobError, JobStatus


@dataclass
class Job:
    job_id: str
    operation_name: str
    status: JobStatus = JobStatus.in_progress
    created_at: float = field(default_factory=lambda: time.time())
    updated_at: float = field(default_factory=lambda: time.time())
    progress: Any = None
    result: Any = None
    error: Optional[JobError] = None
    future: Optional[ResultFuture] = None


class JobStore:
    def __init__(self) -> None:
        self._jobs: Dict[str, Job] = {}
        self._lock = threading.RLock()

    def create(self, operation_name: str, future: Optional[ResultFuture] = None) -> Job:
        job_id = str(uuid.uuid4())
        job = Job(job_id=job_id, operation_name=operation_name, future=future)
        with self._lock:
            self._jobs[job_id] = job
        return job

    def track(self, future: ResultFuture) -> Job:
        """Create a job fed by the future's progress and completion events."""
        job = self.create(future.name, future)
        job.progress = to_jsonable(future.metadata)
        future.on_progress(lambda metadata: self.set_progress(job.job_id, metadata))
        future.on_complete(lambda result, metadata, err: self.complete(job.job_id, result, metadata, err))
        return job

    def get(self, job_id: str) -> Optional[Job]:
        with self._lock:
            return self._jobs.get(job_id)

    def set_progress(self, job_id: str, metadata: Any) -> None:
        with self._lock:
            job = self._jobs[job_id]
            job.progress = to_jsonable(metadata)
            job.updated_at = time.time()

    def complete(self, job_id: str, result: Any, metadata: Any, err: Optional[OperationError]) -> None:
        with self._lock:
            job = self._jobs[job_id]
            job.progress = to_jsonable(metadata)
            if err is None:
                job.status = JobStatus.completed
                job.result = to_jsonable(result)
            else:
                job.status = JobStatus.canceled if isinstance(err, CanceledError) else JobStatus.error
                job.error = JobError(code=err.code, message=err.message)
            job.future = None
            job.updated_at = time.time()


job_store = JobStore()
