from __future__ import annotations

from enum import StrEnum
from typing import Any, Optional
from pydantic import BaseModel

from vi_annotate import AnnotateVideoRequest


class JobStatus(StrEnum):
    in_progress = "in_progress"
    completed = "completed"
    error = "error"
    canceled = "canceled"


class CreateAnnotationRequest(AnnotateVideoRequest):
    api_version: Optional[str] = None


class CreateAnnotationResponse(BaseModel):
    job_id: str
    operation_name: str
    status: JobStatus = JobStatus.in_progress


class JobError(BaseModel):
    code: int
    message: str


class JobInfo(BaseModel):
    job_id: str
    status: JobStatus
    operation_name: Optional[str] = None
    progress: Any = None
    result: Any = None
    error: Optional[JobError] = None
