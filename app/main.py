from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException

from vi_annotate import ConfigError, TransportError
from vi_annotate.logging import setup_logging

from .config import get_settings
from .jobs import Job, job_store
from .schemas import CreateAnnotationRequest, CreateAnnotationResponse, JobInfo, JobStatus
from .services.video_intel import get_client

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Video Annotation Jobs", version="1.0.0")


def _job_info(job: Job) -> JobInfo:
    return JobInfo(
        job_id=job.job_id,
        status=job.status,
        operation_name=job.operation_name,
        progress=job.progress,
        result=job.result,
        error=job.error,
    )


@app.post("/annotations", response_model=CreateAnnotationResponse)
async def create_annotation_job(body: CreateAnnotationRequest):
    try:
        client = get_client(body.api_version)
        future = await client.annotate_video(
            body.model_dump(exclude={"api_version"}),
            timeout=get_settings().poll_timeout,
        )
    except (ConfigError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except TransportError as e:
        logger.warning("annotateVideo unavailable: %s", e)
        raise HTTPException(status_code=503, detail=str(e)) from e

    job = job_store.track(future)
    logger.info("Job %s tracks operation %s", job.job_id, job.operation_name)
    return CreateAnnotationResponse(job_id=job.job_id, operation_name=job.operation_name, status=job.status)


@app.get("/jobs/{job_id}", response_model=JobInfo)
async def get_job(job_id: str):
    job = job_store.get(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return _job_info(job)


@app.delete("/jobs/{job_id}", response_model=JobInfo, status_code=202)
async def cancel_job(job_id: str):
    job = job_store.get(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    if job.future is not None and job.status == JobStatus.in_progress:
        job.future.cancel(remote=True)
    return _job_info(job)


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}
