from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from countercache.core.deps import get_store, require_admin_token
from countercache.core.errors import DescriptorError, StatementError, UnknownJobError
from countercache.db.store import CounterStore
from countercache.schemas.counters import (
    CleanupResponse,
    CounterJobListResponse,
    CounterJobResponse,
    JobRunResponse,
    StatementOutcomeResponse,
)
from countercache.services.catalog import JOBS, CounterJob, get_job, run_job
from countercache.services.cleanup import drop_orphaned_temporary_tables

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/counters", tags=["counters"], dependencies=[Depends(require_admin_token)])


def _to_job_response(job: CounterJob) -> CounterJobResponse:
    return CounterJobResponse(name=job.name, description=job.description, steps=[title for title, _ in job.steps])


@router.get("/jobs", response_model=CounterJobListResponse)
def list_jobs() -> CounterJobListResponse:
    items = [_to_job_response(job) for job in JOBS.values()]
    return CounterJobListResponse(items=items, total=len(items))


@router.post("/jobs/{name}", response_model=JobRunResponse)
def reset_counters(name: str, store: CounterStore = Depends(get_store)) -> JobRunResponse:
    try:
        job = get_job(name)
    except UnknownJobError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")

    try:
        outcomes = run_job(store, job)
    except StatementError as exc:
        logger.exception("Counter job %s failed", name)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"job": exc.job, "index": exc.index, "statement": exc.statement, "error": exc.reason},
        )
    except DescriptorError as exc:
        logger.exception("Counter job %s is misconfigured", name)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))

    return JobRunResponse(
        job=job.name,
        statements=[
            StatementOutcomeResponse(index=o.index, sql=o.statement.sql, duration_seconds=o.duration_seconds, rows=o.rows)
            for o in outcomes
        ],
        duration_seconds=sum(o.duration_seconds for o in outcomes),
    )


@router.post("/cleanup", response_model=CleanupResponse)
def cleanup(store: CounterStore = Depends(get_store)) -> CleanupResponse:
    report = drop_orphaned_temporary_tables(store)
    return CleanupResponse(dropped=report.dropped, failed={e.table: e.reason for e in report.errors})
