from __future__ import annotations

from pydantic import BaseModel


class CounterJobResponse(BaseModel):
    name: str
    description: str
    steps: list[str]


class CounterJobListResponse(BaseModel):
    items: list[CounterJobResponse]
    total: int


class StatementOutcomeResponse(BaseModel):
    index: int
    sql: str
    duration_seconds: float
    rows: int | None


class JobRunResponse(BaseModel):
    job: str
    statements: list[StatementOutcomeResponse]
    duration_seconds: float


class CleanupResponse(BaseModel):
    dropped: list[str]
    failed: dict[str, str]
