from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from countercache.core.errors import StatementError
from countercache.db.store import CounterStore
from countercache.services.statements import Statement

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatementOutcome:
    index: int
    statement: Statement
    duration_seconds: float
    rows: int | None


def _say(message: str, subitem: bool = False) -> None:
    logger.info("%s %s", "   ->" if subitem else "--", message)


def _run_one(store: CounterStore, statement: Statement, *, index: int, job: str) -> StatementOutcome:
    start = time.perf_counter()
    try:
        rows = store.execute_statement(statement.sql)
    except SQLAlchemyError as exc:
        logger.error("%s: statement #%s failed: %s", job, index, statement)
        reason = str(getattr(exc, "orig", None) or exc)
        raise StatementError(job=job, index=index, statement=statement.sql, reason=reason) from exc
    return StatementOutcome(
        index=index,
        statement=statement,
        duration_seconds=time.perf_counter() - start,
        rows=rows,
    )


def execute(
    store: CounterStore,
    statements: Statement | Sequence[Statement],
    *,
    title: str = "Executing SQL",
    job: str | None = None,
) -> list[StatementOutcome]:
    """Run statements one after another on ``store``.

    Stops at the first failure with a ``StatementError``. Statements that
    already ran stay committed.
    """

    single = isinstance(statements, Statement)
    if single:
        title = statements.sql
        statements = [statements]
    job = job or title

    _say(title)
    outcomes = []
    for index, statement in enumerate(statements):
        if not single:
            _say(statement.sql, subitem=True)
        outcome = _run_one(store, statement, index=index, job=job)
        _say(f"{outcome.duration_seconds:.4f}s", subitem=True)
        if outcome.rows is not None:
            _say(f"{outcome.rows} rows", subitem=True)
        outcomes.append(outcome)
    return outcomes
