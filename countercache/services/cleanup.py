from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError

from countercache.core.errors import OrphanCleanupError
from countercache.db.store import CounterStore
from countercache.services.statements import TEMP_TABLE_PATTERN, build_drop_leftover_statement

logger = logging.getLogger(__name__)


@dataclass
class CleanupReport:
    dropped: list[str] = field(default_factory=list)
    errors: list[OrphanCleanupError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def drop_orphaned_temporary_tables(store: CounterStore) -> CleanupReport:
    """Drop aggregate tables left behind by aborted counter jobs.

    Best effort: a table that cannot be dropped is reported and skipped.
    """

    report = CleanupReport()
    tables = store.list_tables(TEMP_TABLE_PATTERN)
    if not tables:
        logger.info("No leftover counter tables")
        return report

    for table in tables:
        try:
            store.execute_statement(build_drop_leftover_statement(table).sql)
        except SQLAlchemyError as exc:
            error = OrphanCleanupError(table=table, reason=str(getattr(exc, "orig", None) or exc))
            logger.warning("%s", error)
            report.errors.append(error)
            continue
        logger.info("Dropped leftover counter table %s", table)
        report.dropped.append(table)

    return report
