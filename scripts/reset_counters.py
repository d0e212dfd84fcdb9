from __future__ import annotations

import logging
import sys

from countercache.core.config import settings
from countercache.core.errors import DescriptorError, StatementError, UnknownJobError
from countercache.core.logging_config import configure_logging
from countercache.db.session import open_store
from countercache.services.catalog import JOBS, run_jobs
from countercache.services.cleanup import drop_orphaned_temporary_tables

logger = logging.getLogger(__name__)

USAGE = "Usage: python scripts/reset_counters.py <job>... | all | clean | list"


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if not args:
        print(USAGE)
        return 2

    if args == ["list"]:
        for job in JOBS.values():
            print(f"{job.name:<26} {job.description}")
        return 0

    configure_logging(log_dir=settings.log_dir, level=settings.log_level)

    if args == ["clean"]:
        with open_store() as store:
            report = drop_orphaned_temporary_tables(store)
        print(f"Dropped {len(report.dropped)} table(s)")
        for error in report.errors:
            print(error)
        return 0 if report.ok else 1

    names = list(JOBS) if args == ["all"] else args
    try:
        with open_store() as store:
            run_jobs(store, names)
    except UnknownJobError as exc:
        print(exc)
        print(USAGE)
        return 2
    except (DescriptorError, StatementError) as exc:
        logger.error("Counter reset aborted: %s", exc)
        print(f"Failed: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
