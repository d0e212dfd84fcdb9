from __future__ import annotations

import logging
import re

from sqlalchemy import inspect
from sqlalchemy.engine import Connection

logger = logging.getLogger(__name__)


class CounterStore:
    """The slice of a database connection the counter jobs need.

    Statements are sent as raw text: they are generated from validated
    identifiers, never from user input, and carry no bind parameters.
    """

    def __init__(self, connection: Connection) -> None:
        self._conn = connection

    @property
    def dialect_name(self) -> str:
        return self._conn.dialect.name

    def execute_statement(self, sql: str) -> int | None:
        result = self._conn.exec_driver_sql(sql)
        rowcount = result.rowcount
        result.close()
        # DDL reports -1
        if rowcount is None or rowcount < 0:
            return None
        return int(rowcount)

    def list_tables(self, pattern: str) -> list[str]:
        regex = re.compile(pattern)
        inspector = inspect(self._conn)

        names = set(inspector.get_table_names())
        try:
            names.update(inspector.get_temp_table_names())
        except NotImplementedError:
            logger.debug("Dialect %s cannot list temporary tables", self.dialect_name)

        return sorted(n for n in names if regex.search(n))
