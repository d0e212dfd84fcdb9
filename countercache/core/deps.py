from __future__ import annotations

import logging
import secrets
from collections.abc import Generator

from fastapi import Header, HTTPException, status

from countercache.core.config import settings
from countercache.db.session import open_store
from countercache.db.store import CounterStore

logger = logging.getLogger(__name__)


def require_admin_token(x_admin_token: str | None = Header(default=None)) -> None:
    expected = settings.admin_token
    if not expected:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Admin API disabled")
    if not x_admin_token or not secrets.compare_digest(x_admin_token, expected):
        logger.warning("Rejected counters request with invalid admin token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid admin token")


def get_store() -> Generator[CounterStore, None, None]:
    with open_store() as store:
        yield store
