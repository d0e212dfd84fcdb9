import os
import tempfile
from pathlib import Path

_tmpdir = Path(tempfile.mkdtemp(prefix="countercache_test_"))
_db_path = _tmpdir / "test.db"

os.environ.setdefault("DATABASE_URL", f"sqlite:///{_db_path.as_posix()}")
os.environ.setdefault("ADMIN_TOKEN", "test-admin-token")
os.environ.setdefault("LOG_DIR", (_tmpdir / "logs").as_posix())

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text

from countercache.db.base import Base
from countercache.db.session import SessionLocal, engine, open_store
from countercache.main import create_app

import countercache.models  # noqa: F401


@pytest.fixture()
def clean_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db(clean_db):
    session = SessionLocal()
    try:
        yield session
        session.commit()
    finally:
        session.close()


@pytest.fixture()
def store(clean_db):
    with open_store() as s:
        yield s


@pytest.fixture()
def client(clean_db):
    app = create_app()
    with TestClient(app) as c:
        yield c


def admin_header(token: str = "test-admin-token") -> dict[str, str]:
    return {"X-Admin-Token": token}


def fetch_all(db, sql: str) -> list[tuple]:
    db.expire_all()
    return [tuple(r) for r in db.execute(text(sql)).all()]
