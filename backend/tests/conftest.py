"""
Shared pytest fixtures.

Environment variables are set here, before anything imports orderdesk, so the
settings singleton and the app engine point at a throwaway SQLite file.
"""
import os
import sys
import tempfile

# Ensure the orderdesk package is importable when running pytest from project root
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

_tmp_db = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
_tmp_db.close()

os.environ["DATABASE_URL"] = f"sqlite:///{_tmp_db.name}"
os.environ["LOG_FILE"] = ""
os.environ["AUTH_ENABLED"] = "false"

import pytest  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

import orderdesk.models  # noqa: E402,F401 – registers every table
from orderdesk.models.order import OrderLine  # noqa: E402


@pytest.fixture
def session():
    """A session on a fresh in-memory database, one per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as s:
        yield s
    engine.dispose()


@pytest.fixture
def seed_lines(session):
    """Insert order lines directly; returns the persisted rows."""

    def _seed(*lines: dict) -> list[OrderLine]:
        rows = [OrderLine(**line) for line in lines]
        session.add_all(rows)
        session.commit()
        for row in rows:
            session.refresh(row)
        return rows

    return _seed


def pytest_sessionfinish(session, exitstatus):
    try:
        os.unlink(_tmp_db.name)
    except OSError:
        pass
