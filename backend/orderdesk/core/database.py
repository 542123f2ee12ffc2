"""SQLModel database engine and session management."""
from sqlmodel import SQLModel, create_engine, Session
from orderdesk.core.config import settings

# Import models so SQLModel.metadata knows about all tables
import orderdesk.models.people  # noqa: F401
import orderdesk.models.stock  # noqa: F401
import orderdesk.models.order  # noqa: F401

# check_same_thread only means something to SQLite
_connect_args = (
    {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}
)

engine = create_engine(
    settings.DATABASE_URL,
    connect_args=_connect_args,
    echo=False,
)


def create_db_and_tables() -> None:
    """Create all tables defined in SQLModel models."""
    SQLModel.metadata.create_all(engine)


def get_session():
    """FastAPI dependency: yields a SQLModel session, closed on every exit path."""
    with Session(engine) as session:
        yield session
