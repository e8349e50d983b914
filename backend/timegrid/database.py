from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from .config import settings


def _connect_args(url: str) -> dict:
    # check_same_thread=False is required to use SQLite from FastAPI worker threads
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.resolved_database_url,
    connect_args=_connect_args(settings.resolved_database_url),
)


# Foreign keys are off by default in SQLite
@event.listens_for(engine, "connect")
def enable_sqlite_fk(dbapi_connection, _):
    if engine.dialect.name != "sqlite":
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None) -> None:
    """Create all tables that do not exist yet."""
    from .models import Base
    Base.metadata.create_all(bind=bind or engine)
