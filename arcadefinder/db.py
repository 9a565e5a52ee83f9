from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import sessionmaker, declarative_base

from .config import settings

DATABASE_URL = settings.sqlalchemy_url
TIMEOUT = settings.db_timeout_seconds


def _connect_args(url: str) -> dict:
    # Bound every statement by the configured timeout
    if url.startswith("sqlite"):
        # check_same_thread=False: sessions are used from FastAPI's threadpool
        return {"check_same_thread": False, "timeout": TIMEOUT}
    if url.startswith("postgresql"):
        return {
            "connect_timeout": max(1, int(TIMEOUT)),
            "options": f"-c statement_timeout={int(TIMEOUT * 1000)}",
        }
    return {}


def _engine_kwargs(url: str) -> dict:
    kwargs = {"connect_args": _connect_args(url), "future": True, "pool_pre_ping": True}
    # SQLite in-memory databases use a singleton pool with no sizing knobs
    if not url.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=TIMEOUT,
        )
    return kwargs


engine = create_engine(DATABASE_URL, **_engine_kwargs(DATABASE_URL))

# Ensure SQLite enforces foreign keys
if DATABASE_URL.startswith("sqlite"):
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
Base = declarative_base()


def get_db():
    """FastAPI dependency: one session per request, closed when the request ends."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connectivity() -> bool:
    """Return True if a simple SELECT 1 succeeds."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
