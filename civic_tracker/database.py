from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from civic_tracker.config import get_settings


# ── Engine ────────────────────────────────────────────────────────────────────
def build_engine(url: str) -> Engine:
    """
    pool_pre_ping=True: SQLAlchemy tests every connection before using it.
    SQLite (local dev, tests) gets no pool sizing and may be shared across
    FastAPI's worker threads.
    """
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=10,        # number of persistent connections in pool
        max_overflow=20,     # extra connections allowed beyond pool_size under load
    )


engine = build_engine(get_settings().database_url)

# ── Session Factory ───────────────────────────────────────────────────────────
SessionLocal = sessionmaker(
    autocommit=False,   # we manage commits explicitly — critical for atomic ops
    autoflush=False,    # don't auto-flush; we control when SQL is sent to DB
    bind=engine,
)


# ── Declarative Base ──────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    pass


# ── Dependency ────────────────────────────────────────────────────────────────
def get_db():
    """
    FastAPI dependency that yields a DB session and guarantees cleanup.
    Use as: db: Session = Depends(get_db)
    Anything left uncommitted when the endpoint raises is rolled back on close.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
