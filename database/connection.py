"""
Database connection and session management.
"""
from contextlib import contextmanager
from typing import Generator
from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import sessionmaker, Session
from config.settings import settings
from .models import Base


def _ensure_database_exists():
    """Create the MySQL database if it does not already exist."""
    from urllib.parse import urlparse

    parsed = urlparse(settings.database_url)
    db_name = parsed.path.lstrip("/")
    # Build a URL without the database name so we can connect to the server
    server_url = settings.database_url.rsplit("/", 1)[0]
    tmp_engine = create_engine(server_url, pool_pre_ping=True)
    with tmp_engine.connect() as conn:
        conn.execute(text(f"CREATE DATABASE IF NOT EXISTS `{db_name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"))
        conn.commit()
    tmp_engine.dispose()


def _begin_immediate(sqlite_engine):
    """
    Take SQLite's write lock at the start of every transaction.

    pysqlite defers BEGIN until the first write, so a read-then-insert (the
    duplicate grade check) would not be atomic and ``FOR UPDATE`` is ignored.
    """

    @event.listens_for(sqlite_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(sqlite_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return sqlite_engine


def _create_engine():
    if settings.database_url.startswith("sqlite"):
        # Sessions are handed across threads by the ASGI test client
        return _begin_immediate(create_engine(
            settings.database_url,
            connect_args={"check_same_thread": False, "timeout": 15},
            echo=settings.debug,
        ))

    if settings.database_url.startswith("mysql"):
        _ensure_database_exists()

    return create_engine(
        settings.database_url,
        pool_pre_ping=True,
        pool_recycle=3600,
        echo=settings.debug,
    )


# Create engine
engine = _create_engine()

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db():
    """Initialize database by creating all tables."""
    Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Get database session.
    Use as dependency injection in FastAPI.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_context():
    """
    Context manager for database session.
    Use for non-FastAPI contexts.
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
