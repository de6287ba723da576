"""
Database Session Management

Provides the engine, session factory and session helpers for the snapshot
store.
"""
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event, exc, pool, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.engine import Engine

from config.settings import settings
from src.canvasser.utils.logger import get_logger

logger = get_logger(__name__)


def build_engine(database_url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """
    Create an engine for the configured database.

    SQLite gets a thread-shareable connection; server databases get the
    configured connection pool.

    Args:
        database_url: Override settings.database_url
        echo: Override settings.database_echo
    """
    url = database_url or settings.database_url
    kwargs = {
        "pool_pre_ping": True,  # Verify connections before using
        "echo": settings.database_echo if echo is None else echo,
    }
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_timeout=settings.database_pool_timeout,
            pool_recycle=settings.database_pool_recycle,
        )
    return create_engine(url, **kwargs)


engine = build_engine()


@event.listens_for(pool.Pool, "invalidate")
def receive_invalidate(dbapi_conn, connection_record, exception):
    """
    Event listener for connection invalidation.

    Logs when a connection is marked as invalid and removed from pool.
    """
    logger.warning(
        "database_connection_invalidated",
        exception=str(exception) if exception else None
    )


# Create session factory
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False
)


@contextmanager
def get_db_session(factory: Optional[sessionmaker] = None) -> Generator[Session, None, None]:
    """
    Session scope for snapshot reads and writes.

    Commits on a clean exit, rolls back and re-raises otherwise.

    Usage:
        with get_db_session() as session:
            SnapshotRepository().save(session, key, snapshot)

    Args:
        factory: Session factory to use instead of SessionLocal
    """
    session = (factory or SessionLocal)()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(
            "snapshot_session_rollback",
            error=str(e),
            error_type=type(e).__name__,
            database_error=isinstance(e, exc.SQLAlchemyError),
        )
        raise
    finally:
        session.close()


def health_check(factory: Optional[sessionmaker] = None) -> bool:
    """True when the snapshot database answers a trivial query."""
    try:
        with get_db_session(factory) as session:
            session.execute(text("SELECT 1"))
    except exc.SQLAlchemyError as e:
        logger.error("snapshot_store_unreachable", error=str(e))
        return False
    return True


def create_all_tables(bind: Optional[Engine] = None):
    """
    Create the snapshot table if missing.

    The store is a single key-value table, so no migration tooling is used.
    """
    from src.canvasser.db.base import Base, import_all_models

    import_all_models()
    Base.metadata.create_all(bind=bind or engine)
    logger.info("snapshot_tables_created")


def drop_all_tables(bind: Optional[Engine] = None):
    """Drop the snapshot table. Deletes every stored workspace."""
    from src.canvasser.db.base import Base, import_all_models

    logger.warning("snapshot_tables_dropping")
    import_all_models()
    Base.metadata.drop_all(bind=bind or engine)
