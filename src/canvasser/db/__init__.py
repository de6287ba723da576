"""
Database Package

Snapshot persistence: engine, sessions, the snapshot table and repository.
"""
from src.canvasser.db.base import Base
from src.canvasser.db.session import (
    engine,
    SessionLocal,
    build_engine,
    get_db_session,
    health_check,
    create_all_tables,
    drop_all_tables,
)
from src.canvasser.db.models import SnapshotRecord
from src.canvasser.db.repository import SnapshotRepository

__all__ = [
    "Base",
    "engine",
    "SessionLocal",
    "build_engine",
    "get_db_session",
    "health_check",
    "create_all_tables",
    "drop_all_tables",
    "SnapshotRecord",
    "SnapshotRepository",
]
