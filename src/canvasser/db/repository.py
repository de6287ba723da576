"""
Snapshot Repository

Key-value load/save of full canvassing snapshots.
"""
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from src.canvasser.db.models import SNAPSHOT_SCHEMA_VERSION, SnapshotRecord
from src.canvasser.models.snapshot import CanvassingSnapshot
from src.canvasser.utils.logger import get_logger

logger = get_logger(__name__)


class SnapshotRepository:
    """
    Persists CanvassingSnapshot JSON under a key.

    The repository never commits; the caller's session scope does.
    """

    def load(self, session: Session, key: str) -> Optional[CanvassingSnapshot]:
        """
        Load the snapshot stored under key.

        Args:
            session: Database session
            key: Workspace key

        Returns:
            CanvassingSnapshot, or None when nothing is stored

        Raises:
            ValidationError: Stored payload does not match the snapshot schema
        """
        record = session.get(SnapshotRecord, key)
        if record is None:
            logger.info("snapshot_not_found", key=key)
            return None

        try:
            snapshot = CanvassingSnapshot.model_validate_json(record.payload)
        except ValidationError as e:
            logger.error("snapshot_payload_invalid", key=key, error_count=e.error_count())
            raise

        logger.info(
            "snapshot_loaded",
            key=key,
            properties=len(snapshot.properties),
            territories=len(snapshot.territories),
            routes=len(snapshot.routes),
        )
        return snapshot

    def save(self, session: Session, key: str, snapshot: CanvassingSnapshot) -> SnapshotRecord:
        """
        Insert or replace the snapshot stored under key.

        Args:
            session: Database session
            key: Workspace key
            snapshot: Full state to store

        Returns:
            The persisted record (flushed, not committed)
        """
        payload = snapshot.model_dump_json(by_alias=True)
        record = session.get(SnapshotRecord, key)
        if record is None:
            record = SnapshotRecord(key=key, payload=payload)
            session.add(record)
        else:
            record.payload = payload

        record.schema_version = SNAPSHOT_SCHEMA_VERSION
        record.property_count = len(snapshot.properties)
        record.territory_count = len(snapshot.territories)
        record.route_count = len(snapshot.routes)
        session.flush()

        logger.info(
            "snapshot_saved",
            key=key,
            properties=record.property_count,
            territories=record.territory_count,
            routes=record.route_count,
            payload_bytes=len(payload),
        )
        return record

    def delete(self, session: Session, key: str) -> bool:
        record = session.get(SnapshotRecord, key)
        if record is None:
            return False
        session.delete(record)
        session.flush()
        logger.info("snapshot_deleted", key=key)
        return True

    def keys(self, session: Session) -> List[str]:
        return list(session.execute(select(SnapshotRecord.key).order_by(SnapshotRecord.key)).scalars())
