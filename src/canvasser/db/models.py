"""
SQLAlchemy ORM Models

The canvassing core persists through a single key-value table: one row per
workspace key holding the full JSON snapshot.
"""
from sqlalchemy import Integer, String, Text, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.canvasser.db.base import Base, TimestampMixin

SNAPSHOT_SCHEMA_VERSION = 1


class SnapshotRecord(Base, TimestampMixin):
    """
    Persisted canvassing snapshot.

    payload holds CanvassingSnapshot JSON (camelCase keys). The count columns
    are denormalized for quick inspection only.
    """
    __tablename__ = "canvassing_snapshots"

    key: Mapped[str] = mapped_column(
        String(100),
        primary_key=True,
        comment="Workspace key"
    )
    payload: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="CanvassingSnapshot JSON"
    )
    schema_version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=SNAPSHOT_SCHEMA_VERSION,
        comment="Snapshot JSON schema version"
    )
    property_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    territory_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    route_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("property_count >= 0", name="check_property_count_non_negative"),
        CheckConstraint("territory_count >= 0", name="check_territory_count_non_negative"),
        CheckConstraint("route_count >= 0", name="check_route_count_non_negative"),
    )

    def __repr__(self) -> str:
        return (
            f"<SnapshotRecord(key={self.key}, properties={self.property_count}, "
            f"territories={self.territory_count})>"
        )
