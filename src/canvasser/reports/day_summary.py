"""
Day Summary

End-of-day report of every property a rep pinned or worked on a given day,
grouped by current status, with a flat CSV export.
"""
import csv
from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple
from zoneinfo import ZoneInfo

import pandas as pd
from pydantic import BaseModel, Field

from config.settings import settings
from src.canvasser.models.property import Property, PropertyStatus, Visit
from src.canvasser.utils.logger import get_logger

logger = get_logger(__name__)

CSV_COLUMNS = ["Address", "Status", "Notes", "Time"]


class SummaryEntry(BaseModel):
    """One property in the summary with the visits logged inside the window."""

    property: Property
    visits: List[Visit] = Field(default_factory=list)


class StatusGroup(BaseModel):
    status: PropertyStatus
    count: int = 0
    entries: List[SummaryEntry] = Field(default_factory=list)


class DaySummary(BaseModel):
    """
    Properties touched during one day.

    Attributes:
        day: Report date
        window_start: Inclusive start of the day in the report timezone
        window_end: Exclusive end of the day
        total: Number of properties selected
        groups: Status groups in status declaration order, empty groups omitted
    """

    day: date
    window_start: datetime
    window_end: datetime
    total: int = 0
    groups: List[StatusGroup] = Field(default_factory=list)

    def count(self, status: PropertyStatus) -> int:
        for group in self.groups:
            if group.status == status:
                return group.count
        return 0

    def status_counts(self) -> Dict[str, int]:
        return {group.status.value: group.count for group in self.groups}

    def entries(self) -> List[SummaryEntry]:
        return [entry for group in self.groups for entry in group.entries]


class SummaryRecord(BaseModel):
    """Flattened export row."""

    address: str
    status: str
    notes: str
    time: str


def _aware(value: datetime) -> datetime:
    """Timestamps without a zone are stored UTC."""
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def sanitize_field(value: Optional[str]) -> str:
    """Strip characters that would break a comma-separated row."""
    if not value:
        return ""
    cleaned = value.replace(",", " ").replace("\r", " ").replace("\n", " ")
    return " ".join(cleaned.split())


class DaySummaryAggregator:
    """
    Time-windows properties and their visits into a day report.

    Args:
        tz: IANA timezone name that defines "a day" (settings.report_timezone)
    """

    def __init__(self, tz: Optional[str] = None):
        self.tz = ZoneInfo(tz or settings.report_timezone)

    def window(self, day: date) -> Tuple[datetime, datetime]:
        """[start of day, start of next day) in the report timezone."""
        start = datetime.combine(day, time.min, tzinfo=self.tz)
        return start, start + timedelta(days=1)

    def summarize(self, day: date, properties: Iterable[Property]) -> DaySummary:
        """
        Build the summary for one day.

        A property is included when it was created inside the window or has
        at least one visit inside it.
        """
        start, end = self.window(day)
        grouped: Dict[PropertyStatus, List[SummaryEntry]] = {}

        for prop in properties:
            created_in_window = start <= _aware(prop.created_at) < end
            window_visits = [v for v in prop.visits if start <= _aware(v.timestamp) < end]
            if not created_in_window and not window_visits:
                continue
            grouped.setdefault(prop.status, []).append(
                SummaryEntry(property=prop, visits=window_visits)
            )

        groups = []
        for status in PropertyStatus:
            entries = grouped.get(status)
            if not entries:
                continue
            entries.sort(key=lambda e: (_aware(e.property.created_at), e.property.id))
            groups.append(StatusGroup(status=status, count=len(entries), entries=entries))

        summary = DaySummary(
            day=day,
            window_start=start,
            window_end=end,
            total=sum(g.count for g in groups),
            groups=groups,
        )
        logger.info("day_summary_built", day=day.isoformat(), total=summary.total, statuses=summary.status_counts())
        return summary

    def to_records(self, summary: DaySummary) -> List[SummaryRecord]:
        """
        One export row per property.

        notes is the latest note logged inside the window; time is the
        property's creation time (HH:MM) in the report timezone.
        """
        records = []
        for entry in summary.entries():
            prop = entry.property
            latest_note = next(
                (v.notes for v in reversed(entry.visits) if v.notes),
                None,
            )
            records.append(
                SummaryRecord(
                    address=sanitize_field(prop.address) or "Unknown",
                    status=prop.status.value.replace("_", " "),
                    notes=sanitize_field(latest_note),
                    time=_aware(prop.created_at).astimezone(self.tz).strftime("%H:%M"),
                )
            )
        return records

    def to_dataframe(self, summary: DaySummary) -> pd.DataFrame:
        rows = [
            [r.address, r.status, r.notes, r.time]
            for r in self.to_records(summary)
        ]
        return pd.DataFrame(rows, columns=CSV_COLUMNS)

    def to_csv(self, summary: DaySummary) -> str:
        """Comma-separated export with a header row, every value quoted."""
        return self.to_dataframe(summary).to_csv(
            index=False,
            quoting=csv.QUOTE_ALL,
            lineterminator="\n",
        )

    @staticmethod
    def export_filename(day: date) -> str:
        return f"canvassing-summary-{day.isoformat()}.csv"

    def write_csv(self, summary: DaySummary, directory: Path) -> Path:
        """Write the export into a directory using the dated filename."""
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.export_filename(summary.day)
        path.write_text(self.to_csv(summary), encoding="utf-8")
        logger.info("day_summary_exported", path=str(path), rows=summary.total)
        return path
