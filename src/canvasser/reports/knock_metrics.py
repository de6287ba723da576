"""
Knock Analytics

Running knock counters and time-framed door-knocking metrics.
"""
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel

from config.settings import settings
from src.canvasser.models.property import CONTACT_STATUSES, Property, PropertyStatus
from src.canvasser.models.snapshot import Analytics


class TimeFrame(str, Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"


class KnockMetrics(BaseModel):
    total_knocks: int = 0
    interested: int = 0
    appointments: int = 0
    sold: int = 0
    not_home: int = 0
    not_interested: int = 0
    interested_rate: float = 0.0
    appointment_rate: float = 0.0
    close_rate: float = 0.0
    hours_worked: float = 0.0
    knocks_per_hour: float = 0.0
    doors_per_deal: float = 0.0


def frame_start(time_frame: TimeFrame, now: datetime, tz: Optional[str] = None) -> Optional[datetime]:
    """
    Start of a reporting frame; None for all time.

    Day and month boundaries are midnights in tz (settings.report_timezone by
    default). A naive now is taken as UTC.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(ZoneInfo(tz or settings.report_timezone))
    if time_frame == TimeFrame.TODAY:
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if time_frame == TimeFrame.WEEK:
        return now - timedelta(days=7)
    if time_frame == TimeFrame.MONTH:
        return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return None


def _pct(part: int, whole: int) -> float:
    return round(part / whole * 100, 1) if whole else 0.0


def knock_metrics(
    properties: Iterable[Property],
    time_frame: TimeFrame,
    now: datetime,
    minutes_per_knock: Optional[float] = None,
    tz: Optional[str] = None,
) -> KnockMetrics:
    """
    Door-knocking metrics over a time frame.

    Every visit inside the frame counts as a knock. Outcome counts use the
    current status of properties visited in the frame. Rates are percentages
    of knocks and are 0 when there were no knocks.
    """
    minutes_per_knock = minutes_per_knock or settings.minutes_per_knock
    start = frame_start(TimeFrame(time_frame), now, tz)

    knocks = 0
    statuses = []
    for prop in properties:
        visits = [v for v in prop.visits if start is None or v.timestamp >= start]
        if not visits:
            continue
        knocks += len(visits)
        statuses.append(prop.status)

    interested = statuses.count(PropertyStatus.INTERESTED)
    appointments = statuses.count(PropertyStatus.APPOINTMENT)
    sold = statuses.count(PropertyStatus.SOLD)
    hours = knocks * minutes_per_knock / 60

    return KnockMetrics(
        total_knocks=knocks,
        interested=interested,
        appointments=appointments,
        sold=sold,
        not_home=statuses.count(PropertyStatus.NOT_HOME) + statuses.count(PropertyStatus.KNOCK_NOT_HOME),
        not_interested=statuses.count(PropertyStatus.NOT_INTERESTED),
        interested_rate=_pct(interested, knocks),
        appointment_rate=_pct(appointments, knocks),
        close_rate=_pct(sold, knocks),
        hours_worked=round(hours, 1),
        knocks_per_hour=round(knocks / hours, 1) if hours else 0.0,
        doors_per_deal=round(knocks / sold, 1) if sold else 0.0,
    )


def record_status_change(analytics: Analytics, status: PropertyStatus) -> Analytics:
    """
    Counters after one status change.

    Every change is a door knocked; contact statuses also count a contact;
    appointment and sold bump their own counters.
    """
    status = PropertyStatus(status)
    return analytics.model_copy(update={
        "total_doors_knocked": analytics.total_doors_knocked + 1,
        "contacts_made": analytics.contacts_made + (1 if status in CONTACT_STATUSES else 0),
        "appointments_set": analytics.appointments_set + (1 if status == PropertyStatus.APPOINTMENT else 0),
        "sales_made": analytics.sales_made + (1 if status == PropertyStatus.SOLD else 0),
    })
