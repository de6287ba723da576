"""
Tests for Knock Analytics
"""
from datetime import datetime, timezone

import pytest

from src.canvasser.ledger.property_ledger import PropertyLedger
from src.canvasser.models.property import PropertyDraft, PropertyStatus
from src.canvasser.models.snapshot import Analytics
from src.canvasser.reports.knock_metrics import TimeFrame, frame_start, knock_metrics, record_status_change

NOW = datetime(2024, 5, 15, 18, 0, tzinfo=timezone.utc)


class TestRecordStatusChange:
    """Tests for the running counters."""

    def test_knock_only(self):
        analytics = record_status_change(Analytics(), PropertyStatus.NOT_HOME)
        assert analytics.total_doors_knocked == 1
        assert analytics.contacts_made == 0

    def test_contact_statuses(self):
        analytics = Analytics()
        for status in (PropertyStatus.INTERESTED, PropertyStatus.APPOINTMENT, PropertyStatus.SOLD):
            analytics = record_status_change(analytics, status)

        assert analytics.total_doors_knocked == 3
        assert analytics.contacts_made == 3
        assert analytics.appointments_set == 1
        assert analytics.sales_made == 1

    def test_original_untouched(self):
        original = Analytics()
        record_status_change(original, PropertyStatus.SOLD)
        assert original.total_doors_knocked == 0


class TestFrames:
    """Tests for frame boundaries."""

    def test_frame_start(self):
        assert frame_start(TimeFrame.TODAY, NOW) == datetime(2024, 5, 15, tzinfo=timezone.utc)
        assert frame_start(TimeFrame.WEEK, NOW) == datetime(2024, 5, 8, 18, 0, tzinfo=timezone.utc)
        assert frame_start(TimeFrame.MONTH, NOW) == datetime(2024, 5, 1, tzinfo=timezone.utc)
        assert frame_start(TimeFrame.ALL, NOW) is None


class TestKnockMetrics:
    """Tests for time-framed metrics."""

    @pytest.fixture
    def ledger(self, clock):
        clock.now = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
        ledger = PropertyLedger(clock=clock)

        old = ledger.create(PropertyDraft(latitude=40.0, longitude=-111.0))
        ledger.set_status(old.id, PropertyStatus.NOT_HOME)

        clock.now = datetime(2024, 5, 15, 10, 0, tzinfo=timezone.utc)
        for status in (PropertyStatus.SOLD, PropertyStatus.INTERESTED, PropertyStatus.NOT_INTERESTED,
                       PropertyStatus.NOT_HOME):
            prop = ledger.create(PropertyDraft(latitude=40.0, longitude=-111.0))
            ledger.set_status(prop.id, status)
        return ledger

    def test_today(self, ledger):
        metrics = knock_metrics(ledger.all(), TimeFrame.TODAY, NOW, minutes_per_knock=5)

        assert metrics.total_knocks == 4
        assert metrics.sold == 1
        assert metrics.interested == 1
        assert metrics.not_interested == 1
        assert metrics.not_home == 1
        assert metrics.close_rate == 25.0
        assert metrics.hours_worked == pytest.approx(0.3)
        assert metrics.knocks_per_hour == 12.0
        assert metrics.doors_per_deal == 4.0

    def test_all_time(self, ledger):
        metrics = knock_metrics(ledger.all(), TimeFrame.ALL, NOW, minutes_per_knock=5)
        assert metrics.total_knocks == 5
        assert metrics.not_home == 2

    def test_no_knocks(self):
        metrics = knock_metrics([], TimeFrame.TODAY, NOW)
        assert metrics.total_knocks == 0
        assert metrics.close_rate == 0.0
        assert metrics.knocks_per_hour == 0.0
        assert metrics.doors_per_deal == 0.0


class TestReportTimezone:
    """Tests for frames bounded in the report timezone."""

    def test_today_starts_at_local_midnight(self):
        # 12:00 MDT
        start = frame_start(TimeFrame.TODAY, NOW, tz="America/Denver")
        assert start == datetime(2024, 5, 15, 6, 0, tzinfo=timezone.utc)

    def test_late_evening_still_previous_local_day(self):
        # 21:00 MDT on May 14
        now = datetime(2024, 5, 15, 3, 0, tzinfo=timezone.utc)
        assert frame_start(TimeFrame.TODAY, now, tz="America/Denver") == datetime(
            2024, 5, 14, 6, 0, tzinfo=timezone.utc
        )

    def test_month_starts_at_local_midnight(self):
        start = frame_start(TimeFrame.MONTH, NOW, tz="America/Denver")
        assert start == datetime(2024, 5, 1, 6, 0, tzinfo=timezone.utc)

    def test_naive_now_taken_as_utc(self):
        assert frame_start(TimeFrame.TODAY, datetime(2024, 5, 15, 18, 0), tz="UTC") == datetime(
            2024, 5, 15, tzinfo=timezone.utc
        )

    def test_visit_before_local_midnight_excluded(self, clock):
        # 20:00 MDT on May 14
        clock.now = datetime(2024, 5, 15, 2, 0, tzinfo=timezone.utc)
        ledger = PropertyLedger(clock=clock)
        prop = ledger.create(PropertyDraft(latitude=40.0, longitude=-111.0))
        ledger.set_status(prop.id, PropertyStatus.NOT_HOME)

        assert knock_metrics(ledger.all(), TimeFrame.TODAY, NOW, tz="UTC").total_knocks == 1
        assert knock_metrics(ledger.all(), TimeFrame.TODAY, NOW, tz="America/Denver").total_knocks == 0
