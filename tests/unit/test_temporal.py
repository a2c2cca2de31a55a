"""Tests for date parsing, countdowns, timeline bounds and projection."""
import sys
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from modules.operations.config import TimelineConfig
from modules.operations.errors import InvalidDateError
from modules.operations.models import GroupStatus
from modules.operations.temporal import (
    add_months,
    compute_timeline_bounds,
    days_remaining,
    end_of_month,
    month_ticks,
    parse_date,
    project,
    project_point,
    project_span,
)


# ---------------------------------------------------------------------------
# parse_date
# ---------------------------------------------------------------------------

class TestParseDate:

    def test_none_and_empty_mean_no_date(self):
        assert parse_date(None) is None
        assert parse_date("") is None

    def test_iso_date(self):
        assert parse_date("2026-03-10") == date(2026, 3, 10)

    def test_iso_datetime(self):
        assert parse_date("2026-03-10T08:30:00") == datetime(2026, 3, 10, 8, 30)

    def test_date_passthrough(self):
        d = date(2026, 1, 1)
        assert parse_date(d) is d

    def test_garbage_raises(self):
        with pytest.raises(InvalidDateError) as exc:
            parse_date("10/03/2026")
        assert exc.value.value == "10/03/2026"

    def test_unsupported_type_raises(self):
        with pytest.raises(InvalidDateError):
            parse_date(20260310)


# ---------------------------------------------------------------------------
# days_remaining
# ---------------------------------------------------------------------------

class TestDaysRemaining:

    def test_future(self):
        assert days_remaining(date(2026, 3, 10), date(2026, 3, 1)) == 9

    def test_same_day_is_zero(self):
        assert days_remaining("2026-03-01", "2026-03-01") == 0

    def test_past_is_negative(self):
        assert days_remaining(date(2026, 2, 28), date(2026, 3, 1)) == -1

    def test_partial_day_rounds_up(self):
        ref = datetime(2026, 3, 1, 18, 0)
        assert days_remaining(date(2026, 3, 3), ref) == 2
        assert days_remaining(datetime(2026, 3, 2, 6, 0), ref) == 1

    def test_missing_date_raises(self):
        with pytest.raises(InvalidDateError):
            days_remaining(None, date(2026, 3, 1))

    def test_naive_vs_aware_raises(self):
        aware = datetime(2026, 3, 1, tzinfo=timezone.utc)
        with pytest.raises(InvalidDateError):
            days_remaining(datetime(2026, 3, 5, 12, 0), aware)


# ---------------------------------------------------------------------------
# Calendar helpers
# ---------------------------------------------------------------------------

class TestCalendar:

    def test_add_months_clamps_day(self):
        assert add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)

    def test_add_months_crosses_year(self):
        assert add_months(date(2026, 1, 15), -2) == date(2025, 11, 15)
        assert add_months(date(2026, 12, 1), 1) == date(2027, 1, 1)

    def test_end_of_month(self):
        assert end_of_month(date(2028, 2, 3)) == date(2028, 2, 29)


# ---------------------------------------------------------------------------
# compute_timeline_bounds
# ---------------------------------------------------------------------------

class TestTimelineBounds:

    def test_pending_starts_two_months_back_on_the_first(self, config):
        min_date, _ = compute_timeline_bounds(
            [date(2026, 3, 1), date(2026, 3, 20)],
            date(2026, 3, 1),
            GroupStatus.PENDING_VALIDATION,
            config=config.timeline,
        )
        assert min_date == date(2026, 1, 1)

    def test_max_is_end_of_month_after_latest(self, config):
        _, max_date = compute_timeline_bounds(
            [date(2026, 3, 10), date(2026, 3, 17)],
            date(2026, 3, 1),
            GroupStatus.PENDING_VALIDATION,
            config=config.timeline,
        )
        assert max_date == date(2026, 4, 30)

    def test_validated_starts_one_month_before_validation(self, config):
        min_date, _ = compute_timeline_bounds(
            [date(2026, 5, 10)],
            date(2026, 3, 1),
            GroupStatus.VALIDATED,
            validation_date=date(2026, 2, 15),
            config=config.timeline,
        )
        assert min_date == date(2026, 1, 1)

    def test_reference_date_is_included(self, config):
        min_date, max_date = compute_timeline_bounds(
            [date(2026, 3, 10)],
            date(2026, 6, 15),
            GroupStatus.PENDING_VALIDATION,
            config=config.timeline,
        )
        assert min_date == date(2026, 1, 1)
        assert max_date == date(2026, 7, 31)

    def test_no_dates_uses_default_window(self, config):
        min_date, max_date = compute_timeline_bounds(
            [None, None], date(2026, 3, 15), GroupStatus.PENDING_VALIDATION, config=config.timeline,
        )
        assert min_date == date(2025, 12, 1)
        assert max_date == date(2026, 6, 30)

    def test_configurable_lead(self):
        cfg = TimelineConfig(pending_lead_months=0)
        min_date, _ = compute_timeline_bounds(
            [date(2026, 3, 20)], date(2026, 3, 20), GroupStatus.PENDING_VALIDATION, config=cfg,
        )
        assert min_date == date(2026, 3, 1)

    def test_defaults_from_active_config(self):
        min_date, _ = compute_timeline_bounds(
            ["2026-03-01"], "2026-03-01", GroupStatus.PENDING_VALIDATION,
        )
        assert min_date == date(2026, 1, 1)


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------

class TestProject:

    MIN = date(2026, 1, 1)
    MAX = date(2026, 4, 30)

    def test_edges(self):
        assert project(self.MIN, self.MIN, self.MAX) == 0
        assert project(self.MAX, self.MIN, self.MAX) == 100

    def test_monotonic(self):
        positions = [
            project(self.MIN + timedelta(days=n), self.MIN, self.MAX)
            for n in range((self.MAX - self.MIN).days + 1)
        ]
        assert positions == sorted(positions)

    def test_clamped_outside_window(self):
        assert project(date(2025, 12, 1), self.MIN, self.MAX) == 0
        assert project(date(2026, 6, 1), self.MIN, self.MAX) == 100

    def test_empty_window(self):
        assert project(self.MIN, self.MIN, self.MIN) == 0


class TestProjectSpan:

    MIN = date(2026, 3, 1)
    MAX = date(2026, 3, 31)

    def test_span(self):
        span = project_span(date(2026, 3, 1), date(2026, 3, 16), self.MIN, self.MAX)
        assert span.show
        assert span.left == 0
        assert span.width == pytest.approx(50)

    def test_missing_end_hides(self):
        assert not project_span(date(2026, 3, 5), None, self.MIN, self.MAX).show

    def test_inverted_range_raises(self):
        with pytest.raises(InvalidDateError):
            project_span(date(2026, 3, 17), date(2026, 3, 10), self.MIN, self.MAX)

    def test_point(self):
        assert project_point(None, self.MIN, self.MAX).show is False
        assert project_point(self.MAX, self.MIN, self.MAX).left == 100


class TestMonthTicks:

    def test_one_tick_per_month(self):
        ticks = month_ticks(date(2026, 1, 1), date(2026, 4, 30))
        assert [t.start.month for t in ticks] == [1, 2, 3, 4]
        assert sum(t.width for t in ticks) == pytest.approx(100, abs=1)
