"""Day-count arithmetic, timeline bounds and date-to-position mapping.

All functions are pure. Dates may be passed as ``date``, ``datetime`` or ISO
strings; anything unparsable raises InvalidDateError.
"""
from __future__ import annotations

import calendar
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Union

from .errors import InvalidDateError
from .models import GroupStatus

DateLike = Union[date, datetime, str]

SECONDS_PER_DAY = 24 * 3600


@dataclass(frozen=True)
class Span:
    """Horizontal placement on the timeline, in percent of its width."""
    left: float
    width: float
    show: bool


@dataclass(frozen=True)
class MonthTick:
    start: date
    left: float
    width: float


def parse_date(value: Optional[DateLike]) -> Optional[Union[date, datetime]]:
    """Parse a date value. ``None`` and ``""`` mean "no date"."""
    if value is None or value == "":
        return None
    if isinstance(value, (date, datetime)):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            return datetime.fromisoformat(text)
        except ValueError as e:
            raise InvalidDateError(f"Unparsable date '{value}'", cause=e, value=value)
    raise InvalidDateError(f"Unsupported date value {value!r}", value=value)


def require_date(value: Optional[DateLike]) -> Union[date, datetime]:
    parsed = parse_date(value)
    if parsed is None:
        raise InvalidDateError("Date is required", value=value)
    return parsed


def as_calendar_date(value: Optional[DateLike]) -> Optional[date]:
    """Like parse_date, but drops any time of day."""
    parsed = parse_date(value)
    if isinstance(parsed, datetime):
        return parsed.date()
    return parsed


def _as_datetime(d: Union[date, datetime]) -> datetime:
    if isinstance(d, datetime):
        return d
    return datetime(d.year, d.month, d.day)


def _delta_days(later: Union[date, datetime], earlier: Union[date, datetime]) -> float:
    if type(later) is date and type(earlier) is date:
        return float((later - earlier).days)
    try:
        delta = _as_datetime(later) - _as_datetime(earlier)
    except TypeError as e:
        raise InvalidDateError("Cannot compare naive and timezone-aware dates", cause=e)
    return delta.total_seconds() / SECONDS_PER_DAY


def days_remaining(target_date: DateLike, reference_date: DateLike) -> int:
    """Whole days until ``target_date``, rounded up. Negative once passed."""
    target = require_date(target_date)
    reference = require_date(reference_date)
    return math.ceil(_delta_days(target, reference))


# ---------------------------------------------------------------------------
# Calendar helpers
# ---------------------------------------------------------------------------

def add_months(d: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month length."""
    index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return d.replace(year=year, month=month, day=day)


def first_of_month(d: date) -> date:
    return d.replace(day=1)


def end_of_month(d: date) -> date:
    return d.replace(day=calendar.monthrange(d.year, d.month)[1])


# ---------------------------------------------------------------------------
# Timeline bounds
# ---------------------------------------------------------------------------

def compute_timeline_bounds(
    significant_dates: Iterable[Optional[DateLike]],
    reference_date: DateLike,
    status: GroupStatus,
    validation_date: Optional[DateLike] = None,
    config=None,
) -> tuple[date, date]:
    """Window ``(min_date, max_date)`` that frames a group's timeline.

    Without any significant date the window is centred on the reference date.
    Otherwise the reference date joins the set, the end is pushed to the end
    of the month following the latest date, and the start is placed before
    the validation date (validated groups) or before the earliest date
    (pending groups), clamped to the first of the month.

    Args:
        significant_dates: departure/return dates, deadlines, validation date.
            ``None`` entries are ignored.
        reference_date: today
        status: group status
        validation_date: required for validated groups
        config: TimelineConfig, defaults from the active configuration

    Returns:
        (min_date, max_date) as calendar dates
    """
    if config is None:
        from .config import get_config
        config = get_config().timeline

    reference = as_calendar_date(require_date(reference_date))
    dates = [as_calendar_date(d) for d in significant_dates]
    dates = [d for d in dates if d is not None]

    if not dates:
        window = config.default_window_months
        return (
            first_of_month(add_months(reference, -window)),
            end_of_month(add_months(reference, window)),
        )

    dates.append(reference)
    max_date = end_of_month(add_months(max(dates), config.trailing_months))

    validated_on = as_calendar_date(validation_date)
    if status is GroupStatus.VALIDATED and validated_on is not None:
        min_date = first_of_month(add_months(validated_on, -config.validated_lead_months))
    else:
        min_date = first_of_month(add_months(min(dates), -config.pending_lead_months))

    return min_date, max_date


# ---------------------------------------------------------------------------
# Positions
# ---------------------------------------------------------------------------

def project(d: DateLike, min_date: DateLike, max_date: DateLike) -> float:
    """Position of ``d`` in ``[min_date, max_date]`` as 0-100 percent.

    Values outside the window clamp to the nearest edge; an empty window
    puts everything at 0.
    """
    point = require_date(d)
    lo = require_date(min_date)
    hi = require_date(max_date)
    total = _delta_days(hi, lo)
    if total <= 0:
        return 0.0
    pct = _delta_days(point, lo) / total * 100
    return min(100.0, max(0.0, pct))


def project_span(
    start_date: Optional[DateLike],
    end_date: Optional[DateLike],
    min_date: DateLike,
    max_date: DateLike,
) -> Span:
    """Bar from ``start_date`` to ``end_date``, clipped to the window."""
    start = parse_date(start_date)
    end = parse_date(end_date)
    if start is None or end is None:
        return Span(0.0, 0.0, show=False)
    if _delta_days(end, start) < 0:
        raise InvalidDateError(
            f"Range ends before it starts ({start} > {end})", value=(start, end)
        )
    if _delta_days(require_date(max_date), require_date(min_date)) <= 0:
        return Span(0.0, 0.0, show=False)
    left = project(start, min_date, max_date)
    right = project(end, min_date, max_date)
    return Span(left, right - left, show=True)


def project_point(d: Optional[DateLike], min_date: DateLike, max_date: DateLike) -> Span:
    """Point marker; hidden when there is no date or the window is empty."""
    point = parse_date(d)
    if point is None or _delta_days(require_date(max_date), require_date(min_date)) <= 0:
        return Span(0.0, 0.0, show=False)
    return Span(project(point, min_date, max_date), 0.0, show=True)


def month_ticks(min_date: date, max_date: date) -> list[MonthTick]:
    """One tick per calendar month touched by the window."""
    total = _delta_days(max_date, min_date)
    if total <= 0:
        return []
    ticks = []
    month = first_of_month(min_date)
    while month <= max_date:
        next_month = add_months(month, 1)
        start = max(month, min_date)
        end = min(next_month, max_date + timedelta(days=1))
        ticks.append(MonthTick(
            start=month,
            left=_delta_days(start, min_date) / total * 100,
            width=_delta_days(end, start) / total * 100,
        ))
        month = next_month
    return ticks
