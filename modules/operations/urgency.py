"""Deadline & urgency classification.

Turns a deadline plus a completion flag into a band used for sorting,
alerting and the J-n badges of the dashboard and detail views.

Priority:
    1. no deadline          -> 'undefined', band normal
    2. completed / paid     -> 'done' / 'paid', band done
    3. days < 0             -> overdue  (J+n)
       days == 0            -> today
       days <= urgent_days  -> urgent   (critical milestones: always urgent)
       days <= warning_days -> warning  (not for payments)
       otherwise            -> normal
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .temporal import DateLike, days_remaining, parse_date


class UrgencyBand(Enum):
    OVERDUE = 'overdue'
    TODAY = 'today'
    URGENT = 'urgent'
    WARNING = 'warning'
    NORMAL = 'normal'
    DONE = 'done'


# Higher sorts first
BAND_SEVERITY = {
    UrgencyBand.TODAY: 5,
    UrgencyBand.OVERDUE: 4,
    UrgencyBand.URGENT: 3,
    UrgencyBand.WARNING: 2,
    UrgencyBand.NORMAL: 1,
    UrgencyBand.DONE: 0,
}


@dataclass(frozen=True)
class Classification:
    label: str
    band: UrgencyBand
    days_remaining: Optional[int] = None

    @property
    def severity(self) -> int:
        return BAND_SEVERITY[self.band]


@dataclass(frozen=True)
class Countdown:
    days_remaining: int
    band: UrgencyBand

    @property
    def label(self) -> str:
        if self.days_remaining < 0:
            return f"J+{abs(self.days_remaining)}"
        return f"J-{self.days_remaining}"


def _thresholds(thresholds) -> tuple[int, int]:
    if thresholds is None:
        from .config import get_config
        thresholds = get_config().urgency
    return thresholds.urgent_days, thresholds.warning_days


def classify(
    deadline: Optional[DateLike],
    reference_date: DateLike,
    *,
    is_payment: bool = False,
    is_completed: bool = False,
    is_critical_milestone: bool = False,
    thresholds=None,
) -> Classification:
    """Classify a deadline relative to ``reference_date``.

    Args:
        deadline: date, ISO string, or None/"" for "not set"
        reference_date: today
        is_payment: payment milestones have no warning band
        is_completed: task done, or payment paid
        is_critical_milestone: e.g. the departure itself; urgent at any
            positive distance
        thresholds: UrgencyConfig, defaults from the active configuration
    """
    if parse_date(deadline) is None:
        return Classification(label="undefined", band=UrgencyBand.NORMAL)

    days = days_remaining(deadline, reference_date)
    if is_completed:
        return Classification(
            label="paid" if is_payment else "done",
            band=UrgencyBand.DONE,
            days_remaining=days,
        )

    urgent_days, warning_days = _thresholds(thresholds)
    if days < 0:
        return Classification(f"J+{abs(days)}", UrgencyBand.OVERDUE, days)
    if days == 0:
        return Classification("today", UrgencyBand.TODAY, days)
    if days <= urgent_days or (is_critical_milestone and not is_payment):
        return Classification(f"J-{days}", UrgencyBand.URGENT, days)
    if not is_payment and days <= warning_days:
        return Classification(f"J-{days}", UrgencyBand.WARNING, days)
    return Classification(f"J-{days}", UrgencyBand.NORMAL, days)


def countdown(target: Optional[DateLike], reference_date: DateLike, thresholds=None) -> Optional[Countdown]:
    """Group-level countdown badge. None when the target date is not set."""
    if parse_date(target) is None:
        return None
    days = days_remaining(target, reference_date)
    urgent_days, warning_days = _thresholds(thresholds)
    if days < 0:
        band = UrgencyBand.OVERDUE
    elif days == 0:
        band = UrgencyBand.TODAY
    elif days <= urgent_days:
        band = UrgencyBand.URGENT
    elif days <= warning_days:
        band = UrgencyBand.WARNING
    else:
        band = UrgencyBand.NORMAL
    return Countdown(days, band)
