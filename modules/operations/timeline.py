"""Operations timeline of a departure group.

Projects the trip, the deadlines, the four payments, the validation date
and today onto one horizontal axis (positions in percent).
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from .lifecycle import significant_dates
from .models import DepartureGroup
from .temporal import (
    DateLike,
    MonthTick,
    Span,
    as_calendar_date,
    compute_timeline_bounds,
    month_ticks,
    project_point,
    project_span,
    require_date,
)


@dataclass(frozen=True)
class Marker:
    kind: str
    label: str
    date: date
    position: Span


@dataclass(frozen=True)
class Timeline:
    min_date: date
    max_date: date
    trip: Span
    markers: list[Marker]
    months: list[MonthTick]

    def marker(self, kind: str) -> Optional[Marker]:
        return next((m for m in self.markers if m.kind == kind), None)


# (kind, label, getter) in drawing order
MARKERS = [
    ("names", "Names deadline", lambda g: g.names_deadline),
    ("rooming", "Rooming list deadline", lambda g: g.rooming_list_deadline),
    ("air_deposit", "Air deposit", lambda g: g.air_deposit.deadline),
    ("air_balance", "Air balance", lambda g: g.air_balance.deadline),
    ("land_deposit", "Land deposit", lambda g: g.land_deposit.deadline),
    ("land_balance", "Land balance", lambda g: g.land_balance.deadline),
    ("guide", "Guide assignment deadline", lambda g: g.guide_assignment_deadline),
]


def build_timeline(
    group: DepartureGroup,
    return_date: Optional[DateLike],
    reference_date: DateLike,
    config=None,
) -> Timeline:
    """Lay out a group's dates between its computed timeline bounds.

    Raises:
        InvalidDateError: return date before the departure date
    """
    today = as_calendar_date(require_date(reference_date))
    back = as_calendar_date(return_date)
    min_date, max_date = compute_timeline_bounds(
        significant_dates(group, back),
        today,
        group.status,
        validation_date=group.validation_date,
        config=config,
    )

    markers = []
    if group.is_validated and group.validation_date:
        markers.append(Marker(
            "validation", "Validated", group.validation_date,
            project_point(group.validation_date, min_date, max_date),
        ))
    for kind, label, getter in MARKERS:
        d = getter(group)
        if d is None:
            continue
        markers.append(Marker(kind, label, d, project_point(d, min_date, max_date)))
    markers.append(Marker("today", "Today", today, project_point(today, min_date, max_date)))

    return Timeline(
        min_date=min_date,
        max_date=max_date,
        trip=project_span(group.departure_date, back, min_date, max_date),
        markers=markers,
        months=month_ticks(min_date, max_date),
    )
