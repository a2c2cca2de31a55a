"""Detail view of one departure group.

Bundles what the detail screen shows: the group itself, the operations
checklist with urgency per deadline, the four-milestone breakdown, the
timeline and the passenger manifest.
"""
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from common.models import Booking, TravelPackage

from .manifest import Manifest, build_manifest
from .models import Currency, DepartureGroup, Leg, MilestoneKey, OperationsProject, PaymentMilestone
from .payments import LegSummary, balance_due, leg_summary
from .temporal import DateLike
from .timeline import Timeline, build_timeline
from .urgency import Classification, classify


@dataclass(frozen=True)
class ChecklistItem:
    key: str
    label: str
    deadline: Optional[date]
    classification: Classification


@dataclass(frozen=True)
class MilestoneLine:
    key: MilestoneKey
    milestone: PaymentMilestone
    currency: Currency
    classification: Classification
    # Balance lines: what remains after the deposit of the same leg
    suggested_amount: Optional[float] = None


@dataclass(frozen=True)
class GroupDetail:
    project_id: str
    package: TravelPackage
    group: DepartureGroup
    checklist: list[ChecklistItem]
    milestones: list[MilestoneLine]
    air: LegSummary
    land: LegSummary
    timeline: Timeline
    manifest: Manifest

    @property
    def most_urgent(self) -> Optional[ChecklistItem]:
        open_items = [i for i in self.checklist if i.deadline is not None]
        if not open_items:
            return None
        return max(open_items, key=lambda i: i.classification.severity)


# Air suppliers are paid in local currency
AIR_CURRENCY = Currency.DZD

MILESTONE_LABELS = {
    MilestoneKey.AIR_DEPOSIT: "Air deposit",
    MilestoneKey.AIR_BALANCE: "Air balance",
    MilestoneKey.LAND_DEPOSIT: "Land deposit",
    MilestoneKey.LAND_BALANCE: "Land balance",
}


def build_checklist(group: DepartureGroup, reference_date: DateLike, thresholds=None) -> list[ChecklistItem]:
    """The operations to-do list, in the order the team works through it."""

    def item(key, label, deadline, **flags):
        return ChecklistItem(key, label, deadline, classify(deadline, reference_date, thresholds=thresholds, **flags))

    def payment(key: MilestoneKey):
        m = group.milestone(key)
        return item(key.value, MILESTONE_LABELS[key], m.deadline, is_payment=True, is_completed=m.is_paid)

    return [
        item("departure", "Flight departure", group.departure_date, is_critical_milestone=True),
        item("names", "Names & ticketing deadline", group.names_deadline),
        payment(MilestoneKey.AIR_DEPOSIT),
        payment(MilestoneKey.AIR_BALANCE),
        item("rooming", "Rooming list deadline", group.rooming_list_deadline),
        payment(MilestoneKey.LAND_DEPOSIT),
        payment(MilestoneKey.LAND_BALANCE),
        item("guide", "Guide assignment deadline", group.guide_assignment_deadline),
    ]


def build_milestone_lines(group: DepartureGroup, reference_date: DateLike, thresholds=None) -> list[MilestoneLine]:
    lines = []
    for key in MilestoneKey:
        m = group.milestone(key)
        currency = group.land_currency if key.leg is Leg.LAND else AIR_CURRENCY
        suggested = None
        if key is MilestoneKey.AIR_BALANCE:
            suggested = balance_due(group.air_deposit)
        elif key is MilestoneKey.LAND_BALANCE:
            suggested = balance_due(group.land_deposit)
        lines.append(MilestoneLine(
            key=key,
            milestone=m,
            currency=currency,
            classification=classify(m.deadline, reference_date, is_payment=True,
                                    is_completed=m.is_paid, thresholds=thresholds),
            suggested_amount=suggested,
        ))
    return lines


def build_group_detail(
    project: OperationsProject,
    group: DepartureGroup,
    package: TravelPackage,
    bookings: Iterable[Booking],
    reference_date: DateLike,
    config=None,
) -> GroupDetail:
    """Everything the detail view renders for ``group``."""
    thresholds = config.urgency if config is not None else None
    timeline_config = config.timeline if config is not None else None
    flight = package.flight(group.flight_id)
    return GroupDetail(
        project_id=project.id,
        package=package,
        group=group,
        checklist=build_checklist(group, reference_date, thresholds),
        milestones=build_milestone_lines(group, reference_date, thresholds),
        air=leg_summary(group.air_deposit, group.air_balance),
        land=leg_summary(group.land_deposit, group.land_balance),
        timeline=build_timeline(group, flight.return_date if flight else None,
                                reference_date, timeline_config),
        manifest=build_manifest(bookings, package.id),
    )
