"""Departure group lifecycle.

Status Flow:
    pending_validation → validated   (validate; one-way)

Every other change (group fields, payment milestones) is allowed in both
states and leaves the status untouched. All functions return a new group.
"""
import logging
from dataclasses import replace
from datetime import date
from typing import Any, Mapping, Optional
from uuid import uuid4

from common.models import Flight

from .errors import InvalidDateError, InvalidPatchError, InvalidTransitionError
from .models import Currency, DepartureGroup, GroupStatus, MilestoneKey
from .payments import apply_milestone_update
from .temporal import DateLike, as_calendar_date, require_date

logger = logging.getLogger(__name__)

DATE_FIELDS = {
    "departure_date",
    "names_deadline",
    "rooming_list_deadline",
    "guide_assignment_deadline",
}
FLAG_FIELDS = {"is_air_subcontracted", "is_land_subcontracted"}
TEXT_FIELDS = {"air_supplier_name", "land_supplier_name", "guide_name", "guide_phone"}
GROUP_FIELDS = DATE_FIELDS | FLAG_FIELDS | TEXT_FIELDS | {"land_currency"}


def new_group_id() -> str:
    return f"grp-{uuid4().hex[:12]}"


def new_group(flight: Flight, land_currency: Currency = Currency.DZD) -> DepartureGroup:
    """Seed a pending departure group from a catalog flight."""
    if flight.departure_date and flight.return_date and flight.return_date < flight.departure_date:
        raise InvalidDateError(
            f"Flight {flight.id} returns before it departs "
            f"({flight.return_date} < {flight.departure_date})",
            value=flight.return_date,
        )
    return DepartureGroup(
        id=new_group_id(),
        flight_id=flight.id,
        departure_date=as_calendar_date(flight.departure_date),
        land_currency=land_currency,
    )


def validate(group: DepartureGroup, reference_date: DateLike) -> DepartureGroup:
    """Mark a pending group as validated on ``reference_date``.

    Raises:
        InvalidTransitionError: group is already validated
    """
    if group.status is not GroupStatus.PENDING_VALIDATION:
        raise InvalidTransitionError(
            f"Cannot validate group {group.id}: status is '{group.status.value}' "
            f"(expected 'pending_validation')",
            current_status=group.status.value,
        )
    validated_on = as_calendar_date(require_date(reference_date))
    logger.info(f"Validated departure group {group.id} on {validated_on}")
    return replace(group, status=GroupStatus.VALIDATED, validation_date=validated_on)


def _currency(value: Any) -> Currency:
    if isinstance(value, Currency):
        return value
    try:
        return Currency(value)
    except ValueError:
        raise InvalidPatchError(f"Unknown currency {value!r}", field_name="land_currency")


def validate_group_patch(patch: Mapping[str, Any]) -> dict:
    """Check a group patch and return it with normalized values.

    Raises:
        InvalidPatchError: field not editable here (status, ids, milestones ...)
        InvalidDateError: unparsable date
    """
    changes = {}
    for name, value in patch.items():
        if name not in GROUP_FIELDS:
            raise InvalidPatchError(f"Cannot patch group field '{name}'", field_name=name)
        if name in DATE_FIELDS:
            changes[name] = as_calendar_date(value)
        elif name in FLAG_FIELDS:
            if not isinstance(value, bool):
                raise InvalidPatchError(f"{name} must be true or false", field_name=name)
            changes[name] = value
        elif name == "land_currency":
            changes[name] = _currency(value)
        else:
            changes[name] = value or None
    return changes


def update_group(
    group: DepartureGroup,
    patch: Mapping[str, Any],
    return_date: Optional[DateLike] = None,
) -> DepartureGroup:
    """Apply editable field changes. Status is never changed here.

    Raises:
        InvalidDateError: departure moved past the flight's ``return_date``
    """
    changes = validate_group_patch(patch)
    departure = changes.get("departure_date", group.departure_date)
    back = as_calendar_date(return_date)
    if departure is not None and back is not None and departure > back:
        raise InvalidDateError(
            f"Group {group.id} would depart after its return ({departure} > {back})",
            value=departure,
        )
    return replace(group, **changes)


def update_milestone(group: DepartureGroup, key: MilestoneKey, patch: Mapping[str, Any]) -> DepartureGroup:
    """Apply a payment patch to one of the four milestones."""
    match key:
        case MilestoneKey.AIR_DEPOSIT:
            return replace(group, air_deposit=apply_milestone_update(group.air_deposit, patch))
        case MilestoneKey.AIR_BALANCE:
            return replace(group, air_balance=apply_milestone_update(group.air_balance, patch))
        case MilestoneKey.LAND_DEPOSIT:
            return replace(group, land_deposit=apply_milestone_update(group.land_deposit, patch))
        case MilestoneKey.LAND_BALANCE:
            return replace(group, land_balance=apply_milestone_update(group.land_balance, patch))
    raise InvalidPatchError(f"Not a milestone key: {key!r}", field_name=str(key))


def significant_dates(group: DepartureGroup, return_date: Optional[date] = None) -> list[date]:
    """Dates that frame the group's timeline (unset ones left out)."""
    candidates = [
        group.departure_date,
        return_date,
        group.names_deadline,
        group.rooming_list_deadline,
        group.air_deposit.deadline,
        group.air_balance.deadline,
        group.land_deposit.deadline,
        group.land_balance.deadline,
        group.guide_assignment_deadline,
        group.validation_date,
    ]
    return [d for d in candidates if d is not None]
