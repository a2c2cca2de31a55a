"""Persisted layout of operations projects.

Plain dicts with ISO dates and enum values. Unset dates and amounts are
stored as None (JSON null) so a round-trip never turns "no value" into
0 or "" and the percentage-based recomputation stays intact.
"""
from datetime import date
from typing import Any, Optional

from .models import (
    AmountSource,
    Currency,
    DepartureGroup,
    GroupStatus,
    MilestoneKey,
    OperationsProject,
    PaymentMilestone,
    PaymentStatus,
)
from .temporal import as_calendar_date


def _iso(d: Optional[date]) -> Optional[str]:
    return d.isoformat() if d else None


def _float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def milestone_to_dict(m: PaymentMilestone) -> dict:
    return {
        "deadline": _iso(m.deadline),
        "total_amount": m.total_amount,
        "percentage": m.percentage,
        "amount_to_pay": m.amount_to_pay,
        "status": m.status.value,
        "receipt_url": m.receipt_url,
        "amount_source": m.amount_source.value,
    }


def milestone_from_dict(data: Optional[dict]) -> PaymentMilestone:
    if not data:
        return PaymentMilestone()
    return PaymentMilestone(
        deadline=as_calendar_date(data.get("deadline")),
        total_amount=_float(data.get("total_amount")),
        percentage=_float(data.get("percentage")),
        amount_to_pay=_float(data.get("amount_to_pay")),
        status=PaymentStatus(data.get("status", "pending")),
        receipt_url=data.get("receipt_url"),
        amount_source=AmountSource(data.get("amount_source", "unset")),
    )


def group_to_dict(g: DepartureGroup) -> dict:
    data = {
        "id": g.id,
        "flight_id": g.flight_id,
        "departure_date": _iso(g.departure_date),
        "status": g.status.value,
        "validation_date": _iso(g.validation_date),
        "is_air_subcontracted": g.is_air_subcontracted,
        "air_supplier_name": g.air_supplier_name,
        "names_deadline": _iso(g.names_deadline),
        "is_land_subcontracted": g.is_land_subcontracted,
        "land_supplier_name": g.land_supplier_name,
        "land_currency": g.land_currency.value,
        "rooming_list_deadline": _iso(g.rooming_list_deadline),
        "guide_name": g.guide_name,
        "guide_phone": g.guide_phone,
        "guide_assignment_deadline": _iso(g.guide_assignment_deadline),
    }
    for key in MilestoneKey:
        data[key.value] = milestone_to_dict(g.milestone(key))
    return data


def group_from_dict(data: dict) -> DepartureGroup:
    return DepartureGroup(
        id=data["id"],
        flight_id=data["flight_id"],
        departure_date=as_calendar_date(data.get("departure_date")),
        status=GroupStatus(data.get("status", "pending_validation")),
        validation_date=as_calendar_date(data.get("validation_date")),
        is_air_subcontracted=bool(data.get("is_air_subcontracted", False)),
        air_supplier_name=data.get("air_supplier_name"),
        air_deposit=milestone_from_dict(data.get("air_deposit")),
        air_balance=milestone_from_dict(data.get("air_balance")),
        names_deadline=as_calendar_date(data.get("names_deadline")),
        is_land_subcontracted=bool(data.get("is_land_subcontracted", False)),
        land_supplier_name=data.get("land_supplier_name"),
        land_currency=Currency(data.get("land_currency", "DZD")),
        land_deposit=milestone_from_dict(data.get("land_deposit")),
        land_balance=milestone_from_dict(data.get("land_balance")),
        rooming_list_deadline=as_calendar_date(data.get("rooming_list_deadline")),
        guide_name=data.get("guide_name"),
        guide_phone=data.get("guide_phone"),
        guide_assignment_deadline=as_calendar_date(data.get("guide_assignment_deadline")),
    )


def project_to_dict(p: OperationsProject) -> dict:
    return {
        "id": p.id,
        "package_id": p.package_id,
        "notes": p.notes,
        "groups": [group_to_dict(g) for g in p.groups],
    }


def project_from_dict(data: dict) -> OperationsProject:
    return OperationsProject(
        id=data["id"],
        package_id=data["package_id"],
        notes=data.get("notes") or "",
        groups=tuple(group_from_dict(g) for g in data.get("groups", [])),
    )
