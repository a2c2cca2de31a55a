"""Request/response models for the operations API."""

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from .dashboard import DepartureRow
from .detail import GroupDetail
from .models import Currency, PaymentStatus
from .serialization import group_to_dict, milestone_to_dict
from .temporal import Span
from .urgency import Classification


class GroupPatch(BaseModel):
    """PATCH /projects/{project_id}/groups/{group_id} body. Only sent fields change."""
    model_config = ConfigDict(extra="forbid")

    names_deadline: Optional[date] = None
    rooming_list_deadline: Optional[date] = None
    guide_assignment_deadline: Optional[date] = None
    departure_date: Optional[date] = None
    is_air_subcontracted: Optional[bool] = None
    air_supplier_name: Optional[str] = None
    is_land_subcontracted: Optional[bool] = None
    land_supplier_name: Optional[str] = None
    land_currency: Optional[Currency] = None
    guide_name: Optional[str] = None
    guide_phone: Optional[str] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class MilestonePatch(BaseModel):
    """PATCH .../milestones/{key} body."""
    model_config = ConfigDict(extra="forbid")

    deadline: Optional[date] = None
    total_amount: Optional[float] = None
    percentage: Optional[float] = None
    amount_to_pay: Optional[float] = None
    status: Optional[PaymentStatus] = None
    receipt_url: Optional[str] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class NotesPatch(BaseModel):
    """PATCH /projects/{project_id} body."""
    model_config = ConfigDict(extra="forbid")

    notes: str = ""


class ProjectResponse(BaseModel):
    status: str = "ok"
    project_id: str
    notes: str = ""


class UpdateResponse(BaseModel):
    """Result of a group mutation."""
    status: str = "ok"
    project_id: str
    group: dict[str, Any]


class CountdownOut(BaseModel):
    days_remaining: int
    label: str
    band: str


class DepartureRowOut(BaseModel):
    project_id: str
    group_id: str
    package_id: str
    product_name: str
    departure_date: Optional[date] = None
    status: str
    countdown: Optional[CountdownOut] = None
    air_supplier: str
    land_supplier: str
    air_balance_paid: bool
    land_balance_paid: bool


class DepartureListResponse(BaseModel):
    """GET /departures response."""
    reference_date: date
    role: Optional[str] = None
    count: int = 0
    departures: list[DepartureRowOut] = Field(default_factory=list)


def row_out(row: DepartureRow) -> DepartureRowOut:
    cd = None
    if row.countdown is not None:
        cd = CountdownOut(
            days_remaining=row.countdown.days_remaining,
            label=row.countdown.label,
            band=row.countdown.band.value,
        )
    return DepartureRowOut(
        project_id=row.project_id,
        group_id=row.group.id,
        package_id=row.package.id,
        product_name=row.package.product_name,
        departure_date=row.group.departure_date,
        status=row.group.status.value,
        countdown=cd,
        air_supplier=row.air_supplier,
        land_supplier=row.land_supplier,
        air_balance_paid=row.air_balance_paid,
        land_balance_paid=row.land_balance_paid,
    )


def _classification(c: Classification) -> dict:
    return {"label": c.label, "band": c.band.value, "days_remaining": c.days_remaining}


def _span(s: Span) -> dict:
    return {"left": s.left, "width": s.width, "show": s.show}


def detail_to_dict(detail: GroupDetail) -> dict:
    """JSON view of a group's detail screen."""
    urgent = detail.most_urgent
    return {
        "project_id": detail.project_id,
        "package": {
            "id": detail.package.id,
            "product_name": detail.package.product_name,
            "destination": detail.package.destination,
        },
        "group": group_to_dict(detail.group),
        "checklist": [
            {
                "key": item.key,
                "label": item.label,
                "deadline": item.deadline.isoformat() if item.deadline else None,
                **_classification(item.classification),
            }
            for item in detail.checklist
        ],
        "most_urgent": urgent.key if urgent else None,
        "milestones": [
            {
                "key": line.key.value,
                "currency": line.currency.value,
                "suggested_amount": line.suggested_amount,
                **milestone_to_dict(line.milestone),
                "urgency": _classification(line.classification),
            }
            for line in detail.milestones
        ],
        "air": {"total_cost": detail.air.total_cost, "due": detail.air.due,
                "paid": detail.air.paid, "outstanding": detail.air.outstanding},
        "land": {"total_cost": detail.land.total_cost, "due": detail.land.due,
                 "paid": detail.land.paid, "outstanding": detail.land.outstanding},
        "timeline": {
            "min_date": detail.timeline.min_date.isoformat(),
            "max_date": detail.timeline.max_date.isoformat(),
            "trip": _span(detail.timeline.trip),
            "markers": [
                {"kind": m.kind, "label": m.label, "date": m.date.isoformat(), **_span(m.position)}
                for m in detail.timeline.markers
            ],
            "months": [
                {"start": t.start.isoformat(), "left": t.left, "width": t.width}
                for t in detail.timeline.months
            ],
        },
        "manifest": {
            "booking_count": detail.manifest.booking_count,
            "passenger_count": detail.manifest.passenger_count,
            "total_rooms": detail.manifest.total_rooms,
            "rooms_by_type": detail.manifest.rooms_by_type,
            "missing_passports": len(detail.manifest.missing_passports),
            "passengers": [
                {
                    "full_name": e.full_name,
                    "booking_id": e.booking_id,
                    "pax_type": e.pax_type,
                    "passport_number": e.passport_number,
                    "nationality": e.nationality,
                }
                for e in detail.manifest.entries
            ],
        },
    }
