"""Payment milestone calculator.

Resolves the amount to pay for a supplier milestone from total and
percentage, or keeps a manually entered amount.

Rules:
    - A patch touching total_amount or percentage recomputes amount_to_pay
      as total x percentage / 100 (when both are known) -> 'derived'
    - An explicit amount_to_pay in the same patch always wins -> 'manual'
    - A derived amount whose total or percentage is cleared is kept as
      'manual' (or 'unset' when there is no amount)
    - Marking a milestone paid never changes the amount
"""
import math
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional

from .errors import InvalidAmountError, InvalidPatchError
from .models import AmountSource, PaymentMilestone, PaymentStatus
from .temporal import as_calendar_date

MILESTONE_FIELDS = {
    "deadline",
    "total_amount",
    "percentage",
    "amount_to_pay",
    "status",
    "receipt_url",
}


@dataclass(frozen=True)
class LegSummary:
    """Money view of one leg (air or land): deposit + balance."""
    total_cost: Optional[float]
    due: float
    paid: float

    @property
    def outstanding(self) -> float:
        return self.due - self.paid


def _amount(name: str, value: Any, upper: Optional[float] = None) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidAmountError(f"{name} must be a number, got {value!r}",
                                 field_name=name, value=value)
    if math.isnan(value) or math.isinf(value):
        raise InvalidAmountError(f"{name} must be finite", field_name=name, value=value)
    if value < 0:
        raise InvalidAmountError(f"{name} must not be negative ({value})",
                                 field_name=name, value=value)
    if upper is not None and value > upper:
        raise InvalidAmountError(f"{name} must be between 0 and {upper:g} ({value})",
                                 field_name=name, value=value)
    return float(value)


def _status(value: Any) -> PaymentStatus:
    if isinstance(value, PaymentStatus):
        return value
    try:
        return PaymentStatus(value)
    except ValueError:
        raise InvalidPatchError(f"Unknown payment status {value!r}", field_name="status")


def validate_milestone_patch(patch: Mapping[str, Any]) -> dict:
    """Check a milestone patch and return it with normalized values.

    Raises:
        InvalidPatchError: unknown field or status
        InvalidAmountError: negative amount, percentage outside 0-100
        InvalidDateError: unparsable deadline
    """
    unknown = set(patch) - MILESTONE_FIELDS
    if unknown:
        name = sorted(unknown)[0]
        raise InvalidPatchError(f"Cannot patch milestone field '{name}'", field_name=name)

    changes = {}
    for name, value in patch.items():
        if name == "deadline":
            changes[name] = as_calendar_date(value)
        elif name == "percentage":
            changes[name] = _amount(name, value, upper=100)
        elif name in ("total_amount", "amount_to_pay"):
            changes[name] = _amount(name, value)
        elif name == "status":
            changes[name] = _status(value)
        elif name == "receipt_url":
            changes[name] = value or None
    return changes


def derive_amount(total_amount: Optional[float], percentage: Optional[float]) -> Optional[float]:
    if total_amount is None or percentage is None:
        return None
    return total_amount * percentage / 100


def apply_milestone_update(milestone: PaymentMilestone, patch: Mapping[str, Any]) -> PaymentMilestone:
    """Merge ``patch`` into ``milestone`` and resolve the amount to pay."""
    changes = validate_milestone_patch(patch)
    updated = replace(milestone, **changes)

    if "amount_to_pay" in changes:
        source = AmountSource.MANUAL if changes["amount_to_pay"] is not None else AmountSource.UNSET
        return replace(updated, amount_source=source)

    if "total_amount" in changes or "percentage" in changes:
        derived = derive_amount(updated.total_amount, updated.percentage)
        if derived is not None:
            return replace(updated, amount_to_pay=derived, amount_source=AmountSource.DERIVED)
        if updated.amount_source is AmountSource.DERIVED:
            source = AmountSource.MANUAL if updated.amount_to_pay is not None else AmountSource.UNSET
            return replace(updated, amount_source=source)

    return updated


# ---------------------------------------------------------------------------
# Derived figures for the detail view
# ---------------------------------------------------------------------------

def balance_due(deposit: PaymentMilestone) -> Optional[float]:
    """What remains after the deposit: total minus deposit amount."""
    if deposit.total_amount is None:
        return None
    return deposit.total_amount - (deposit.amount_to_pay or 0.0)


def leg_summary(deposit: PaymentMilestone, balance: PaymentMilestone) -> LegSummary:
    """Totals for one leg.

    The balance counts with its own amount when one is set, otherwise with
    what remains after the deposit.
    """
    balance_amount = balance.amount_to_pay
    if balance_amount is None:
        balance_amount = balance_due(deposit)

    due = (deposit.amount_to_pay or 0.0) + (balance_amount or 0.0)
    paid = 0.0
    if deposit.is_paid:
        paid += deposit.amount_to_pay or 0.0
    if balance.is_paid:
        paid += balance_amount or 0.0

    total_cost = deposit.total_amount if deposit.total_amount is not None else balance.total_amount
    return LegSummary(total_cost=total_cost, due=due, paid=paid)
