"""Domain models for departure operations.

One OperationsProject per travel package, one DepartureGroup per departure,
four PaymentMilestones per group (air/land x deposit/balance).

All records are frozen dataclasses; every change produces a new record
(copy-on-write) so a group is replaced atomically inside its project.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Optional

from .errors import InvalidTransitionError


class GroupStatus(Enum):
    PENDING_VALIDATION = 'pending_validation'
    VALIDATED = 'validated'


class PaymentStatus(Enum):
    PENDING = 'pending'
    PAID = 'paid'


class AmountSource(Enum):
    UNSET = 'unset'        # nothing computed or entered yet
    DERIVED = 'derived'    # total x percentage / 100
    MANUAL = 'manual'      # entered by hand, kept until total/percentage change


class Currency(Enum):
    DZD = 'DZD'
    EUR = 'EUR'
    USD = 'USD'
    SAR = 'SAR'


class Leg(Enum):
    AIR = 'air'
    LAND = 'land'


class Stage(Enum):
    DEPOSIT = 'deposit'
    BALANCE = 'balance'


class MilestoneKey(Enum):
    """The four payment milestones of a departure group."""
    AIR_DEPOSIT = 'air_deposit'
    AIR_BALANCE = 'air_balance'
    LAND_DEPOSIT = 'land_deposit'
    LAND_BALANCE = 'land_balance'

    @property
    def leg(self) -> Leg:
        return Leg(self.value.split('_')[0])

    @property
    def stage(self) -> Stage:
        return Stage(self.value.split('_')[1])


@dataclass(frozen=True)
class PaymentMilestone:
    """Deposit or balance payment owed to a supplier."""
    deadline: Optional[date] = None
    total_amount: Optional[float] = None
    percentage: Optional[float] = None
    amount_to_pay: Optional[float] = None
    status: PaymentStatus = PaymentStatus.PENDING
    receipt_url: Optional[str] = None
    amount_source: AmountSource = AmountSource.UNSET

    @property
    def is_paid(self) -> bool:
        return self.status is PaymentStatus.PAID


@dataclass(frozen=True)
class DepartureGroup:
    """One departure of a package, tracked from validation to guide assignment."""
    id: str
    flight_id: str
    departure_date: Optional[date] = None
    status: GroupStatus = GroupStatus.PENDING_VALIDATION
    validation_date: Optional[date] = None

    # Air
    is_air_subcontracted: bool = False
    air_supplier_name: Optional[str] = None
    air_deposit: PaymentMilestone = field(default_factory=PaymentMilestone)
    air_balance: PaymentMilestone = field(default_factory=PaymentMilestone)
    names_deadline: Optional[date] = None  # option noms & émission

    # Land
    is_land_subcontracted: bool = False
    land_supplier_name: Optional[str] = None
    land_currency: Currency = Currency.DZD
    land_deposit: PaymentMilestone = field(default_factory=PaymentMilestone)
    land_balance: PaymentMilestone = field(default_factory=PaymentMilestone)
    rooming_list_deadline: Optional[date] = None

    # Team
    guide_name: Optional[str] = None
    guide_phone: Optional[str] = None
    guide_assignment_deadline: Optional[date] = None

    def __post_init__(self):
        validated = self.status is GroupStatus.VALIDATED
        if validated != (self.validation_date is not None):
            raise InvalidTransitionError(
                f"Group {self.id}: validation_date must be set if and only if "
                f"status is 'validated'",
                current_status=self.status.value,
            )

    @property
    def is_validated(self) -> bool:
        return self.status is GroupStatus.VALIDATED

    def milestone(self, key: MilestoneKey) -> PaymentMilestone:
        match key:
            case MilestoneKey.AIR_DEPOSIT:
                return self.air_deposit
            case MilestoneKey.AIR_BALANCE:
                return self.air_balance
            case MilestoneKey.LAND_DEPOSIT:
                return self.land_deposit
            case MilestoneKey.LAND_BALANCE:
                return self.land_balance
        raise ValueError(f"Not a milestone key: {key!r}")

    @property
    def milestones(self) -> dict[MilestoneKey, PaymentMilestone]:
        return {key: self.milestone(key) for key in MilestoneKey}


@dataclass(frozen=True)
class OperationsProject:
    """Operations record of a travel package. Created and deleted with it."""
    id: str
    package_id: str
    notes: str = ''
    groups: tuple[DepartureGroup, ...] = ()

    def group(self, group_id: str) -> Optional[DepartureGroup]:
        return next((g for g in self.groups if g.id == group_id), None)

    def with_group(self, group: DepartureGroup) -> 'OperationsProject':
        """Copy of this project with the group of the same id replaced."""
        groups = tuple(group if g.id == group.id else g for g in self.groups)
        return replace(self, groups=groups)


def project_id_for(package_id: str) -> str:
    return f"ops-{package_id}"
