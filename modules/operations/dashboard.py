"""Operations dashboard: the departure worklist.

Flattens the departure groups of every published package into one list,
sorted by countdown to departure (soonest first, undated last) and
filtered by role: planning roles also see groups still pending validation,
everyone else only validated departures.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Union

from common.models import TravelPackage, UserRole

from .models import DepartureGroup, OperationsProject
from .temporal import DateLike, days_remaining
from .urgency import Countdown, countdown

logger = logging.getLogger(__name__)

SUBCONTRACTED = "subcontracted"


@dataclass(frozen=True)
class DepartureRow:
    package: TravelPackage
    group: DepartureGroup
    project_id: str
    days_remaining: Optional[int]
    countdown: Optional[Countdown]

    @property
    def is_pending(self) -> bool:
        return not self.group.is_validated

    @property
    def air_supplier(self) -> str:
        if self.group.is_air_subcontracted:
            return SUBCONTRACTED
        return self.group.air_supplier_name or "-"

    @property
    def land_supplier(self) -> str:
        if self.group.is_land_subcontracted:
            return SUBCONTRACTED
        return self.group.land_supplier_name or self.package.partner_name or "-"

    @property
    def air_balance_paid(self) -> bool:
        return self.group.air_balance.is_paid

    @property
    def land_balance_paid(self) -> bool:
        return self.group.land_balance.is_paid


def can_see_pending(role: Union[UserRole, str, None], config=None) -> bool:
    if role is None:
        return False
    if config is None:
        from .config import get_config
        config = get_config()
    value = role.value if isinstance(role, UserRole) else str(role)
    return value in config.visibility.pending_visible_roles


def _sort_key(row: DepartureRow):
    # Undated departures go last
    if row.days_remaining is None:
        return (1, 0)
    return (0, row.days_remaining)


class DepartureList:
    """Restartable view over the current departures.

    Nothing is cached: every iteration reads the projects and packages
    again and recomputes countdowns against ``reference_date``. Pass
    collections or a repository, not one-shot iterators.
    """

    def __init__(
        self,
        projects: Iterable[OperationsProject],
        packages: Iterable[TravelPackage],
        role: Union[UserRole, str, None],
        reference_date: DateLike,
        config=None,
    ):
        self.projects = projects
        self.packages = packages
        self.role = role
        self.reference_date = reference_date
        self.config = config

    def _rows(self) -> Iterator[DepartureRow]:
        published = {p.id: p for p in self.packages if p.is_published}
        thresholds = self.config.urgency if self.config is not None else None
        for project in self.projects:
            package = published.get(project.package_id)
            if package is None:
                continue
            for group in project.groups:
                days = None
                if group.departure_date is not None:
                    days = days_remaining(group.departure_date, self.reference_date)
                yield DepartureRow(
                    package=package,
                    group=group,
                    project_id=project.id,
                    days_remaining=days,
                    countdown=countdown(group.departure_date, self.reference_date, thresholds),
                )

    def __iter__(self) -> Iterator[DepartureRow]:
        show_pending = can_see_pending(self.role, self.config)
        rows = [r for r in self._rows() if show_pending or r.group.is_validated]
        rows.sort(key=_sort_key)
        logger.debug(f"Departure list for role={self.role}: {len(rows)} rows")
        return iter(rows)


def list_departures(
    projects: Iterable[OperationsProject],
    packages: Iterable[TravelPackage],
    role: Union[UserRole, str, None],
    reference_date: DateLike,
    config=None,
) -> DepartureList:
    """Departures visible to ``role``, soonest first.

    Args:
        projects: operations projects (e.g. a repository's list())
        packages: catalog packages; only published ones are shown
        role: user role; administrators and travel designers see pending groups
        reference_date: today
        config: OperationsConfig, defaults from the active configuration
    """
    return DepartureList(projects, packages, role, reference_date, config)
