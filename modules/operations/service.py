"""Operations project aggregate.

Owns the departure groups of each package's operations project and applies
every change as one copy-on-write replace of the owning project.

Lookups that fail (unknown project, group or milestone) are reported as a
failed UpdateResult, never raised, so a batch of edits is not aborted by
one stale id. Invalid patches raise before anything is written.

Usage:
    from modules.operations import OperationsService, InMemoryProjectRepository

    svc = OperationsService(InMemoryProjectRepository())
    project = svc.create_project(package)
    svc.update_milestone(project.id, group_id, "air_deposit",
                         {"total_amount": 1_000_000, "percentage": 30})
"""
import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Callable, Mapping, Optional, Union

from common.models import TravelPackage

from . import lifecycle
from .catalog import PackageCatalog
from .errors import (
    InvalidTransitionError,
    OperationsError,
    UnknownGroupError,
    UnknownMilestoneError,
    UnknownProjectError,
)
from .models import (
    Currency,
    DepartureGroup,
    GroupStatus,
    MilestoneKey,
    OperationsProject,
    project_id_for,
)
from .payments import validate_milestone_patch
from .storage import ProjectRepository
from .temporal import DateLike

logger = logging.getLogger(__name__)

Listener = Callable[[OperationsProject], None]


@dataclass(frozen=True)
class UpdateResult:
    """Outcome of a mutation. ``error`` is set when nothing was changed."""
    ok: bool
    project: Optional[OperationsProject] = None
    group: Optional[DepartureGroup] = None
    error: Optional[OperationsError] = None

    @classmethod
    def failed(cls, error: OperationsError) -> 'UpdateResult':
        return cls(ok=False, error=error)


class OperationsService:
    """Aggregate over operations projects, persisted through a repository."""

    def __init__(
        self,
        repository: ProjectRepository,
        default_land_currency: Currency = Currency.DZD,
        catalog: Optional[PackageCatalog] = None,
    ):
        self.repository = repository
        self.default_land_currency = default_land_currency
        # Flight return dates bound departure edits when set
        self.catalog = catalog
        self._listeners: list[Listener] = []

    # -----------------------------------------------------------------------
    # Project lifecycle (follows the package)
    # -----------------------------------------------------------------------

    def create_project(self, package: TravelPackage) -> OperationsProject:
        """Create the operations project of a newly saved package.

        One pending departure group per flight. Idempotent: an existing
        project for the package is returned unchanged.
        """
        existing = self.repository.find_by_package(package.id)
        if existing is not None:
            return existing

        groups = tuple(
            lifecycle.new_group(flight, self.default_land_currency)
            for flight in package.flights
        )
        project = OperationsProject(id=project_id_for(package.id), package_id=package.id, groups=groups)
        self.repository.add(project)
        logger.info(f"Created operations project {project.id} with {len(groups)} departure groups")
        self._notify(project)
        return project

    def delete_project(self, package_id: str) -> bool:
        """Drop the project of a deleted package."""
        project = self.repository.find_by_package(package_id)
        if project is None:
            return False
        deleted = self.repository.delete(project.id)
        logger.info(f"Deleted operations project {project.id}")
        return deleted

    def get_project(self, project_id: str) -> Optional[OperationsProject]:
        return self.repository.get(project_id)

    def get_group(self, project_id: str, group_id: str) -> Optional[DepartureGroup]:
        project = self.repository.get(project_id)
        return project.group(group_id) if project else None

    def list_projects(self) -> list[OperationsProject]:
        return self.repository.list()

    # -----------------------------------------------------------------------
    # Group mutations
    # -----------------------------------------------------------------------

    def _locate(self, project_id: str, group_id: str):
        project = self.repository.get(project_id)
        if project is None:
            return None, None, UnknownProjectError(
                f"Operations project {project_id} not found", project_id=project_id
            )
        group = project.group(group_id)
        if group is None:
            return project, None, UnknownGroupError(
                f"Departure group {group_id} not found in {project_id}", group_id=group_id
            )
        return project, group, None

    def _return_date(self, project: OperationsProject, group: DepartureGroup) -> Optional[date]:
        if self.catalog is None:
            return None
        package = self.catalog.get_package(project.package_id)
        flight = package.flight(group.flight_id) if package else None
        return flight.return_date if flight else None

    def _store(self, project: OperationsProject, group: DepartureGroup) -> UpdateResult:
        updated = project.with_group(group)
        self.repository.replace(updated.id, updated)
        self._notify(updated)
        return UpdateResult(ok=True, project=updated, group=group)

    def update_group(self, project_id: str, group_id: str, patch: Mapping[str, Any]) -> UpdateResult:
        """Edit group fields (deadlines, suppliers, guide ...)."""
        changes = lifecycle.validate_group_patch(patch)
        project, group, error = self._locate(project_id, group_id)
        if error:
            logger.warning(f"update_group skipped: {error}")
            return UpdateResult.failed(error)
        updated = lifecycle.update_group(group, changes, self._return_date(project, group))
        return self._store(project, updated)

    def update_milestone(
        self,
        project_id: str,
        group_id: str,
        key: Union[MilestoneKey, str],
        patch: Mapping[str, Any],
    ) -> UpdateResult:
        """Edit one payment milestone; amount to pay is resolved by the calculator."""
        validate_milestone_patch(patch)
        if not isinstance(key, MilestoneKey):
            try:
                key = MilestoneKey(key)
            except ValueError:
                error = UnknownMilestoneError(f"Unknown payment milestone '{key}'", milestone_key=str(key))
                logger.warning(f"update_milestone skipped: {error}")
                return UpdateResult.failed(error)

        project, group, error = self._locate(project_id, group_id)
        if error:
            logger.warning(f"update_milestone skipped: {error}")
            return UpdateResult.failed(error)
        result = self._store(project, lifecycle.update_milestone(group, key, patch))
        logger.info(f"Updated {key.value} of group {group_id}")
        return result

    def validate_group(self, project_id: str, group_id: str, reference_date: DateLike) -> UpdateResult:
        """pending_validation → validated. A second validation is rejected."""
        project, group, error = self._locate(project_id, group_id)
        if error:
            logger.warning(f"validate_group skipped: {error}")
            return UpdateResult.failed(error)
        if group.status is not GroupStatus.PENDING_VALIDATION:
            error = InvalidTransitionError(
                f"Cannot validate: status is '{group.status.value}' "
                f"(expected 'pending_validation')",
                current_status=group.status.value,
            )
            logger.info(f"validate_group rejected for {group_id}: already validated")
            return UpdateResult(ok=False, project=project, group=group, error=error)
        return self._store(project, lifecycle.validate(group, reference_date))

    def update_notes(self, project_id: str, notes: str) -> UpdateResult:
        project = self.repository.get(project_id)
        if project is None:
            return UpdateResult.failed(UnknownProjectError(
                f"Operations project {project_id} not found", project_id=project_id
            ))
        updated = replace(project, notes=notes or "")
        self.repository.replace(updated.id, updated)
        self._notify(updated)
        return UpdateResult(ok=True, project=updated)

    # -----------------------------------------------------------------------
    # Change notification (detail views holding a group re-read it)
    # -----------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with the new project after every change.

        Returns a function that removes the listener.
        """
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _notify(self, project: OperationsProject) -> None:
        for listener in list(self._listeners):
            listener(project)
