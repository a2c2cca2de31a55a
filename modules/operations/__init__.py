"""Departure operations.

Post-sale tracking of group departures: one operations project per travel
package, one departure group per flight, four supplier payment milestones
per group (air/land x deposit/balance), deadlines with J-n urgency, the
departure worklist, the group timeline and the passenger manifest.
"""

from .errors import (
    OperationsError,
    InvalidDateError,
    InvalidAmountError,
    InvalidPatchError,
    InvalidTransitionError,
    UnknownProjectError,
    UnknownGroupError,
    UnknownMilestoneError,
)
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
from .temporal import (
    compute_timeline_bounds,
    days_remaining,
    parse_date,
    project,
    project_span,
)
from .payments import apply_milestone_update, balance_due, leg_summary
from .urgency import UrgencyBand, classify, countdown
from .lifecycle import new_group, validate, update_group, update_milestone
from .storage import (
    ProjectRepository,
    InMemoryProjectRepository,
    JSONFileProjectRepository,
    create_repository,
)
from .service import OperationsService, UpdateResult
from .dashboard import DepartureRow, list_departures
from .timeline import Timeline, build_timeline
from .manifest import Manifest, build_manifest
from .detail import GroupDetail, build_group_detail
from .catalog import BookingFeed, InMemoryCatalog, PackageCatalog, load_catalog

__all__ = [
    # Errors
    "OperationsError",
    "InvalidDateError",
    "InvalidAmountError",
    "InvalidPatchError",
    "InvalidTransitionError",
    "UnknownProjectError",
    "UnknownGroupError",
    "UnknownMilestoneError",
    # Models
    "AmountSource",
    "Currency",
    "DepartureGroup",
    "GroupStatus",
    "MilestoneKey",
    "OperationsProject",
    "PaymentMilestone",
    "PaymentStatus",
    # Engine
    "compute_timeline_bounds",
    "days_remaining",
    "parse_date",
    "project",
    "project_span",
    "apply_milestone_update",
    "balance_due",
    "leg_summary",
    "UrgencyBand",
    "classify",
    "countdown",
    "new_group",
    "validate",
    "update_group",
    "update_milestone",
    # Storage & service
    "ProjectRepository",
    "InMemoryProjectRepository",
    "JSONFileProjectRepository",
    "create_repository",
    "OperationsService",
    "UpdateResult",
    # Views
    "DepartureRow",
    "list_departures",
    "Timeline",
    "build_timeline",
    "Manifest",
    "build_manifest",
    "GroupDetail",
    "build_group_detail",
    # Catalog
    "BookingFeed",
    "InMemoryCatalog",
    "PackageCatalog",
    "load_catalog",
]
