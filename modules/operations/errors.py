"""Typed errors for departure operations.

Pure layers (temporal, payments, lifecycle) raise these. The service layer
validates before mutating and reports lookup failures (unknown project,
group or milestone) as UpdateResult values instead of raising them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class OperationsError(Exception):
    """Base error for the operations engine."""

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class InvalidDateError(OperationsError):
    """Unparsable date, or an inverted range (e.g. return before departure)."""

    value: Any = None


@dataclass
class InvalidAmountError(OperationsError):
    """Negative amount or percentage outside 0-100."""

    field_name: str = ""
    value: Any = None


@dataclass
class InvalidPatchError(OperationsError):
    """Patch names a field that cannot be set this way."""

    field_name: str = ""


@dataclass
class InvalidTransitionError(OperationsError):
    """Status change not allowed from the current state."""

    current_status: str = ""


@dataclass
class UnknownProjectError(OperationsError):
    project_id: str = ""


@dataclass
class UnknownGroupError(OperationsError):
    group_id: str = ""


@dataclass
class UnknownMilestoneError(OperationsError):
    milestone_key: str = ""
