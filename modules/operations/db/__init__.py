"""SQLAlchemy persistence for operations projects."""

from .connection import get_engine, get_session, init_db
from .models import Base, DepartureGroupRecord, OpsProjectRecord
from .repository import SqlAlchemyProjectRepository

__all__ = [
    "Base",
    "DepartureGroupRecord",
    "OpsProjectRecord",
    "SqlAlchemyProjectRepository",
    "get_engine",
    "get_session",
    "init_db",
]
