"""SQLAlchemy-backed project repository.

replace() deletes the stored project (groups cascade) and inserts the new
version in one transaction, so a project is always swapped as a whole.
"""
import logging
from typing import Optional

from sqlalchemy import select

from ..models import MilestoneKey, OperationsProject
from ..serialization import group_from_dict, group_to_dict
from .connection import get_session
from .models import DepartureGroupRecord, OpsProjectRecord

logger = logging.getLogger(__name__)

MILESTONE_KEYS = [key.value for key in MilestoneKey]


def _to_record(project_id: str, project: OperationsProject) -> OpsProjectRecord:
    record = OpsProjectRecord(id=project_id, package_id=project.package_id, notes=project.notes)
    for position, group in enumerate(project.groups):
        data = group_to_dict(group)
        milestones = {key: data.pop(key) for key in MILESTONE_KEYS}
        record.groups.append(DepartureGroupRecord(
            id=group.id,
            position=position,
            departure_date=group.departure_date,
            validation_date=group.validation_date,
            names_deadline=group.names_deadline,
            rooming_list_deadline=group.rooming_list_deadline,
            guide_assignment_deadline=group.guide_assignment_deadline,
            flight_id=data["flight_id"],
            status=data["status"],
            is_air_subcontracted=data["is_air_subcontracted"],
            air_supplier_name=data["air_supplier_name"],
            is_land_subcontracted=data["is_land_subcontracted"],
            land_supplier_name=data["land_supplier_name"],
            land_currency=data["land_currency"],
            guide_name=data["guide_name"],
            guide_phone=data["guide_phone"],
            milestones=milestones,
        ))
    return record


def _from_record(record: OpsProjectRecord) -> OperationsProject:
    groups = []
    for row in record.groups:
        data = {
            "id": row.id,
            "flight_id": row.flight_id,
            "departure_date": row.departure_date,
            "status": row.status,
            "validation_date": row.validation_date,
            "is_air_subcontracted": row.is_air_subcontracted,
            "air_supplier_name": row.air_supplier_name,
            "names_deadline": row.names_deadline,
            "is_land_subcontracted": row.is_land_subcontracted,
            "land_supplier_name": row.land_supplier_name,
            "land_currency": row.land_currency,
            "rooming_list_deadline": row.rooming_list_deadline,
            "guide_name": row.guide_name,
            "guide_phone": row.guide_phone,
            "guide_assignment_deadline": row.guide_assignment_deadline,
            **(row.milestones or {}),
        }
        groups.append(group_from_dict(data))
    return OperationsProject(
        id=record.id,
        package_id=record.package_id,
        notes=record.notes or "",
        groups=tuple(groups),
    )


class SqlAlchemyProjectRepository:
    """Project repository on a SQLAlchemy engine (SQLite or PostgreSQL)."""

    def __init__(self, engine):
        self.engine = engine

    def get(self, project_id: str) -> Optional[OperationsProject]:
        with get_session(self.engine) as session:
            record = session.get(OpsProjectRecord, project_id)
            return _from_record(record) if record is not None else None

    def replace(self, project_id: str, project: OperationsProject) -> None:
        with get_session(self.engine) as session:
            existing = session.get(OpsProjectRecord, project_id)
            if existing is not None:
                session.delete(existing)
                session.flush()
            session.add(_to_record(project_id, project))
        logger.debug(f"Stored project {project_id} ({len(project.groups)} groups)")

    def add(self, project: OperationsProject) -> None:
        self.replace(project.id, project)

    def delete(self, project_id: str) -> bool:
        with get_session(self.engine) as session:
            existing = session.get(OpsProjectRecord, project_id)
            if existing is None:
                return False
            session.delete(existing)
        return True

    def find_by_package(self, package_id: str) -> Optional[OperationsProject]:
        with get_session(self.engine) as session:
            record = session.scalars(
                select(OpsProjectRecord).where(OpsProjectRecord.package_id == package_id)
            ).first()
            return _from_record(record) if record is not None else None

    def list(self) -> list[OperationsProject]:
        with get_session(self.engine) as session:
            records = session.scalars(select(OpsProjectRecord).order_by(OpsProjectRecord.id)).all()
            return [_from_record(r) for r in records]

    def __iter__(self):
        return iter(self.list())
