"""SQLAlchemy 2.0 models for operations projects.

Two tables:
- ops_projects:      one row per travel package
- departure_groups:  departures of a project, milestones stored as JSON
"""
from datetime import date
from typing import Optional

from sqlalchemy import (
    Boolean,
    Date,
    ForeignKey,
    Index,
    Integer,
    JSON,
    Text,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)


class Base(DeclarativeBase):
    """Shared declarative base for operations models."""
    pass


class OpsProjectRecord(Base):
    __tablename__ = "ops_projects"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    package_id: Mapped[str] = mapped_column(Text, nullable=False)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")

    groups: Mapped[list["DepartureGroupRecord"]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="DepartureGroupRecord.position",
    )

    __table_args__ = (
        Index("ix_ops_projects_package", "package_id", unique=True),
    )

    def __repr__(self) -> str:
        return f"<OpsProjectRecord(id='{self.id}', package='{self.package_id}')>"


class DepartureGroupRecord(Base):
    __tablename__ = "departure_groups"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    project_id: Mapped[str] = mapped_column(
        Text, ForeignKey("ops_projects.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    flight_id: Mapped[str] = mapped_column(Text, nullable=False)
    departure_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="pending_validation")
    validation_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    is_air_subcontracted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    air_supplier_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    names_deadline: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    is_land_subcontracted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    land_supplier_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    land_currency: Mapped[str] = mapped_column(Text, nullable=False, default="DZD")
    rooming_list_deadline: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    guide_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    guide_phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    guide_assignment_deadline: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # {"air_deposit": {...}, "air_balance": {...}, "land_deposit": ..., "land_balance": ...}
    milestones: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    project: Mapped["OpsProjectRecord"] = relationship(back_populates="groups")

    __table_args__ = (
        Index("ix_groups_project", "project_id"),
        Index("ix_groups_status", "status"),
        Index("ix_groups_departure", "departure_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<DepartureGroupRecord(id='{self.id}', "
            f"departure={self.departure_date}, status='{self.status}')>"
        )
