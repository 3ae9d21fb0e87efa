"""SQLAlchemy ORM models."""

from __future__ import annotations

from sqlalchemy import (
    Column,
    DateTime,
    func,
    Index,
    Integer,
    String,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class DeploymentORM(Base):
    __tablename__ = "deployments"

    id = Column(String(64), primary_key=True)
    project_id = Column(String(100), nullable=False, index=True)
    space_id = Column(String(255), nullable=False)
    deployment_name = Column(String(255), nullable=False)
    started_at = Column(DateTime(timezone=True), nullable=False)
    steps_data = Column(JSONB, nullable=False, default=list)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_deployments_project_started", "project_id", "started_at"),
    )


class ProjectORM(Base):
    """Read-only view of projects owned by the project service."""

    __tablename__ = "projects"

    project_id = Column(String(100), primary_key=True)
    project_name = Column(String(255), nullable=False)
