"""PostgreSQL project lookup."""

from __future__ import annotations

from sqlalchemy import select

from provisioner.domain.models.project import Project
from provisioner.domain.ports.repositories import ProjectDirectory
from provisioner.infrastructure.persistence.database import DatabaseManager
from provisioner.infrastructure.persistence.models import ProjectORM


class PostgresProjectDirectory(ProjectDirectory):
    """Resolves projects from the table the project service maintains."""

    def __init__(self, database: DatabaseManager) -> None:
        self._database = database

    async def get_by_id(self, project_id: str) -> Project | None:
        async with self._database.session() as session:
            result = await session.execute(
                select(ProjectORM).where(ProjectORM.project_id == project_id)
            )
            orm = result.scalar_one_or_none()
            if orm is None:
                return None
            return Project(project_id=orm.project_id, project_name=orm.project_name)
