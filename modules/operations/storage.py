"""Storage backends for operations projects.

The service only needs a key-addressable store: get / replace by project id.
Supports in-memory (tests, demos), a JSON file (development) and
SQLAlchemy/SQLite (see modules.operations.db).

Writes replace a whole project. There is no conflict detection: with
several writers the last write wins.
"""

import json
import logging
from pathlib import Path
from typing import Iterator, Optional, Protocol

from .models import OperationsProject
from .serialization import project_from_dict, project_to_dict

logger = logging.getLogger(__name__)


class ProjectRepository(Protocol):
    """Storage backend protocol."""

    def get(self, project_id: str) -> Optional[OperationsProject]:
        ...

    def replace(self, project_id: str, project: OperationsProject) -> None:
        """Store ``project`` under ``project_id``, overwriting any previous one."""
        ...

    def add(self, project: OperationsProject) -> None:
        ...

    def delete(self, project_id: str) -> bool:
        """Remove a project, return whether it existed."""
        ...

    def find_by_package(self, package_id: str) -> Optional[OperationsProject]:
        ...

    def list(self) -> list[OperationsProject]:
        ...


class InMemoryProjectRepository:
    """Dict-backed store, insertion ordered."""

    def __init__(self, projects: Optional[list[OperationsProject]] = None):
        self._projects: dict[str, OperationsProject] = {}
        for project in projects or []:
            self.add(project)

    def get(self, project_id: str) -> Optional[OperationsProject]:
        return self._projects.get(project_id)

    def replace(self, project_id: str, project: OperationsProject) -> None:
        self._projects[project_id] = project

    def add(self, project: OperationsProject) -> None:
        self.replace(project.id, project)

    def delete(self, project_id: str) -> bool:
        return self._projects.pop(project_id, None) is not None

    def find_by_package(self, package_id: str) -> Optional[OperationsProject]:
        return next((p for p in self._projects.values() if p.package_id == package_id), None)

    def list(self) -> list[OperationsProject]:
        return list(self._projects.values())

    def __iter__(self) -> Iterator[OperationsProject]:
        return iter(self.list())


class JSONFileProjectRepository(InMemoryProjectRepository):
    """Simple JSON file store for development.

    Keeps all projects in memory and rewrites the whole file on each change.
    """

    def __init__(self, path: str = "data/operations.json"):
        super().__init__()
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text())
        except (json.JSONDecodeError, OSError):
            logger.warning(f"Corrupted operations file {self.path}, starting fresh")
            return
        for item in data.get("projects", []):
            project = project_from_dict(item)
            self._projects[project.id] = project
        logger.debug(f"Loaded {len(self._projects)} projects from {self.path}")

    def _save(self) -> None:
        data = {"projects": [project_to_dict(p) for p in self._projects.values()]}
        self.path.write_text(json.dumps(data, indent=2, ensure_ascii=False))

    def replace(self, project_id: str, project: OperationsProject) -> None:
        super().replace(project_id, project)
        self._save()

    def delete(self, project_id: str) -> bool:
        existed = super().delete(project_id)
        if existed:
            self._save()
        return existed


def create_repository(config=None) -> ProjectRepository:
    """Create the repository selected by ``storage.backend``."""
    if config is None:
        from .config import get_config
        config = get_config()
    storage = config.storage

    if storage.backend == "json":
        return JSONFileProjectRepository(storage.json_path)
    if storage.backend == "sqlite":
        from .db import SqlAlchemyProjectRepository, get_engine
        return SqlAlchemyProjectRepository(get_engine(storage.database_url))
    return InMemoryProjectRepository()
