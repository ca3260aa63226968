"""JSON persistence for capture projects."""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import List, Optional
import tempfile

from loguru import logger

from ..models.project import Project, new_project

DEFAULT_STORE_NAME = "projects.json"


class ProjectsStore:
    """Read and write the list of projects as one JSON array file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()

    def load(self) -> List[Project]:
        if not self.path.exists():
            return []
        text = self.path.read_text(encoding="utf-8")
        if not text.strip():
            return []
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"{self.path.name} is not valid JSON: {exc}") from exc
        if not isinstance(payload, list):
            raise ValueError(f"{self.path.name} must contain a JSON array of projects")
        projects = [Project.from_dict(item) for item in payload]
        logger.debug("Loaded {} projects from {}", len(projects), self.path)
        return projects

    def save(self, projects: List[Project]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = json.dumps([project.to_dict() for project in projects], indent=2)
        # write-then-rename so a crash never leaves a truncated store behind
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".projects-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as stream:
                stream.write(data)
            os.replace(tmp_name, self.path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Saved {} projects to {}", len(projects), self.path)

    def get(self, project_id: str) -> Optional[Project]:
        for project in self.load():
            if project.id == project_id:
                return project
        return None

    def add_project(self, photos: List[str], project_id: Optional[str] = None) -> Project:
        """Append a new ``Project N`` for a finished session and persist it."""
        projects = self.load()
        project = new_project(photos, projects, project_id=project_id)
        projects.append(project)
        self.save(projects)
        logger.info("Saved {} with {} photos", project.name, len(project.photos))
        return project

    def update_panorama(self, project_id: str, panorama_path: str) -> Project:
        projects = self.load()
        for project in projects:
            if project.id == project_id:
                project.panorama_path = panorama_path
                self.save(projects)
                return project
        raise KeyError(f"Unknown project id {project_id}")
