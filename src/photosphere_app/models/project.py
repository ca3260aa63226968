"""Capture project records."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional
import uuid


@dataclass(slots=True)
class Project:
    """A named set of captured photos and, once stitched, its panorama."""

    id: str
    name: str
    photos: List[str] = field(default_factory=list)
    panorama_path: Optional[str] = None

    @property
    def can_stitch(self) -> bool:
        return len(self.photos) >= 2

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-ready mapping; ``panoramaPath`` is omitted when unset."""
        payload: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "photos": list(self.photos),
        }
        if self.panorama_path:
            payload["panoramaPath"] = self.panorama_path
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Project":
        try:
            project_id = str(payload["id"])
            name = str(payload["name"])
        except KeyError as exc:
            raise ValueError(f"Project record is missing required field {exc.args[0]!r}") from exc
        photos = [str(path) for path in (payload.get("photos") or [])]
        panorama = payload.get("panoramaPath")
        panorama_path = str(panorama) if panorama and str(panorama).strip() else None
        return cls(id=project_id, name=name, photos=photos, panorama_path=panorama_path)


def new_project(photos: Iterable[str], existing: Iterable[Project] = (), project_id: Optional[str] = None) -> Project:
    """Create the next ``Project N`` record for a finished capture session."""
    count = sum(1 for _ in existing)
    return Project(
        id=project_id or str(uuid.uuid4()),
        name=f"Project {count + 1}",
        photos=list(photos),
    )
