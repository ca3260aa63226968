"""Input/output helpers for project persistence and panorama stitching."""

from .projects_store import ProjectsStore
from .stitcher import StitchError, StitchResult, stitch_panorama

__all__ = [
    "ProjectsStore",
    "StitchError",
    "StitchResult",
    "stitch_panorama",
]
