"""
Domain errors raised by the project service.
"""

from __future__ import annotations

from typing import Optional

from fastapi import status


class ProjectApiError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal error"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ProjectNotFoundError(ProjectApiError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Project not found"

    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__()


class AudioNotFoundError(ProjectApiError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Audio not found"

    def __init__(self, audio_id: Optional[str]):
        self.audio_id = audio_id
        super().__init__()


class CascadeDeleteError(ProjectApiError):
    """
    A cascading delete stopped partway through.

    Steps listed in ``removed`` are gone for good; ``failed`` and everything
    after it were left in place.
    """

    def __init__(self, project_id: str, removed: list[str], failed: str):
        self.project_id = project_id
        self.removed = removed
        self.failed = failed
        super().__init__(f"Cascade delete of project {project_id} failed at {failed}")
