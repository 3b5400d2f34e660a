"""
HTTP routes for the project API.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from project_api.dependencies import get_project_service
from project_api.schemas import (
    ProjectCreate,
    ProjectCreatedResponse,
    ProjectDeletedResponse,
    ProjectUpdate,
    ProjectUpdatedResponse,
)
from project_api.service import ProjectService

router = APIRouter()


@router.post("/project", response_model=ProjectCreatedResponse)
async def create_project(
    payload: ProjectCreate,
    service: ProjectService = Depends(get_project_service),
):
    project = await service.create_project(payload.name, payload.audio_id)
    return ProjectCreatedResponse(message="Project created", id=project["id"])


@router.get("/projects")
async def list_projects(service: ProjectService = Depends(get_project_service)):
    """
    Return every stored project, in whatever order the store lists them.

    An empty store answers ``{"projects": []}`` rather than a bare list.
    """
    projects = await service.list_projects()
    if not projects:
        return {"projects": []}
    return projects


@router.get("/project/{project_id}")
async def get_project(
    project_id: str,
    service: ProjectService = Depends(get_project_service),
):
    return await service.get_project(project_id)


@router.put("/project/{project_id}", response_model=ProjectUpdatedResponse)
async def update_project(
    project_id: str,
    request: Request,
    service: ProjectService = Depends(get_project_service),
):
    # Unknown ids answer 404 whatever the body looks like.
    await service.get_project(project_id)
    try:
        payload = ProjectUpdate.model_validate_json(await request.body())
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False)) from exc
    project = await service.update_project(project_id, payload)
    return ProjectUpdatedResponse(message="Project updated", project=project)


@router.delete("/project/{project_id}", response_model=ProjectDeletedResponse)
async def delete_project(
    project_id: str,
    service: ProjectService = Depends(get_project_service),
):
    result = await service.delete_project(project_id)
    return ProjectDeletedResponse(
        message="Project deleted", id=result.project_id, removed=result.removed
    )
