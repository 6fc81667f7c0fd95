"""``/projects`` - project CRUD scoped to the authenticated user."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, status

from taskboard.api.dependencies import CurrentUserId, Service
from taskboard.api.schemas import ProjectCreate, ProjectUpdate

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("")
async def list_projects(user_id: CurrentUserId, svc: Service) -> dict[str, Any]:
    """List the caller's projects, newest first."""
    projects = await svc.list_projects(user_id)
    return {"success": True, "projects": [p.model_dump(mode="json") for p in projects]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_project(
    body: ProjectCreate,
    user_id: CurrentUserId,
    svc: Service,
) -> dict[str, Any]:
    project = await svc.create_project(user_id, body.title, body.description)
    return {"success": True, "project": project.model_dump(mode="json")}


@router.get("/{project_id}")
async def get_project(project_id: str, user_id: CurrentUserId, svc: Service) -> dict[str, Any]:
    project = await svc.get_project(user_id, project_id)
    return {"success": True, "project": project.model_dump(mode="json")}


@router.put("/{project_id}")
async def update_project(
    project_id: str,
    body: ProjectUpdate,
    user_id: CurrentUserId,
    svc: Service,
) -> dict[str, Any]:
    """Partial update - omitted or blank fields keep their value."""
    project = await svc.update_project(user_id, project_id, body.to_patch())
    return {"success": True, "project": project.model_dump(mode="json")}


@router.delete("/{project_id}")
async def delete_project(project_id: str, user_id: CurrentUserId, svc: Service) -> dict[str, Any]:
    removed = await svc.delete_project(user_id, project_id)
    return {"success": True, "message": "Project removed", "tasks_removed": removed}
