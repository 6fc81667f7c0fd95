"""``/tasks`` - task CRUD, authorised through the parent project."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, status

from taskboard.api.dependencies import CurrentUserId, Service
from taskboard.api.schemas import TaskCreate, TaskUpdate

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("")
async def list_tasks(user_id: CurrentUserId, svc: Service) -> dict[str, Any]:
    """List tasks across all of the caller's projects, newest first."""
    tasks = await svc.list_tasks(user_id)
    return {"success": True, "tasks": [t.model_dump(mode="json") for t in tasks]}


@router.get("/{project_id}")
async def list_project_tasks(
    project_id: str,
    user_id: CurrentUserId,
    svc: Service,
) -> dict[str, Any]:
    tasks = await svc.list_tasks_by_project(user_id, project_id)
    return {"success": True, "tasks": [t.model_dump(mode="json") for t in tasks]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_task(body: TaskCreate, user_id: CurrentUserId, svc: Service) -> dict[str, Any]:
    task = await svc.create_task(user_id, body.project_id, body.title, body.description)
    return {"success": True, "task": task.model_dump(mode="json")}


@router.put("/{task_id}")
async def update_task(
    task_id: str,
    body: TaskUpdate,
    user_id: CurrentUserId,
    svc: Service,
) -> dict[str, Any]:
    task = await svc.update_task(user_id, task_id, body.to_patch())
    return {"success": True, "task": task.model_dump(mode="json")}


@router.delete("/{task_id}")
async def delete_task(task_id: str, user_id: CurrentUserId, svc: Service) -> dict[str, Any]:
    await svc.delete_task(user_id, task_id)
    return {"success": True, "message": "Task removed"}
