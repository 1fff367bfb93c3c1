"""Task API routes.

Learn: task bodies are validated by pydantic before the handler runs, so
a malformed payload is a 400 regardless of whether the caller could have
touched the project. Access is then decided by the parent project.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from projectx.api.params import PathId
from projectx.auth.dependencies import get_current_user
from projectx.auth.roles import Identity
from projectx.db.engine import get_db
from projectx.schemas.task import (
    AssigneeAdd,
    AssigneeRead,
    TaskCreate,
    TaskDetail,
    TaskRead,
    TaskUpdate,
)
from projectx.schemas.user import DeletedResponse
from projectx.services.task_service import TaskService

router = APIRouter(prefix="/tasks")


def _svc(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db)


@router.get("", response_model=list[TaskDetail])
async def list_tasks(
    identity: Identity = Depends(get_current_user),
    svc: TaskService = Depends(_svc),
):
    """Tasks from every project the caller can access, newest first."""
    return await svc.list_tasks(identity)


@router.get("/{task_id}", response_model=TaskDetail)
async def get_task(
    task_id: PathId,
    identity: Identity = Depends(get_current_user),
    svc: TaskService = Depends(_svc),
):
    return await svc.get_task(identity, task_id)


@router.post("", response_model=TaskRead, status_code=201)
async def create_task(
    body: TaskCreate,
    identity: Identity = Depends(get_current_user),
    svc: TaskService = Depends(_svc),
):
    return await svc.create_task(
        identity,
        project_id=body.project_id,
        title=body.title,
        description=body.description,
        status=body.status,
    )


@router.post("/{task_id}/assignees", response_model=AssigneeRead, status_code=201)
async def add_assignee(
    task_id: PathId,
    body: AssigneeAdd,
    identity: Identity = Depends(get_current_user),
    svc: TaskService = Depends(_svc),
):
    return await svc.add_assignee(identity, task_id, body.user_id)


@router.put("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: PathId,
    body: TaskUpdate,
    identity: Identity = Depends(get_current_user),
    svc: TaskService = Depends(_svc),
):
    return await svc.update_task(
        identity,
        task_id,
        title=body.title,
        description=body.description,
        status=body.status,
    )


@router.delete("/{task_id}", response_model=DeletedResponse)
async def delete_task(
    task_id: PathId,
    identity: Identity = Depends(get_current_user),
    svc: TaskService = Depends(_svc),
):
    """Project owner only — participants can edit tasks but not delete them."""
    await svc.delete_task(identity, task_id)
    return DeletedResponse(id=task_id)
