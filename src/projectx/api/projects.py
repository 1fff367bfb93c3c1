"""Project API routes.

Learn: Routes translate HTTP to service calls. Every handler receives
the caller's Identity; the service asks the access layer whether that
identity may proceed. Role-gated routes (create, add participant) check
the role in a dependency, before the body is even looked at.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from projectx.api.params import PathId
from projectx.auth.dependencies import get_current_user, require_roles
from projectx.auth.roles import PARTICIPANT_MANAGERS, PROJECT_CREATORS, Identity
from projectx.db.engine import get_db
from projectx.schemas.project import (
    ParticipantAdd,
    ParticipantRead,
    ProjectCreate,
    ProjectFull,
    ProjectInfo,
    ProjectRead,
    ProjectUpdate,
)
from projectx.schemas.user import DeletedResponse
from projectx.services.project_service import ProjectService

router = APIRouter(prefix="/projects")


def _svc(db: AsyncSession = Depends(get_db)) -> ProjectService:
    return ProjectService(db)


@router.get("", response_model=list[ProjectRead])
async def list_projects(
    identity: Identity = Depends(get_current_user),
    svc: ProjectService = Depends(_svc),
):
    """Projects the caller owns or participates in."""
    return await svc.list_projects(identity)


@router.post("", response_model=ProjectRead, status_code=201)
async def create_project(
    body: ProjectCreate,
    identity: Identity = Depends(require_roles(*PROJECT_CREATORS)),
    svc: ProjectService = Depends(_svc),
):
    """Create a project owned by the caller (manager or teamlead only)."""
    return await svc.create_project(identity, name=body.name, description=body.description)


@router.get("/{project_id}", response_model=ProjectRead)
async def get_project(
    project_id: PathId,
    identity: Identity = Depends(get_current_user),
    svc: ProjectService = Depends(_svc),
):
    return await svc.get_project(identity, project_id)


@router.get("/{project_id}/full", response_model=ProjectFull)
async def get_project_full(
    project_id: PathId,
    identity: Identity = Depends(get_current_user),
    svc: ProjectService = Depends(_svc),
):
    """Project with its tasks and participants."""
    return await svc.get_project_full(identity, project_id)


@router.get("/{project_id}/info", response_model=ProjectInfo)
async def get_project_info(
    project_id: PathId,
    identity: Identity = Depends(get_current_user),
    svc: ProjectService = Depends(_svc),
):
    """Project alone, without tasks or participants."""
    project = await svc.get_project(identity, project_id)
    return ProjectInfo(project=ProjectRead.model_validate(project))


@router.put("/{project_id}", response_model=ProjectRead)
async def update_project(
    project_id: PathId,
    body: ProjectUpdate,
    identity: Identity = Depends(get_current_user),
    svc: ProjectService = Depends(_svc),
):
    """Owner or admin only. 404 if the project doesn't exist."""
    return await svc.update_project(
        identity, project_id, name=body.name, description=body.description
    )


@router.delete("/{project_id}", response_model=DeletedResponse)
async def delete_project(
    project_id: PathId,
    identity: Identity = Depends(get_current_user),
    svc: ProjectService = Depends(_svc),
):
    """Owner or admin only. 404 if the project doesn't exist."""
    await svc.delete_project(identity, project_id)
    return DeletedResponse(id=project_id)


@router.post(
    "/{project_id}/participants", response_model=ParticipantRead, status_code=201
)
async def add_participant(
    project_id: PathId,
    body: ParticipantAdd,
    identity: Identity = Depends(require_roles(*PARTICIPANT_MANAGERS)),
    svc: ProjectService = Depends(_svc),
):
    """Add a participant (manager or teamlead, any project)."""
    return await svc.add_participant(identity, project_id, body.user_id)
