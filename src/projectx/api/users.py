"""User administration routes. Admin only."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from projectx.api.params import PathId
from projectx.auth.dependencies import require_user_manager
from projectx.auth.roles import Identity
from projectx.db.engine import get_db
from projectx.schemas.user import DeletedResponse, UserRead
from projectx.services.user_service import UserService

router = APIRouter(prefix="/users")


def _svc(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


@router.get("", response_model=list[UserRead])
async def list_users(
    _: Identity = Depends(require_user_manager),
    svc: UserService = Depends(_svc),
):
    return await svc.list_users()


@router.delete("/{user_id}", response_model=DeletedResponse)
async def delete_user(
    user_id: PathId,
    _: Identity = Depends(require_user_manager),
    svc: UserService = Depends(_svc),
):
    await svc.delete_user(user_id)
    return DeletedResponse(id=user_id)
