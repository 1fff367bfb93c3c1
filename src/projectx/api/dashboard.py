"""Dashboard routes — personal summary and the admin overview."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from projectx.auth.dependencies import get_current_user, require_user_manager
from projectx.auth.roles import Identity
from projectx.db.engine import get_db
from projectx.schemas.dashboard import PersonalDashboard, UserDashboard
from projectx.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard")


def _svc(db: AsyncSession = Depends(get_db)) -> DashboardService:
    return DashboardService(db)


@router.get("", response_model=PersonalDashboard)
async def personal_dashboard(
    identity: Identity = Depends(get_current_user),
    svc: DashboardService = Depends(_svc),
):
    """The caller's projects and the tasks assigned to them."""
    return await svc.personal(identity.id)


@router.get("/users", response_model=list[UserDashboard])
async def users_dashboard(
    _: Identity = Depends(require_user_manager),
    svc: DashboardService = Depends(_svc),
):
    """Every user with their projects, project tasks and assigned tasks."""
    return await svc.all_users()
