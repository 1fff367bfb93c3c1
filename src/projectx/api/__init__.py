"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter. This protects all routes in each router
without modifying individual handlers. Handlers that need the identity
still declare Depends(get_current_user); FastAPI caches the dependency,
so the token is verified once per request. Health and auth routers are
open (no auth required) — /auth/me declares its own dependency.
"""

from fastapi import APIRouter, Depends

from projectx.api.auth import router as auth_router
from projectx.api.dashboard import router as dashboard_router
from projectx.api.health import router as health_router
from projectx.api.projects import router as projects_router
from projectx.api.tasks import router as tasks_router
from projectx.api.users import router as users_router
from projectx.auth.dependencies import get_current_user

# All protected routers require authentication
_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api/v1")

# Open routes, no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes, require a valid bearer token
api_router.include_router(users_router, tags=["users"], dependencies=_auth)
api_router.include_router(projects_router, tags=["projects"], dependencies=_auth)
api_router.include_router(tasks_router, tags=["tasks"], dependencies=_auth)
api_router.include_router(dashboard_router, tags=["dashboard"], dependencies=_auth)
