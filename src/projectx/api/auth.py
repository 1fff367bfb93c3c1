"""Auth API — registration, login, current identity.

Learn: Routes for user authentication:
- POST /auth/register → create a new user account (role "user")
- POST /auth/login → email/password → JWT access token
- GET /auth/me → what the caller's token says about them

There is no refresh endpoint and no logout: tokens are stateless and
simply expire.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from projectx.auth.dependencies import get_current_user, get_token_codec
from projectx.auth.jwt import TokenCodec
from projectx.auth.roles import Identity
from projectx.db.engine import get_db
from projectx.schemas.user import (
    IdentityRead,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserRead,
)
from projectx.services.user_service import UserService

router = APIRouter(prefix="/auth")


def _svc(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


@router.post("/register", response_model=UserRead, status_code=201)
async def register(body: RegisterRequest, svc: UserService = Depends(_svc)):
    """Create a new user account."""
    return await svc.register(name=body.name, email=body.email, password=body.password)


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    svc: UserService = Depends(_svc),
    codec: TokenCodec = Depends(get_token_codec),
):
    """Login with email and password → JWT access token."""
    user = await svc.authenticate(body.email, body.password)
    token = codec.issue(Identity(id=user.id, email=user.email, role=user.role))
    return TokenResponse(access_token=token, expires_in=codec.expires_in)


@router.get("/me", response_model=IdentityRead)
async def get_me(identity: Identity = Depends(get_current_user)):
    """The identity embedded in the caller's token (no DB lookup)."""
    return identity
