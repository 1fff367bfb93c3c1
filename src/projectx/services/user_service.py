"""User service — registration, login, and admin user management.

Learn: this is the only place credential records are created or removed.
Login checks the password and hands back the user; turning that into a
token is the route's job (it owns the TokenCodec).

Unknown email and wrong password produce the same AuthError, so the
login endpoint can't be used to discover which emails are registered.
Both paths also run one bcrypt comparison, so response time doesn't
tell them apart either.
"""

from functools import lru_cache

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from projectx.auth.password import hash_password, verify_password
from projectx.auth.roles import DEFAULT_ROLE
from projectx.db.models import User
from projectx.errors import AuthError, AuthReason, Conflict, NotFound

logger = structlog.get_logger()


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("not-a-real-password")


class UserService:
    """Business logic for credential records."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    # ─── Register ────────────────────────────────────────

    async def create_user(
        self,
        name: str,
        email: str,
        password: str,
        role: str = DEFAULT_ROLE,
    ) -> User:
        """Create a credential record. 409 on a duplicate email.

        Learn: the SELECT is the fast path; the unique index on
        users.email settles the race when two identical registrations
        arrive together.
        """
        if await self.get_by_email(email):
            raise Conflict("Email already registered")

        user = User(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=role,
        )
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise Conflict("Email already registered")

        await self.db.commit()
        await self.db.refresh(user)
        logger.info("user.registered", user_id=user.id, role=user.role)
        return user

    async def register(self, name: str, email: str, password: str) -> User:
        """Public sign-up. Always creates a plain "user"."""
        return await self.create_user(name, email, password)

    # ─── Login ───────────────────────────────────────────

    async def authenticate(self, email: str, password: str) -> User:
        user = await self.get_by_email(email)
        # Unknown emails still pay for one bcrypt comparison
        stored_hash = user.password_hash if user is not None else _dummy_hash()
        if not verify_password(password, stored_hash) or user is None:
            logger.info("auth.login_failed", known_email=user is not None)
            raise AuthError(AuthReason.CREDENTIALS)
        logger.info("auth.login", user_id=user.id)
        return user

    # ─── Admin ───────────────────────────────────────────

    async def list_users(self) -> list[User]:
        result = await self.db.execute(select(User).order_by(User.id))
        return list(result.scalars().all())

    async def delete_user(self, user_id: int) -> None:
        """Remove a credential record.

        Memberships and assignments go with it (ON DELETE CASCADE).
        A user who still owns projects is refused by the store.
        """
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFound("User not found")

        await self.db.delete(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise Conflict("User still owns projects")
        logger.info("user.deleted", deleted_user_id=user_id)
