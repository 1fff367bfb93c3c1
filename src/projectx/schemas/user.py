"""Pydantic schemas for users, registration and login.

Learn: RegisterRequest has no role field. Everyone who signs up through
the API is a "user"; managers, teamleads and admins are seeded by an
operator (see `projectx create-user --role`).
"""

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=8)


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class UserRead(BaseModel):
    id: int
    name: str
    email: str
    role: str

    model_config = {"from_attributes": True}


class UserSummary(BaseModel):
    """User as embedded in tasks (assignees)."""
    id: int
    name: str
    email: str

    model_config = {"from_attributes": True}


class IdentityRead(BaseModel):
    """What the current token says about its bearer."""
    id: int
    email: str
    role: str

    model_config = {"from_attributes": True}


class DeletedResponse(BaseModel):
    deleted: bool = True
    id: int
