"""Pydantic schemas for projects and participants."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from projectx.schemas.common import RowId
from projectx.schemas.task import TaskInProject
from projectx.schemas.user import UserRead


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="")


class ProjectUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="")


class ProjectRead(BaseModel):
    id: int
    name: str
    description: str
    owner_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ProjectInfo(BaseModel):
    """Short form: the project alone, without tasks or participants."""
    project: ProjectRead


class ProjectFull(BaseModel):
    """Project with its tasks (assignee ids) and participants."""
    project: ProjectRead
    tasks: list[TaskInProject] = []
    participants: list[UserRead] = []


class ParticipantAdd(BaseModel):
    user_id: RowId


class ParticipantRead(BaseModel):
    id: int
    project_id: int
    user_id: int

    model_config = {"from_attributes": True}
