"""Pydantic schemas for tasks and assignees.

Learn: validation here runs before any access check. A task payload with
an empty title or an unknown status is rejected with 400 whether or not
the caller could have written to the project.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from projectx.db.models import TASK_STATUSES
from projectx.schemas.common import RowId
from projectx.schemas.user import UserSummary

STATUS_PATTERN = "^(" + "|".join(TASK_STATUSES) + ")$"


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(default="")
    status: str = Field(default="todo", pattern=STATUS_PATTERN)
    project_id: RowId


class TaskUpdate(BaseModel):
    """Full update of the editable fields. Omitted status keeps the current one."""
    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(default="")
    status: Optional[str] = Field(None, pattern=STATUS_PATTERN)


class TaskRead(BaseModel):
    id: int
    project_id: int
    title: str
    description: str
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TaskDetail(TaskRead):
    """Task with its assignees."""
    assignees: list[UserSummary] = []


class TaskInProject(TaskRead):
    """Task as listed in a project's full view: assignee ids only."""
    assigned_to: list[int] = []


class AssigneeAdd(BaseModel):
    user_id: RowId


class AssigneeRead(BaseModel):
    task_id: int
    user_id: int

    model_config = {"from_attributes": True}
