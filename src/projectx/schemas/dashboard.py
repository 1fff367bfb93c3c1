"""Pydantic schemas for the personal and admin dashboards."""

from pydantic import BaseModel

from projectx.schemas.project import ProjectRead
from projectx.schemas.task import TaskRead
from projectx.schemas.user import UserRead


class PersonalDashboard(BaseModel):
    projects: list[ProjectRead] = []
    assigned_tasks: list[TaskRead] = []


class UserDashboard(UserRead):
    """One row of the admin dashboard."""
    projects: list[ProjectRead] = []
    project_tasks: list[TaskRead] = []
    assigned_tasks: list[TaskRead] = []
