"""Task status vocabulary, shared by the request schemas and the table."""

import pytest
from pydantic import ValidationError
from sqlalchemy import insert
from sqlalchemy.exc import IntegrityError

from projectx.db.models import TASK_STATUSES, Task
from projectx.schemas.task import TaskCreate, TaskUpdate


@pytest.mark.parametrize("status", TASK_STATUSES)
def test_every_status_passes_the_schemas(status):
    assert TaskCreate(title="t", project_id=1, status=status).status == status
    assert TaskUpdate(title="t", status=status).status == status


@pytest.mark.parametrize("status", ["blocked", "", "TODO", "todo|done"])
def test_unknown_status_rejected(status):
    with pytest.raises(ValidationError):
        TaskCreate(title="t", project_id=1, status=status)


def test_check_constraint_lists_every_status():
    [check] = [c for c in Task.__table__.constraints if c.name == "ck_tasks_status"]
    text = str(check.sqltext)
    for status in TASK_STATUSES:
        assert f"'{status}'" in text


@pytest.mark.asyncio
async def test_database_rejects_unknown_status(db_session, project):
    with pytest.raises(IntegrityError):
        await db_session.execute(
            insert(Task).values(project_id=project["id"], title="x", status="blocked")
        )
        await db_session.flush()
