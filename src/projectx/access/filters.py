"""Query-level access predicates for list endpoints.

Learn: lists are filtered in SQL, not in Python. The WHERE clause *is*
the accessor predicate from policy.can_read_project, so rows the caller
can't see are never fetched in the first place:

    owner_id = :user OR id IN (SELECT project_id FROM project_participants
                               WHERE user_id = :user)

Using IN (subquery) instead of the LEFT JOIN the naive query uses keeps
each project to one row, so no DISTINCT is needed.
"""

from sqlalchemy import ColumnElement, Select, or_, select

from projectx.db.models import Project, ProjectParticipant, Task


def participant_project_ids(user_id: int) -> Select:
    return select(ProjectParticipant.project_id).where(
        ProjectParticipant.user_id == user_id
    )


def project_accessor_clause(user_id: int) -> ColumnElement[bool]:
    return or_(
        Project.owner_id == user_id,
        Project.id.in_(participant_project_ids(user_id)),
    )


def accessible_project_ids(user_id: int) -> Select:
    return select(Project.id).where(project_accessor_clause(user_id))


def accessible_projects(user_id: int) -> Select:
    """Projects the user owns or participates in."""
    return (
        select(Project)
        .where(project_accessor_clause(user_id))
        .order_by(Project.id)
    )


def accessible_tasks(user_id: int) -> Select:
    """Tasks in projects the user owns or participates in, newest first."""
    return (
        select(Task)
        .where(Task.project_id.in_(accessible_project_ids(user_id)))
        .order_by(Task.created_at.desc(), Task.id.desc())
    )
