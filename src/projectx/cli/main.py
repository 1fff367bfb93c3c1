"""Project-X operator CLI.

Usage:
    projectx serve                                  # Run the API with uvicorn
    projectx init-db                                # Create tables (dev / tests)
    projectx create-user --name Ann --email a@x.io --role manager

Registration through the API always creates role "user". Managers,
teamleads and admins are seeded here, directly against the database.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import sys

import click

from projectx.auth.roles import Role
from projectx.config import settings
from projectx.db import engine as db_engine
from projectx.db.models import Base
from projectx.errors import Conflict

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


async def _init_db() -> None:
    async with db_engine.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def _create_user(name: str, email: str, password: str, role: str):
    from projectx.services.user_service import UserService

    async with db_engine.async_session_factory() as session:
        return await UserService(session).create_user(
            name=name, email=email, password=password, role=role
        )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@click.group()
def cli():
    """Project-X backend administration."""


@cli.command()
@click.option("--host", default=None, help="Bind address (default from settings).")
@click.option("--port", default=None, type=int, help="Port (default from settings).")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes.")
def serve(host: str | None, port: int | None, reload: bool):
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "projectx.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@cli.command("init-db")
def init_db():
    """Create all tables. Production databases use alembic instead."""
    _run(_init_db())
    click.secho("Tables created.", fg="green")


@cli.command("create-user")
@click.option("--name", required=True)
@click.option("--email", required=True)
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option(
    "--role",
    type=click.Choice([r.value for r in Role]),
    default=Role.USER.value,
    show_default=True,
)
def create_user(name: str, email: str, password: str, role: str):
    """Create a user with any role."""
    if len(password) < 8:
        click.secho("Error: password must be at least 8 characters", fg="red", err=True)
        sys.exit(1)
    try:
        user = _run(_create_user(name, email, password, role))
    except Conflict as e:
        click.secho(f"Error: {e.detail}", fg="red", err=True)
        sys.exit(1)
    click.secho(f"Created user {user.id} <{user.email}> role={user.role}", fg="green")


if __name__ == "__main__":
    cli()
