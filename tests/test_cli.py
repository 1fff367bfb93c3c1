"""Operator CLI tests — init-db and create-user against a throwaway SQLite file.

Learn: each CLI command runs its own event loop (asyncio.run), so the
test engine uses NullPool: no connection outlives the loop that opened it.
"""

import pytest
from click.testing import CliRunner
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from projectx.auth.password import verify_password
from projectx.cli.main import _run, cli
from projectx.db import engine as db_engine
from projectx.db.models import User


@pytest.fixture()
def cli_db(tmp_path, monkeypatch):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}", poolclass=NullPool
    )
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    monkeypatch.setattr(db_engine, "engine", engine)
    monkeypatch.setattr(db_engine, "async_session_factory", factory)
    yield factory
    _run(engine.dispose())


def _users(factory) -> list[User]:
    async def fetch():
        async with factory() as session:
            result = await session.execute(select(User).order_by(User.id))
            return list(result.scalars().all())

    return _run(fetch())


def test_init_db_and_create_user(cli_db):
    runner = CliRunner()

    result = runner.invoke(cli, ["init-db"])
    assert result.exit_code == 0, result.output
    assert "Tables created" in result.output

    result = runner.invoke(
        cli,
        [
            "create-user", "--name", "Grace", "--email", "grace@example.com",
            "--password", "hopper1906", "--role", "admin",
        ],
    )
    assert result.exit_code == 0, result.output
    assert "role=admin" in result.output

    [grace] = _users(cli_db)
    assert grace.email == "grace@example.com"
    assert grace.role == "admin"
    assert verify_password("hopper1906", grace.password_hash)


def test_create_user_defaults_to_user_role(cli_db):
    runner = CliRunner()
    runner.invoke(cli, ["init-db"])
    result = runner.invoke(
        cli,
        ["create-user", "--name", "Al", "--email", "al@example.com"],
        input="password_123\npassword_123\n",
    )
    assert result.exit_code == 0, result.output
    assert _users(cli_db)[0].role == "user"


def test_create_user_duplicate_email(cli_db):
    runner = CliRunner()
    runner.invoke(cli, ["init-db"])
    args = ["create-user", "--name", "Dup", "--email", "dup@example.com",
            "--password", "password_123"]

    assert runner.invoke(cli, args).exit_code == 0
    result = runner.invoke(cli, args)
    assert result.exit_code == 1
    assert "already registered" in result.output
    assert len(_users(cli_db)) == 1


def test_create_user_rejects_short_password(cli_db):
    runner = CliRunner()
    runner.invoke(cli, ["init-db"])
    result = runner.invoke(
        cli, ["create-user", "--name", "S", "--email", "s@example.com", "--password", "short"]
    )
    assert result.exit_code == 1
    assert _users(cli_db) == []


def test_create_user_rejects_unknown_role(cli_db):
    result = CliRunner().invoke(
        cli,
        ["create-user", "--name", "X", "--email", "x@example.com",
         "--password", "password_123", "--role", "overlord"],
    )
    assert result.exit_code == 2
