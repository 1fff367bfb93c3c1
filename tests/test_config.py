"""Settings validation."""

import pytest
from pydantic import ValidationError

from projectx.config import DEFAULT_JWT_SECRET, Settings


def test_default_secret_allowed_in_development():
    s = Settings(environment="development", jwt_secret=DEFAULT_JWT_SECRET)
    assert s.jwt_secret == DEFAULT_JWT_SECRET


def test_default_secret_refused_in_production():
    with pytest.raises(ValidationError):
        Settings(environment="production", jwt_secret=DEFAULT_JWT_SECRET)


def test_custom_secret_in_production():
    s = Settings(environment="production", jwt_secret="a-real-secret-from-the-vault")
    assert s.environment == "production"


@pytest.mark.parametrize("rounds", [3, 32])
def test_bcrypt_rounds_bounds(rounds):
    with pytest.raises(ValidationError):
        Settings(bcrypt_rounds=rounds)


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("PROJECTX_ACCESS_TOKEN_EXPIRE_MINUTES", "15")
    assert Settings().access_token_expire_minutes == 15
