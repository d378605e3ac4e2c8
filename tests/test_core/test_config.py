# tests/test_core/test_config.py

from showtracker.core.config import Settings


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def test_default_async_url_uses_asyncpg():
    s = _settings(
        DATABASE_URL_OVERRIDE="",
        POSTGRES_SERVER="localhost",
        POSTGRES_PORT=5432,
        POSTGRES_USER="u",
        POSTGRES_PASSWORD="p",
        POSTGRES_DB="tv",
    )
    assert s.DATABASE_URL == "postgresql://u:p@localhost:5432/tv"
    assert s.ASYNC_DATABASE_URL == "postgresql+asyncpg://u:p@localhost:5432/tv"
    assert s.is_postgres is True


def test_override_wins_and_is_upgraded():
    s = _settings(DATABASE_URL_OVERRIDE="postgresql://x:y@db:5433/shows")
    assert s.ASYNC_DATABASE_URL == "postgresql+asyncpg://x:y@db:5433/shows"


def test_sqlite_override_used_as_is():
    s = _settings(DATABASE_URL_OVERRIDE="sqlite+aiosqlite:///:memory:")
    assert s.ASYNC_DATABASE_URL == "sqlite+aiosqlite:///:memory:"
    assert s.is_postgres is False


def test_blank_override_is_ignored():
    s = _settings(DATABASE_URL_OVERRIDE="   ")
    assert s.DATABASE_URL_OVERRIDE is None


def test_environment_flags():
    assert _settings(ENV="production").is_production is True
    assert _settings(ENV="staging").is_production is False
    assert _settings(DB_STATEMENT_TIMEOUT_MS="2500").DB_STATEMENT_TIMEOUT_MS == 2500
