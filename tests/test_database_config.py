import logging

import pytest
from sqlalchemy import create_engine, inspect, select
from sqlalchemy.orm import sessionmaker

import database
from config import account_roles, configure_logging, get_settings
from database import Base, init_db, migrate, session_scope
from domain import AccountType
from models import AccountRecord


@pytest.fixture
def fresh_settings(monkeypatch, tmp_path):
    monkeypatch.setenv("LEDGER_DATA_DIR", str(tmp_path))
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


def test_settings_defaults_and_roles(fresh_settings, tmp_path) -> None:
    settings = get_settings()
    assert settings.database_url.endswith("ledger.db")
    assert str(tmp_path) in settings.database_url
    assert settings.series_excluded_categories == ("bonus", "misc", "pool")

    roles = account_roles(settings)
    assert (roles.primary, roles.savings, roles.pool) == ("account", "save", "pool")
    assert roles.pool_reset_month == 3


def test_settings_from_environment(fresh_settings) -> None:
    fresh_settings.setenv("LEDGER_POOL_RESET_MONTH", "4")
    fresh_settings.setenv("LEDGER_SERIES_EXCLUDED_CATEGORIES", " bonus , ,gift")
    fresh_settings.setenv("LEDGER_LOG_LEVEL", "debug")
    settings = get_settings()
    assert settings.pool_reset_month == 4
    assert settings.series_excluded_categories == ("bonus", "gift")
    assert settings.log_level == "DEBUG"


def test_invalid_reset_month_is_rejected(fresh_settings) -> None:
    fresh_settings.setenv("LEDGER_POOL_RESET_MONTH", "13")
    with pytest.raises(ValueError):
        get_settings()


def test_session_scope_rolls_back_on_error(monkeypatch) -> None:
    engine = create_engine("sqlite:///:memory:")
    init_db(engine)
    monkeypatch.setattr(database, "SessionLocal", sessionmaker(bind=engine, expire_on_commit=False))

    with pytest.raises(RuntimeError):
        with session_scope() as session:
            session.add(AccountRecord(key="account", name="Checking", type=AccountType.bank))
            session.flush()
            raise RuntimeError("boom")

    with session_scope() as session:
        assert session.scalars(select(AccountRecord)).all() == []
        session.add(AccountRecord(key="save", name="Savings", type=AccountType.bank))

    with session_scope() as session:
        assert [a.key for a in session.scalars(select(AccountRecord))] == ["save"]


def test_migrations_match_models(fresh_settings, tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    fresh_settings.setenv("LEDGER_DATABASE_URL", url)

    migrate()

    tables = set(inspect(create_engine(url)).get_table_names())
    assert set(Base.metadata.tables) <= tables


def test_configure_logging_uses_configured_level(fresh_settings) -> None:
    calls = []
    fresh_settings.setenv("LEDGER_LOG_LEVEL", "warning")
    fresh_settings.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    configure_logging()

    assert calls == [{"level": "WARNING"}]


def test_category_entries_rely_on_unique_constraint_index(fresh_settings, tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'indexes.db'}"
    fresh_settings.setenv("LEDGER_DATABASE_URL", url)
    migrate()
    migrated = inspect(create_engine(url)).get_indexes("category_entries")

    engine = create_engine("sqlite:///:memory:")
    init_db(engine)
    created = inspect(engine).get_indexes("category_entries")

    for indexes in (migrated, created):
        assert "ix_category_entries_month" not in {i["name"] for i in indexes}
