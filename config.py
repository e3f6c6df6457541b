import logging
import os
from functools import lru_cache
from pathlib import Path

from domain import AccountRoles


class Settings:
    def __init__(
        self,
        database_url: str,
        currency: str,
        primary_account: str,
        savings_account: str,
        pool_account: str,
        pool_reset_month: int,
        series_excluded_categories: tuple[str, ...],
        log_level: str,
    ) -> None:
        self.database_url = database_url
        self.currency = currency
        self.primary_account = primary_account
        self.savings_account = savings_account
        self.pool_account = pool_account
        self.pool_reset_month = pool_reset_month
        self.series_excluded_categories = series_excluded_categories
        self.log_level = log_level


def _ensure_data_dir() -> Path:
    root = Path(os.getenv("LEDGER_DATA_DIR", "./data")).resolve()
    root.mkdir(parents=True, exist_ok=True)
    return root


def _split_ids(raw: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    data_dir = _ensure_data_dir()
    default_db = data_dir / "ledger.db"
    database_url = os.getenv("LEDGER_DATABASE_URL", f"sqlite:///{default_db}")
    pool_reset_month = int(os.getenv("LEDGER_POOL_RESET_MONTH", "3"))
    if not 1 <= pool_reset_month <= 12:
        raise ValueError("LEDGER_POOL_RESET_MONTH must be between 1 and 12")
    return Settings(
        database_url=database_url,
        currency=os.getenv("LEDGER_CURRENCY", "JPY"),
        primary_account=os.getenv("LEDGER_PRIMARY_ACCOUNT", "account"),
        savings_account=os.getenv("LEDGER_SAVINGS_ACCOUNT", "save"),
        pool_account=os.getenv("LEDGER_POOL_ACCOUNT", "pool"),
        pool_reset_month=pool_reset_month,
        series_excluded_categories=_split_ids(
            os.getenv("LEDGER_SERIES_EXCLUDED_CATEGORIES", "bonus,misc,pool")
        ),
        log_level=os.getenv("LEDGER_LOG_LEVEL", "INFO").upper(),
    )


def account_roles(settings: Settings) -> AccountRoles:
    return AccountRoles(
        primary=settings.primary_account,
        savings=settings.savings_account,
        pool=settings.pool_account,
        pool_reset_month=settings.pool_reset_month,
    )


def configure_logging() -> None:
    logging.basicConfig(level=get_settings().log_level)
