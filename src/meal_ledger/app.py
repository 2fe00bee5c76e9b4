from __future__ import annotations

import logging
from typing import Callable

from meal_ledger.config.log_setup import configure_logging
from meal_ledger.config.settings import Settings, current_settings
from meal_ledger.data import Database, LedgerStore, RestLedgerStore, SqliteLedgerStore, StorageFailure
from meal_ledger.services.ledger_session import LedgerSession

logger = logging.getLogger(__name__)


def build_store(config: Settings, *, access_token: str | None = None) -> LedgerStore:
    """Pick the remote table when Supabase credentials are configured, else the local database."""
    if config.supabase_url and config.supabase_anon_key:
        logger.info("Using remote ledger store at %s", config.supabase_url)
        return RestLedgerStore(config.supabase_url, config.supabase_anon_key, access_token=access_token)

    database = Database(config.database_path)
    logger.info("Using local ledger database at %s", database.path)
    store = SqliteLedgerStore(database)
    store.initialize()
    return store


def create_session(
    owner_id: str,
    *,
    store: LedgerStore | None = None,
    settings: Settings | None = None,
    access_token: str | None = None,
    on_error: Callable[[StorageFailure], None] | None = None,
) -> LedgerSession:
    config = settings or current_settings()
    configure_logging(config.log_level)
    logger.debug(config.describe())

    return LedgerSession(
        store or build_store(config, access_token=access_token),
        owner_id,
        settings=config,
        on_error=on_error,
    )
