from meal_ledger.app import build_store, create_session
from meal_ledger.config import Settings
from meal_ledger.data import RestLedgerStore, SqliteLedgerStore


def test_build_store_defaults_to_local_database(tmp_path):
    config = Settings(database_path=tmp_path / "data" / "meal_ledger.db", supabase_url=None, supabase_anon_key=None)

    store = build_store(config)

    assert isinstance(store, SqliteLedgerStore)
    assert (tmp_path / "data" / "meal_ledger.db").exists()
    assert store.fetch("teacher-1", 0, 2024) is None


def test_build_store_uses_rest_when_credentials_are_set(tmp_path):
    config = Settings(
        database_path=tmp_path / "meal_ledger.db",
        supabase_url="https://example.supabase.co",
        supabase_anon_key="anon-key",
    )

    assert isinstance(build_store(config, access_token="token"), RestLedgerStore)
    assert not (tmp_path / "meal_ledger.db").exists()


def test_create_session_wires_settings(tmp_path):
    config = Settings(database_path=tmp_path / "meal_ledger.db", supabase_url=None, supabase_anon_key=None)

    session = create_session("teacher-1", settings=config)

    assert session.owner_id == "teacher-1"
    assert not session.is_open
