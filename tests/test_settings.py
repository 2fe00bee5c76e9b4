import json
import logging

import pytest

from meal_ledger.config import Settings, UserSettingsStore, configure_logging


def test_store_defaults_without_files(tmp_path):
    store = UserSettingsStore(pointer_dir=tmp_path / "missing")

    assert store.get("mark_symbol") == "+"
    assert store.get("default_standard_meals") == {"S": 14, "T1": 14, "T2": 12}
    assert not (tmp_path / "missing").exists()


def test_store_update_persists_known_keys(tmp_path):
    store = UserSettingsStore(pointer_dir=tmp_path)

    store.update(mark_symbol="x", default_school_name="Trường Suối Lừ", unknown="ignored")

    saved = json.loads((tmp_path / "user_settings.json").read_text(encoding="utf-8"))
    assert saved["mark_symbol"] == "x"
    assert saved["default_school_name"] == "Trường Suối Lừ"
    assert "unknown" not in saved
    assert UserSettingsStore(pointer_dir=tmp_path).get("mark_symbol") == "x"


def test_store_rejects_unsupported_mark_symbol(tmp_path):
    (tmp_path / "user_settings.json").write_text(json.dumps({"mark_symbol": "v"}), encoding="utf-8")

    assert UserSettingsStore(pointer_dir=tmp_path).get("mark_symbol") == "+"


def test_autosave_delay_in_seconds():
    assert Settings(autosave_delay_ms=2000).autosave_delay_seconds == pytest.approx(2.0)
    assert Settings(autosave_delay_ms=-5).autosave_delay_seconds == 0.0


def test_configure_logging_attaches_one_handler():
    package_logger = configure_logging("debug")
    configure_logging("info")

    assert package_logger.name == "meal_ledger"
    assert package_logger.level == logging.INFO
    assert len(package_logger.handlers) == 1


@pytest.fixture
def isolated_store(tmp_path, monkeypatch):
    import meal_ledger.config.settings as settings_module

    for name in ("MARK_SYMBOL", "DEFAULT_CLASS_NAME", "DATABASE_PATH"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(settings_module, "user_settings_store", UserSettingsStore(pointer_dir=tmp_path))
    monkeypatch.setattr(settings_module, "settings", settings_module.settings)
    monkeypatch.setattr(settings_module, "APP_DATA_DIR", settings_module.APP_DATA_DIR)
    return settings_module


def test_update_user_settings_rebuilds_settings(isolated_store, tmp_path):
    from meal_ledger.config import current_settings, update_user_settings

    updated = update_user_settings(mark_symbol="x", default_class_name="8C2")

    assert updated.mark_symbol == "x"
    assert updated.default_class_name == "8C2"
    assert updated.database_path == tmp_path / "meal_ledger.db"
    assert current_settings() is updated
