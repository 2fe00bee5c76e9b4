from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from meal_ledger.config.user_settings_store import UserSettingsStore

BASE_DIR = Path(__file__).resolve().parents[3]
ENV_PATH = BASE_DIR / ".env"
load_dotenv(ENV_PATH)

APP_NAME = os.getenv("APP_NAME", "So Cham Com")
user_settings_store = UserSettingsStore()

APP_DATA_DIR = Path(user_settings_store.get("app_data_dir")).expanduser()


def _standard_default(meal: str) -> int:
    stored = user_settings_store.get("default_standard_meals") or {}
    fallback = {"S": 14, "T1": 14, "T2": 12}[meal]
    return int(os.getenv(f"DEFAULT_STANDARD_{meal}", stored.get(meal, fallback)))


@dataclass(frozen=True)
class Settings:
    app_name: str = APP_NAME
    database_path: Path = Path(os.getenv("DATABASE_PATH", str(APP_DATA_DIR / "meal_ledger.db")))
    autosave_delay_ms: int = int(os.getenv("AUTOSAVE_DELAY_MS", "2000"))
    mark_symbol: str = os.getenv("MARK_SYMBOL", user_settings_store.get("mark_symbol", "+"))
    default_standard_s: int = _standard_default("S")
    default_standard_t1: int = _standard_default("T1")
    default_standard_t2: int = _standard_default("T2")
    default_school_name: str = os.getenv("DEFAULT_SCHOOL_NAME", user_settings_store.get("default_school_name", ""))
    default_class_name: str = os.getenv("DEFAULT_CLASS_NAME", user_settings_store.get("default_class_name", ""))
    default_teacher_name: str = os.getenv("DEFAULT_TEACHER_NAME", user_settings_store.get("default_teacher_name", ""))
    default_location: str = os.getenv("DEFAULT_LOCATION", user_settings_store.get("default_location", ""))
    supabase_url: str | None = os.getenv("SUPABASE_URL") or None
    supabase_anon_key: str | None = os.getenv("SUPABASE_ANON_KEY") or None
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def autosave_delay_seconds(self) -> float:
        return max(self.autosave_delay_ms, 0) / 1000.0

    def describe(self) -> str:
        return (
            f"Settings(app_name={self.app_name}, "
            f"database_path={self.database_path}, "
            f"autosave_delay_ms={self.autosave_delay_ms}, "
            f"mark_symbol={self.mark_symbol}, "
            f"supabase_url={self.supabase_url}, "
            f"log_level={self.log_level})"
        )


settings = Settings()


def current_settings() -> Settings:
    return settings


def refresh_settings_from_store() -> Settings:
    """Rebuild the settings object from the current user store values."""

    global settings, APP_DATA_DIR  # noqa: PLW0603 - module-level singletons

    user_settings_store.reload()
    APP_DATA_DIR = Path(user_settings_store.get("app_data_dir")).expanduser()

    settings = Settings(
        app_name=APP_NAME,
        database_path=Path(os.getenv("DATABASE_PATH", str(APP_DATA_DIR / "meal_ledger.db"))),
        autosave_delay_ms=settings.autosave_delay_ms,
        mark_symbol=os.getenv("MARK_SYMBOL", user_settings_store.get("mark_symbol", "+")),
        default_standard_s=_standard_default("S"),
        default_standard_t1=_standard_default("T1"),
        default_standard_t2=_standard_default("T2"),
        default_school_name=os.getenv("DEFAULT_SCHOOL_NAME", user_settings_store.get("default_school_name", "")),
        default_class_name=os.getenv("DEFAULT_CLASS_NAME", user_settings_store.get("default_class_name", "")),
        default_teacher_name=os.getenv("DEFAULT_TEACHER_NAME", user_settings_store.get("default_teacher_name", "")),
        default_location=os.getenv("DEFAULT_LOCATION", user_settings_store.get("default_location", "")),
        supabase_url=settings.supabase_url,
        supabase_anon_key=settings.supabase_anon_key,
        log_level=settings.log_level,
    )
    return settings


def update_user_settings(**changes: object) -> Settings:
    """Persist preference changes and return the rebuilt settings."""
    user_settings_store.update(**changes)
    return refresh_settings_from_store()
