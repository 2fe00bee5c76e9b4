from .log_setup import configure_logging
from .settings import Settings, current_settings, refresh_settings_from_store, update_user_settings
from .user_settings_store import UserSettingsStore

__all__ = [
    "Settings",
    "UserSettingsStore",
    "configure_logging",
    "current_settings",
    "refresh_settings_from_store",
    "update_user_settings",
]
