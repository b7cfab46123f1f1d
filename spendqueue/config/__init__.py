"""Configuration package."""

from spendqueue.config.settings import (
    AppSettings,
    OpenerSettings,
    Settings,
    StorageSettings,
    default_state_file,
    get_settings,
)

__all__ = [
    "AppSettings",
    "OpenerSettings",
    "Settings",
    "StorageSettings",
    "default_state_file",
    "get_settings",
]
