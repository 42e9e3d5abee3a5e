"""Configuration models and helpers."""

from __future__ import annotations

from .settings import (
    DATA_DIR,
    AppSettings,
    LogSettings,
    SessionSettings,
    StorageSettings,
    SupabaseSettings,
    SyncSettings,
    get_settings,
)

__all__ = [
    "DATA_DIR",
    "AppSettings",
    "LogSettings",
    "SessionSettings",
    "StorageSettings",
    "SupabaseSettings",
    "SyncSettings",
    "get_settings",
]
