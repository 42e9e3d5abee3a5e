from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from platformdirs import user_data_dir

load_dotenv()

APP_NAME = "Rota Ledger"
APP_AUTHOR = "RotaLedger"
DATA_DIR = Path(user_data_dir(APP_NAME, APP_AUTHOR))


@dataclass(frozen=True)
class SupabaseSettings:
    url: Optional[str]
    anon_key: Optional[str]

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.anon_key)

    @property
    def missing_env_vars(self) -> list[str]:
        missing = []
        if not self.url:
            missing.append("SUPABASE_URL")
        if not self.anon_key:
            missing.append("SUPABASE_ANON_KEY")
        return missing


@dataclass(frozen=True)
class StorageSettings:
    services_table: str
    availability_table: str
    assignments_table: str
    patterns_table: str
    roles_table: str
    members_table: str


@dataclass(frozen=True)
class SyncSettings:
    window_before: timedelta
    window_after: timedelta


@dataclass(frozen=True)
class SessionSettings:
    team_id: Optional[str]
    member_id: Optional[str]

    @property
    def is_configured(self) -> bool:
        return bool(self.team_id and self.member_id)


@dataclass(frozen=True)
class LogSettings:
    level: str
    directory: Path


@dataclass(frozen=True)
class AppSettings:
    supabase: SupabaseSettings
    storage: StorageSettings
    sync: SyncSettings
    session: SessionSettings
    log: LogSettings


def _timedelta_from_env(name: str, default_days: int) -> timedelta:
    raw = os.getenv(name)
    if not raw:
        return timedelta(days=default_days)
    try:
        days = float(raw)
    except ValueError:
        return timedelta(days=default_days)
    return timedelta(days=days)


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    supabase = SupabaseSettings(
        url=os.getenv("SUPABASE_URL"),
        anon_key=os.getenv("SUPABASE_ANON_KEY"),
    )

    storage = StorageSettings(
        services_table=os.getenv("ROTA_SERVICES_TABLE", "services"),
        availability_table=os.getenv("ROTA_AVAILABILITY_TABLE", "availability"),
        assignments_table=os.getenv("ROTA_ASSIGNMENTS_TABLE", "service_assignments"),
        patterns_table=os.getenv("ROTA_PATTERNS_TABLE", "service_types"),
        roles_table=os.getenv("ROTA_ROLES_TABLE", "roles"),
        members_table=os.getenv("ROTA_MEMBERS_TABLE", "team_members"),
    )

    sync = SyncSettings(
        window_before=_timedelta_from_env("ROTA_SYNC_WINDOW_BEFORE_DAYS", 0),
        window_after=_timedelta_from_env("ROTA_SYNC_WINDOW_AFTER_DAYS", 62),
    )

    session = SessionSettings(
        team_id=os.getenv("ROTA_TEAM_ID"),
        member_id=os.getenv("ROTA_MEMBER_ID"),
    )

    log = LogSettings(
        level=os.getenv("ROTA_LOG_LEVEL", "INFO").upper(),
        directory=Path(os.getenv("ROTA_LOG_DIR", str(DATA_DIR / "logs"))),
    )

    return AppSettings(supabase=supabase, storage=storage, sync=sync, session=session, log=log)
