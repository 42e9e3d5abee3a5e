from __future__ import annotations

from datetime import timedelta

import pytest

from rota_ledger.cli import build_parser
from rota_ledger.config import get_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_settings_read_environment(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
    monkeypatch.setenv("ROTA_TEAM_ID", "team-1")
    monkeypatch.setenv("ROTA_MEMBER_ID", "member-1")
    monkeypatch.setenv("ROTA_SYNC_WINDOW_AFTER_DAYS", "14")
    monkeypatch.setenv("ROTA_SYNC_WINDOW_BEFORE_DAYS", "soon")
    monkeypatch.setenv("ROTA_AVAILABILITY_TABLE", "member_availability")
    monkeypatch.setenv("ROTA_LOG_DIR", str(tmp_path))

    settings = get_settings()

    assert not settings.supabase.is_configured
    assert settings.supabase.missing_env_vars == ["SUPABASE_ANON_KEY"]
    assert settings.session.is_configured
    assert settings.sync.window_after == timedelta(days=14)
    assert settings.sync.window_before == timedelta(days=0)
    assert settings.storage.availability_table == "member_availability"
    assert settings.storage.services_table == "services"
    assert settings.log.directory == tmp_path


def test_cli_parses_status_window() -> None:
    args = build_parser().parse_args(["status", "--start", "2024-01-14", "--end", "2024-01-20", "--all-members"])
    assert args.command == "status"
    assert args.start.isoformat() == "2024-01-14"
    assert args.all_members is True
