"""Settings dependency for API routes."""

from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

from fastapi import Depends

from app.config import AppSettings, get_settings


def settings_dependency() -> AppSettings:
    return get_settings()


def today_dependency(settings: AppSettings = Depends(settings_dependency)) -> date:
    """Calendar day in the configured timezone."""

    return datetime.now(ZoneInfo(settings.timezone)).date()


__all__ = ["settings_dependency", "today_dependency"]
