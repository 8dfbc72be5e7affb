from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

load_dotenv()


@dataclass
class Settings:
    planner_url: str
    calendar_name: str
    timezone: ZoneInfo
    google_client_secrets: str
    google_token_file: str
    storage_state_path: str = "storage_state.json"
    ics_output: str = "intranet_events.ics"


# Weekday abbreviations as printed in the planner day headers.
WEEKDAYS = {
    "en": {"Mon": 1, "Tue": 2, "Wed": 3, "Thu": 4, "Fri": 5, "Sat": 6, "Sun": 7},
    "fr": {"Lun": 1, "Mar": 2, "Mer": 3, "Jeu": 4, "Ven": 5, "Sam": 6, "Dim": 7},
}

# Only rendered by the French interface.
FRENCH_MARKER = "Gérer les calendriers"

DEFAULT_CALENDAR_NAME = "Intranet Events"


def get_timezone(tz_name: str | None = None) -> ZoneInfo:
    tz_name = tz_name or os.getenv("TIMEZONE", "UTC")
    try:
        return ZoneInfo(tz_name)
    except Exception:  # pragma: no cover - defensive fallback
        logging.warning("Invalid TIMEZONE %s, falling back to UTC", tz_name)
        return ZoneInfo("UTC")


def get_settings() -> Settings:
    settings = Settings(
        planner_url=os.getenv("INTRANET_PLANNER_URL", ""),
        calendar_name=os.getenv("CALENDAR_NAME", DEFAULT_CALENDAR_NAME),
        timezone=get_timezone(),
        google_client_secrets=os.getenv("GOOGLE_CLIENT_SECRETS", "credentials.json"),
        google_token_file=os.getenv("GOOGLE_TOKEN_FILE", "token.json"),
        storage_state_path=os.getenv("STORAGE_STATE_PATH", "storage_state.json"),
        ics_output=os.getenv("ICS_OUTPUT", "intranet_events.ics"),
    )
    if not settings.planner_url:
        logging.warning("INTRANET_PLANNER_URL is not set")
    return settings
