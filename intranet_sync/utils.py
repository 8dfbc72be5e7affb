from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

CLOCK_REGEX = re.compile(r"^\s*(\d{1,2})[h:](\d{2})\s*$")
UID_UNSAFE_REGEX = re.compile(r"[^a-zA-Z0-9-]")


def build_datetime(day: date, time_str: str, tz: ZoneInfo) -> datetime:
    match = CLOCK_REGEX.match(time_str)
    if not match:
        raise ValueError(f"Cannot parse time from '{time_str}'")
    hour, minute = int(match.group(1)), int(match.group(2))
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=tz)


def make_uid(group: str, course: str, start_iso: str) -> str:
    return UID_UNSAFE_REGEX.sub("-", f"intranet-{group}-{course}-{start_iso}")


def group_number(group: Optional[str]) -> Optional[int]:
    match = re.search(r"\d+", group or "")
    return int(match.group(0)) if match else None
