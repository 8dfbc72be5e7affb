from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional

from ics import Calendar, Event

from .models import CanonicalEvent, utc_iso
from .utils import make_uid

PRODID = "-//IntranetCalendarSync//EN"


def to_ics_event(event: CanonicalEvent, stamp: Optional[datetime] = None) -> Event:
    return Event(
        name=event.summary,
        begin=event.start_time,
        end=event.end_time,
        uid=make_uid(event.group, event.course, utc_iso(event.start_time)),
        description=event.description,
        location=event.location,
        created=stamp or datetime.now(timezone.utc),
    )


def build_calendar() -> Calendar:
    calendar = Calendar(creator=PRODID)
    calendar.scale = "GREGORIAN"
    calendar.method = "PUBLISH"
    return calendar


def calendar_lines(events: Iterable[CanonicalEvent]) -> List[str]:
    """Header lines, then one VEVENT block per event in arrival order, then the footer."""
    lines = str(build_calendar()).splitlines()
    footer = lines.index("END:VCALENDAR")
    body: List[str] = []
    stamp = datetime.now(timezone.utc)
    for event in events:
        if not event.start_time or not event.end_time:
            logging.warning("Skipping event without start/end time: %s", event.summary)
            continue
        body.extend(str(to_ics_event(event, stamp)).splitlines())
    return lines[:footer] + body + lines[footer:]


def export_events_to_ics(events: Iterable[CanonicalEvent], out_path: str | Path) -> int:
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    lines = calendar_lines(events)
    with open(out, "w", encoding="utf-8", newline="") as f:
        f.writelines(line + "\r\n" for line in lines)
    count = lines.count("BEGIN:VEVENT")
    logging.info("Wrote %d events to %s", count, out)
    return count
