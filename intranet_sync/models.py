from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

UNKNOWN_ROOM = "Unknown Room"


class Language(str, Enum):
    EN = "en"
    FR = "fr"


class ViewType(str, Enum):
    DAILY = "daily"
    MONTHLY = "monthly"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class LayoutContext:
    language: Language
    view_type: ViewType


@dataclass
class DateColumnIndex:
    """Header label -> date of a monthly grid, read from the header links."""

    dates: dict[str, date] = field(default_factory=dict)

    def get(self, label: str) -> Optional[date]:
        return self.dates.get(label.strip())

    def __len__(self) -> int:
        return len(self.dates)


def utc_iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True)
class CanonicalEvent:
    group: str
    course: str
    activity: str
    room: str
    start_time: datetime
    end_time: datetime
    raw_text: str
    language: Language

    @property
    def summary(self) -> str:
        return f"{self.group} - {self.course}"

    @property
    def location(self) -> str:
        return f"Room {self.room}"

    @property
    def description(self) -> str:
        return "\n".join(
            [
                f"Activity: {self.activity or 'N/A'}",
                f"Group: {self.group}",
                f"Room: {self.room}",
                "Generated by Intranet Calendar Sync",
            ]
        )

    def to_dict(self) -> dict:
        return {
            "group": self.group,
            "course": self.course,
            "activity": self.activity,
            "room": self.room,
            "startTime": utc_iso(self.start_time),
            "endTime": utc_iso(self.end_time),
            "rawText": self.raw_text,
            "language": self.language.value,
        }

    def to_gcal_body(self, time_zone: str, color_id: Optional[str] = None) -> dict:
        body = {
            "summary": self.summary,
            "location": self.location,
            "description": self.description,
            "start": {"dateTime": self.start_time.isoformat(), "timeZone": time_zone},
            "end": {"dateTime": self.end_time.isoformat(), "timeZone": time_zone},
        }
        if color_id:
            body["colorId"] = color_id
        return body


class Outcome(str, Enum):
    EXTRACTED = "extracted"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class ElementResult:
    index: int
    outcome: Outcome
    event: Optional[CanonicalEvent] = None
    error: Optional[str] = None


@dataclass
class ExtractionBatch:
    context: LayoutContext
    results: list[ElementResult] = field(default_factory=list)

    @property
    def events(self) -> tuple[CanonicalEvent, ...]:
        return tuple(r.event for r in self.results if r.outcome is Outcome.EXTRACTED and r.event is not None)

    def count(self, outcome: Outcome) -> int:
        return sum(1 for r in self.results if r.outcome is outcome)

    @property
    def candidates(self) -> int:
        return len(self.results)
