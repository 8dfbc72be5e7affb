from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from .models import CanonicalEvent
from .utils import group_number

SCOPES = ["https://www.googleapis.com/auth/calendar"]
CALENDAR_DESCRIPTION = "Calendar for intranet events imported via Intranet Calendar Sync"
DEFAULT_COLOR_ID = "1"


@dataclass
class FailedEvent:
    event: CanonicalEvent
    error: str


@dataclass
class SyncReport:
    calendar_id: str
    created: List[CanonicalEvent] = field(default_factory=list)
    skipped: List[CanonicalEvent] = field(default_factory=list)
    failed: List[FailedEvent] = field(default_factory=list)
    total_attempted: int = 0

    @property
    def created_count(self) -> int:
        return len(self.created)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def failed_count(self) -> int:
        return len(self.failed)


def _load_credentials(client_secrets_file: str, token_file: str) -> Credentials:
    creds = None
    if token_file:
        try:
            creds = Credentials.from_authorized_user_file(token_file, SCOPES)
        except Exception:
            creds = None
    if not creds or not creds.valid:
        if creds and creds.expired and creds.refresh_token:
            creds.refresh(Request())
        else:
            flow = InstalledAppFlow.from_client_secrets_file(client_secrets_file, SCOPES)
            creds = flow.run_local_server(port=0)
        with open(token_file, "w") as token:
            token.write(creds.to_json())
    return creds


def build_service(client_secrets_file: str, token_file: str):
    creds = _load_credentials(client_secrets_file, token_file)
    return build("calendar", "v3", credentials=creds)


def event_color_id(group: Optional[str]) -> str:
    # Google Calendar event colors are numbered 1..11.
    number = group_number(group)
    if number is None:
        return DEFAULT_COLOR_ID
    return str(number % 11 + 1)


def find_or_create_calendar(service, calendar_name: str, time_zone: str, create: bool = True) -> str:
    page_token = None
    while True:
        result = service.calendarList().list(pageToken=page_token).execute()
        for item in result.get("items", []):
            if item.get("summary") == calendar_name:
                logging.info("Using calendar %s (%s)", calendar_name, item["id"])
                return item["id"]
        page_token = result.get("nextPageToken")
        if not page_token:
            break

    if not create:
        logging.info("Calendar %s does not exist yet (dry run, not creating)", calendar_name)
        return ""

    body = {"summary": calendar_name, "description": CALENDAR_DESCRIPTION, "timeZone": time_zone}
    created = service.calendars().insert(body=body).execute()
    if not created.get("id"):
        raise RuntimeError("Failed to get calendar ID from response")
    logging.info("Created calendar %s (%s)", calendar_name, created["id"])
    return created["id"]


def _same_instant(value: Optional[str], expected: dt.datetime) -> bool:
    if not value:
        return False
    try:
        return dt.datetime.fromisoformat(value.replace("Z", "+00:00")) == expected
    except ValueError:
        return False


def is_duplicate(service, calendar_id: str, event: CanonicalEvent) -> bool:
    if not calendar_id:
        return False
    try:
        result = (
            service.events()
            .list(
                calendarId=calendar_id,
                timeMin=event.start_time.isoformat(),
                timeMax=event.end_time.isoformat(),
                q=event.summary,
                singleEvents=True,
            )
            .execute()
        )
    except Exception as exc:
        # Treat a failed lookup as "not a duplicate" so the event is still created.
        logging.warning("Duplicate check failed for %s: %s", event.summary, exc)
        return False

    for existing in result.get("items", []):
        if (
            existing.get("summary") == event.summary
            and existing.get("location") == event.location
            and _same_instant(existing.get("start", {}).get("dateTime"), event.start_time)
            and _same_instant(existing.get("end", {}).get("dateTime"), event.end_time)
        ):
            return True
    return False


def sync_events(
    service,
    calendar_id: str,
    events: Iterable[CanonicalEvent],
    time_zone: str,
    dry_run: bool = False,
) -> SyncReport:
    events = list(events)
    report = SyncReport(calendar_id=calendar_id, total_attempted=len(events))

    for event in events:
        if not event.start_time or not event.end_time:
            logging.warning("Skipping event due to missing start/end time: %s", event.summary)
            continue
        if is_duplicate(service, calendar_id, event):
            logging.info("SKIP duplicate %s %s-%s", event.summary, event.start_time, event.end_time)
            report.skipped.append(event)
            continue

        body = event.to_gcal_body(time_zone, color_id=event_color_id(event.group))
        logging.info("CREATE %s %s-%s", event.summary, event.start_time, event.end_time)
        if dry_run:
            report.created.append(event)
            continue
        try:
            created = service.events().insert(calendarId=calendar_id, body=body).execute()
            if not created.get("id"):
                raise RuntimeError("Failed to get event ID from response")
        except HttpError as exc:
            logging.error("Failed to create %s: %s", event.summary, exc)
            report.failed.append(FailedEvent(event=event, error=f"API Error: {exc.resp.status} - {exc.reason}"))
            continue
        except Exception as exc:
            logging.error("Failed to create %s: %s", event.summary, exc)
            report.failed.append(FailedEvent(event=event, error=str(exc)))
            continue
        report.created.append(event)

    logging.info(
        "Sync complete. %d created, %d skipped, %d failed",
        report.created_count,
        report.skipped_count,
        report.failed_count,
    )
    return report
