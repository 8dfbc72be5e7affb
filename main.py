from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional

from intranet_sync.browser import close, open_planner
from intranet_sync.config import get_settings, get_timezone
from intranet_sync.gcal import build_service, find_or_create_calendar, sync_events
from intranet_sync.ics_export import export_events_to_ics
from intranet_sync.models import ExtractionBatch, Outcome
from intranet_sync.parser import extract_events
from intranet_sync.schedule import fetch_planner_events


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Export intranet planner events to ICS or Google Calendar")
    parser.add_argument("--html", type=Path, default=None, help="Read a saved planner page instead of opening a browser")
    parser.add_argument("--url", type=str, default=None, help="Planner URL (defaults to INTRANET_PLANNER_URL)")
    parser.add_argument("--headful", action="store_true", help="Open the browser window to renew the session")
    parser.add_argument("--wait", type=int, default=120, help="Seconds to wait for the planner in headful mode")
    parser.add_argument("--ics", nargs="?", const="", default=None, help="Write events to an .ics file")
    parser.add_argument("--sync", action="store_true", help="Create events in Google Calendar")
    parser.add_argument("--dry-run", action="store_true", help="Show sync actions without modifying the calendar")
    parser.add_argument("--timezone", type=str, default=None, help="Time zone of the planner page")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log per-event parsing details")
    return parser.parse_args(argv)


def load_batch(args: argparse.Namespace, settings) -> ExtractionBatch:
    if args.html:
        return extract_events(args.html.read_text(encoding="utf-8"), settings.timezone)

    playwright, browser, context, page = open_planner(
        settings, args.url or settings.planner_url, headful=args.headful, wait_ms=args.wait * 1000
    )
    try:
        return fetch_planner_events(page, settings.timezone)
    finally:
        close(playwright, browser, context, settings)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    settings = get_settings()
    if args.timezone:
        settings.timezone = get_timezone(args.timezone)

    batch = load_batch(args, settings)
    events = batch.events
    if not events:
        logging.warning(
            "No registered events found (%s view, %d candidates, %d failed)",
            batch.context.view_type.value,
            batch.candidates,
            batch.count(Outcome.FAILED),
        )
        return 1

    for event in events:
        logging.info(
            "%s | %s | Room %s | %s - %s",
            event.summary,
            event.activity or "No activity specified",
            event.room,
            event.start_time.strftime("%Y-%m-%d %H:%M"),
            event.end_time.strftime("%H:%M"),
        )

    if args.ics is not None:
        export_events_to_ics(events, args.ics or settings.ics_output)

    if args.sync:
        service = build_service(settings.google_client_secrets, settings.google_token_file)
        tz_name = settings.timezone.key
        calendar_id = find_or_create_calendar(service, settings.calendar_name, tz_name, create=not args.dry_run)
        report = sync_events(service, calendar_id, events, tz_name, dry_run=args.dry_run)
        for failure in report.failed:
            logging.error("Failed: %s (%s)", failure.event.summary, failure.error)
        if report.failed:
            return 2

    logging.info("Done")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
