import unittest
from datetime import datetime, timezone
from unittest.mock import MagicMock

import httplib2
from googleapiclient.errors import HttpError

from intranet_sync.gcal import event_color_id, find_or_create_calendar, is_duplicate, sync_events
from intranet_sync.models import CanonicalEvent, Language


def _event(group: str = "G3", course: str = "Algorithms") -> CanonicalEvent:
    return CanonicalEvent(
        group=group,
        course=course,
        activity="Lecture",
        room="204",
        start_time=datetime(2024, 4, 21, 9, 0, tzinfo=timezone.utc),
        end_time=datetime(2024, 4, 21, 12, 0, tzinfo=timezone.utc),
        raw_text="",
        language=Language.EN,
    )


def _existing(summary: str = "G3 - Algorithms", location: str = "Room 204") -> dict:
    return {
        "id": "existing",
        "summary": summary,
        "location": location,
        "start": {"dateTime": "2024-04-21T11:00:00+02:00"},
        "end": {"dateTime": "2024-04-21T12:00:00Z"},
    }


class TestColorId(unittest.TestCase):
    def test_group_number_cycles(self) -> None:
        self.assertEqual(event_color_id("G23"), "2")
        self.assertEqual(event_color_id("G0"), "1")
        self.assertEqual(event_color_id("G10"), "11")

    def test_default_category(self) -> None:
        self.assertEqual(event_color_id(None), "1")
        self.assertEqual(event_color_id(""), "1")
        self.assertEqual(event_color_id("GX"), "1")


class TestDuplicateCheck(unittest.TestCase):
    def test_matching_event_is_duplicate(self) -> None:
        service = MagicMock()
        service.events.return_value.list.return_value.execute.return_value = {"items": [_existing()]}
        self.assertTrue(is_duplicate(service, "cal", _event()))
        kwargs = service.events.return_value.list.call_args.kwargs
        self.assertEqual(kwargs["timeMin"], "2024-04-21T09:00:00+00:00")
        self.assertEqual(kwargs["timeMax"], "2024-04-21T12:00:00+00:00")
        self.assertEqual(kwargs["q"], "G3 - Algorithms")

    def test_different_location_is_not_duplicate(self) -> None:
        service = MagicMock()
        service.events.return_value.list.return_value.execute.return_value = {"items": [_existing(location="Room 118")]}
        self.assertFalse(is_duplicate(service, "cal", _event()))

    def test_lookup_failure_is_not_duplicate(self) -> None:
        service = MagicMock()
        service.events.return_value.list.return_value.execute.side_effect = RuntimeError("network down")
        self.assertFalse(is_duplicate(service, "cal", _event()))


class TestSyncEvents(unittest.TestCase):
    def setUp(self) -> None:
        self.service = MagicMock()
        self.events_api = self.service.events.return_value
        self.events_api.list.return_value.execute.side_effect = [{"items": [_existing()]}, {"items": []}]
        self.events_api.insert.return_value.execute.return_value = {"id": "created"}

    def test_duplicates_are_skipped_and_others_created(self) -> None:
        report = sync_events(self.service, "cal", [_event(), _event("G23", "Databases")], "UTC")
        self.assertEqual(report.total_attempted, 2)
        self.assertEqual(report.skipped_count, 1)
        self.assertEqual(report.created_count, 1)
        self.assertEqual(report.failed_count, 0)
        body = self.events_api.insert.call_args.kwargs["body"]
        self.assertEqual(body["summary"], "G23 - Databases")
        self.assertEqual(body["colorId"], "2")

    def test_failures_are_recorded_and_processing_continues(self) -> None:
        self.events_api.list.return_value.execute.side_effect = None
        self.events_api.list.return_value.execute.return_value = {"items": []}
        error = HttpError(httplib2.Response({"status": 403}), b'{"error": {"message": "Forbidden"}}')
        self.events_api.insert.return_value.execute.side_effect = [error, {"id": "ok"}, RuntimeError("boom")]

        report = sync_events(self.service, "cal", [_event("G1"), _event("G2"), _event("G3")], "UTC")
        self.assertEqual(report.created_count, 1)
        self.assertEqual(report.failed_count, 2)
        self.assertIn("403", report.failed[0].error)
        self.assertEqual(report.failed[0].event.group, "G1")
        self.assertEqual(report.failed[1].error, "boom")

    def test_dry_run_does_not_insert(self) -> None:
        report = sync_events(self.service, "cal", [_event(), _event("G23", "Databases")], "UTC", dry_run=True)
        self.assertEqual(report.created_count, 1)
        self.events_api.insert.assert_not_called()


class TestFindOrCreateCalendar(unittest.TestCase):
    def test_existing_calendar(self) -> None:
        service = MagicMock()
        service.calendarList.return_value.list.return_value.execute.return_value = {
            "items": [{"id": "other", "summary": "Work"}, {"id": "abc", "summary": "Intranet Events"}]
        }
        self.assertEqual(find_or_create_calendar(service, "Intranet Events", "UTC"), "abc")
        service.calendars.return_value.insert.assert_not_called()

    def test_creates_missing_calendar(self) -> None:
        service = MagicMock()
        service.calendarList.return_value.list.return_value.execute.return_value = {"items": []}
        service.calendars.return_value.insert.return_value.execute.return_value = {"id": "new"}
        self.assertEqual(find_or_create_calendar(service, "Intranet Events", "Europe/Paris"), "new")
        body = service.calendars.return_value.insert.call_args.kwargs["body"]
        self.assertEqual(body["summary"], "Intranet Events")
        self.assertEqual(body["timeZone"], "Europe/Paris")

    def test_dry_run_does_not_create(self) -> None:
        service = MagicMock()
        service.calendarList.return_value.list.return_value.execute.return_value = {"items": []}
        self.assertEqual(find_or_create_calendar(service, "Intranet Events", "UTC", create=False), "")
        service.calendars.return_value.insert.assert_not_called()


if __name__ == "__main__":
    unittest.main()
