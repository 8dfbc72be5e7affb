from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Union
from zoneinfo import ZoneInfo

from .dom import DomNode
from .extractors import STRATEGIES, ElementFields, ExtractionScope, build_date_column_index
from .layout import CALENDAR_SELECTOR, detect_layout
from .models import (
    UNKNOWN_ROOM,
    CanonicalEvent,
    DateColumnIndex,
    ElementResult,
    ExtractionBatch,
    Language,
    Outcome,
    ViewType,
)
from .utils import build_datetime

UTC = ZoneInfo("UTC")


def is_valid(fields: ElementFields, start: Optional[datetime], end: Optional[datetime]) -> bool:
    return bool(fields.group and fields.course and start and end and fields.room != UNKNOWN_ROOM)


def assemble_event(fields: ElementFields, language: Language, tz: ZoneInfo, today: date) -> Optional[CanonicalEvent]:
    event_date = fields.event_date or today
    start_dt: Optional[datetime] = None
    end_dt: Optional[datetime] = None
    if fields.start and fields.end:
        start_dt = build_datetime(event_date, fields.start, tz)
        end_dt = build_datetime(event_date, fields.end, tz)

    logging.debug(
        "Event parsing: group=%r course=%r activity=%r room=%r time=%s - %s date=%s",
        fields.group,
        fields.course,
        fields.activity,
        fields.room,
        fields.start,
        fields.end,
        event_date,
    )

    if not is_valid(fields, start_dt, end_dt):
        return None
    return CanonicalEvent(
        group=fields.group,
        course=fields.course,
        activity=fields.activity,
        room=fields.room,
        start_time=start_dt,
        end_time=end_dt,
        raw_text=fields.raw_text,
        language=language,
    )


def _process_element(index: int, node: DomNode, scope: ExtractionScope, tz: ZoneInfo) -> ElementResult:
    strategy = STRATEGIES[scope.context.view_type]
    try:
        fields = strategy.extract(node, scope)
        event = assemble_event(fields, scope.context.language, tz, scope.today)
    except Exception as exc:
        logging.warning("Error processing event #%d: %s", index, exc)
        return ElementResult(index=index, outcome=Outcome.FAILED, error=str(exc))
    if event is None:
        return ElementResult(index=index, outcome=Outcome.SKIPPED)
    return ElementResult(index=index, outcome=Outcome.EXTRACTED, event=event)


def extract_events(
    snapshot: Union[str, DomNode],
    tz: ZoneInfo = UTC,
    today: Optional[date] = None,
) -> ExtractionBatch:
    root = DomNode.from_html(snapshot) if isinstance(snapshot, str) else snapshot
    context = detect_layout(root)
    batch = ExtractionBatch(context=context)

    strategy = STRATEGIES.get(context.view_type)
    if strategy is None:
        logging.info("Unrecognized planner layout; no events extracted")
        return batch

    calendar = root.query(CALENDAR_SELECTOR)
    scope = ExtractionScope(
        context=context,
        today=today or datetime.now(tz).date(),
        calendar_text=calendar.text() if calendar else "",
        date_index=build_date_column_index(root) if context.view_type is ViewType.MONTHLY else DateColumnIndex(),
    )
    logging.debug("View info: view=%s dated columns=%d", context.view_type.value, len(scope.date_index))

    for index, node in enumerate(strategy.candidates(root)):
        batch.results.append(_process_element(index, node, scope, tz))

    logging.info(
        "Parsed %d events from %d candidates (%d skipped, %d failed)",
        len(batch.events),
        batch.candidates,
        batch.count(Outcome.SKIPPED),
        batch.count(Outcome.FAILED),
    )
    return batch
