from __future__ import annotations

import logging

from .config import FRENCH_MARKER
from .dom import DomNode
from .models import Language, LayoutContext, ViewType

CALENDAR_SELECTOR = ".calendar.planner"

# The planner marks its day/week list with "daysview" and the month grid
# with "weeksview" (one row per week).
VIEW_MARKERS = {
    "daysview": ViewType.DAILY,
    "weeksview": ViewType.MONTHLY,
}


def detect_language(page_text: str) -> Language:
    return Language.FR if FRENCH_MARKER in (page_text or "") else Language.EN


def detect_view_type(root: DomNode) -> ViewType:
    calendar = root.query(CALENDAR_SELECTOR)
    if calendar is None:
        return ViewType.UNKNOWN
    for marker, view_type in VIEW_MARKERS.items():
        if calendar.has_class(marker):
            return view_type
    return ViewType.UNKNOWN


def detect_layout(root: DomNode) -> LayoutContext:
    body = root.query("body") or root
    context = LayoutContext(
        language=detect_language(body.text()),
        view_type=detect_view_type(root),
    )
    logging.debug("Layout detected: language=%s view=%s", context.language.value, context.view_type.value)
    return context
