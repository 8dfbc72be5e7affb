from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List, Optional, Sequence, Tuple

from .config import WEEKDAYS
from .dom import DomNode
from .models import UNKNOWN_ROOM, DateColumnIndex, LayoutContext, ViewType
from .text import CleanLines, normalize

GROUP_REGEX = re.compile(r"G\d+")
LEADING_GROUP_REGEX = re.compile(r"^(G\d+)")
LEADING_GROUP_PREFIX_REGEX = re.compile(r"^G\d+\s*-?\s*")
TITLE_TIME_CLAUSE_REGEX = re.compile(r",\s*(?:de|from)")
TITLE_LABEL_PREFIX_REGEX = re.compile(r"^[^-]+-\s*")
COURSE_SEGMENT_SPLIT_REGEX = re.compile(r"[-»]")
LEADING_PUNCT_REGEX = re.compile(r"^[-»\s]+")
TRAILING_PUNCT_REGEX = re.compile(r"[-»\s]+$")

LABELED_ROOM_REGEX = re.compile(r"\b(?:salle|room)?\s*(\d{3})\b", re.IGNORECASE)
BARE_ROOM_REGEX = re.compile(r"\b(\d{3})\b")

FRENCH_RANGE_REGEX = re.compile(r"de (\d{1,2})[h:](\d{2})(?: ?[à-] ?)(\d{1,2})[h:](\d{2})")
ENGLISH_RANGE_REGEX = re.compile(r"from (\d{1,2}):(\d{2}) to (\d{1,2}):(\d{2})")
UNTIL_REGEX = re.compile(r"(?:jusqu'à|until)\s+(\d{1,2})[h:](\d{2})")
GENERIC_RANGE_REGEX = re.compile(r"(\d{2}:\d{2})\s*[–-]\s*(\d{2}:\d{2})")

HEADER_DATE_REGEX = re.compile(r"start=(\d{4}-\d{2}-\d{2})")
_WEEKDAY_ABBREVIATIONS = [abbr for table in WEEKDAYS.values() for abbr in table]
DAILY_DATE_REGEX = re.compile(r"\b(?:%s)[a-zéû]*\.?\s*(\d+)/(\d+)" % "|".join(_WEEKDAY_ABBREVIATIONS), re.IGNORECASE)
MONTHLY_DAY_REGEX = re.compile(r"^\s*(\d+)")

MONTHLY_CANDIDATE_SELECTOR = ".appoint.singleday"
MONTHLY_EVENT_KINDS = ("rdv", "class", "tp", "exam")
DAILY_CANDIDATE_SELECTOR = ".event_registered"
HEADER_LINK_SELECTOR = ".appoints thead .title a"


@dataclass
class ElementSource:
    """Everything a matcher may look at for one candidate element."""

    node: DomNode
    text: str
    lines: CleanLines
    title: str = ""

    @classmethod
    def from_node(cls, node: DomNode, with_title: bool = False) -> "ElementSource":
        text, lines = normalize(node.text())
        title = (node.attribute("title") or "") if with_title else ""
        return cls(node=node, text=text, lines=lines, title=title)


@dataclass
class ExtractionScope:
    """Per-call state shared by every element of one snapshot."""

    context: LayoutContext
    today: date
    calendar_text: str = ""
    date_index: DateColumnIndex = field(default_factory=DateColumnIndex)


@dataclass
class ElementFields:
    group: str = ""
    course: str = ""
    activity: str = ""
    room: str = UNKNOWN_ROOM
    start: str = ""
    end: str = ""
    event_date: Optional[date] = None
    raw_text: str = ""


TimeRange = Tuple[str, str]
Matcher = Callable[[ElementSource], Optional[str]]
TimeMatcher = Callable[[ElementSource], Optional[TimeRange]]


def first_match(matchers: Sequence[Callable], source: ElementSource):
    for matcher in matchers:
        value = matcher(source)
        if value:
            return value
    return None


def _clock(hour: str, minute: str) -> str:
    return f"{int(hour):02d}:{minute}"


# ---------------------------------------------------------------------------
# Date from free text
# ---------------------------------------------------------------------------


def parse_date_from_text(text: Optional[str], view_type: ViewType, today: Optional[date] = None) -> date:
    # Only day and month are ever printed, the year is always today's.
    today = today or date.today()
    if not text:
        return today
    try:
        if view_type is ViewType.DAILY:
            match = DAILY_DATE_REGEX.search(text)
            if match:
                day, month = match.groups()
                return today.replace(month=int(month), day=int(day))
        elif view_type is ViewType.MONTHLY:
            match = MONTHLY_DAY_REGEX.match(text)
            if match:
                return today.replace(day=int(match.group(1)))
    except ValueError as exc:
        logging.debug("Date parsing error for %r: %s", text[:40], exc)
    return today


def _iso_date_from_href(href: Optional[str]) -> Optional[date]:
    match = HEADER_DATE_REGEX.search(href or "")
    if not match:
        return None
    try:
        return date.fromisoformat(match.group(1))
    except ValueError:
        return None


def build_date_column_index(root: DomNode) -> DateColumnIndex:
    index = DateColumnIndex()
    for link in root.query_all(HEADER_LINK_SELECTOR):
        resolved = _iso_date_from_href(link.attribute("href"))
        if resolved:
            index.dates[link.text().strip()] = resolved
    return index


# ---------------------------------------------------------------------------
# Room
# ---------------------------------------------------------------------------


def _search(regex: re.Pattern, text: Optional[str]) -> Optional[str]:
    match = regex.search(text or "")
    return match.group(1) if match else None


def room_in_title_labeled(source: ElementSource) -> Optional[str]:
    return _search(LABELED_ROOM_REGEX, source.title)


def room_in_title(source: ElementSource) -> Optional[str]:
    return _search(BARE_ROOM_REGEX, source.title)


def room_in_text_labeled(source: ElementSource) -> Optional[str]:
    return _search(LABELED_ROOM_REGEX, source.text)


def room_in_text(source: ElementSource) -> Optional[str]:
    return _search(BARE_ROOM_REGEX, source.text)


def room_in_lines(source: ElementSource) -> Optional[str]:
    return _search(BARE_ROOM_REGEX, source.lines.find(BARE_ROOM_REGEX))


MONTHLY_ROOM_MATCHERS: List[Matcher] = [
    room_in_title_labeled,
    room_in_title,
    room_in_text_labeled,
    room_in_text,
    room_in_lines,
]
DAILY_ROOM_MATCHERS: List[Matcher] = [room_in_text_labeled, room_in_text, room_in_lines]


def extract_room(source: ElementSource, matchers: Sequence[Matcher]) -> str:
    return first_match(matchers, source) or UNKNOWN_ROOM


# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------


def time_from_french_title(source: ElementSource) -> Optional[TimeRange]:
    match = FRENCH_RANGE_REGEX.search(source.title)
    if not match:
        return None
    return _clock(match.group(1), match.group(2)), _clock(match.group(3), match.group(4))


def time_from_english_title(source: ElementSource) -> Optional[TimeRange]:
    match = ENGLISH_RANGE_REGEX.search(source.title)
    if not match:
        return None
    return _clock(match.group(1), match.group(2)), _clock(match.group(3), match.group(4))


def time_from_header_until(source: ElementSource) -> Optional[TimeRange]:
    header = source.node.query("h4")
    start = header.text().strip() if header else ""
    if not start:
        return None
    until = UNTIL_REGEX.search(source.title)
    end = _clock(until.group(1), until.group(2)) if until else ""
    return start.rjust(5, "0"), end


def time_from_lines(source: ElementSource) -> Optional[TimeRange]:
    line = source.lines.find(GENERIC_RANGE_REGEX)
    if not line:
        return None
    match = GENERIC_RANGE_REGEX.search(line)
    return match.group(1), match.group(2)


TITLE_TIME_MATCHERS: List[TimeMatcher] = [
    time_from_french_title,
    time_from_english_title,
    time_from_header_until,
]


def extract_times(source: ElementSource, matchers: Sequence[TimeMatcher]) -> TimeRange:
    start, end = first_match(matchers, source) or ("", "")
    if not start or not end:
        fallback = time_from_lines(source)
        if fallback:
            start, end = fallback
    return start, end


# ---------------------------------------------------------------------------
# Monthly grid
# ---------------------------------------------------------------------------


def monthly_candidates(root: DomNode) -> List[DomNode]:
    return [
        node
        for node in root.query_all(MONTHLY_CANDIDATE_SELECTOR)
        if node.closest(".appcont") is not None and any(node.has_class(kind) for kind in MONTHLY_EVENT_KINDS)
    ]


def split_monthly_label(label: str) -> Tuple[str, str]:
    """Split the ``<p>`` label of a grid cell into (group, course)."""
    if " - " in label:
        parts = [part.strip() for part in label.split(" - ")]
        return parts[0], parts[1]
    match = LEADING_GROUP_REGEX.match(label)
    if match:
        return match.group(1), LEADING_GROUP_PREFIX_REGEX.sub("", label).strip()
    return "", label


def monthly_course_fields(label: str, title: str, text: str) -> Tuple[str, str, str]:
    group, course = split_monthly_label(label)

    title_main = TITLE_TIME_CLAUSE_REGEX.split(title)[0]
    activity = TITLE_LABEL_PREFIX_REGEX.sub("", title_main, count=1).strip()

    title_main = title_main.strip()
    if course in title_main and len(title_main) > len(course):
        better = next(
            (part.strip() for part in COURSE_SEGMENT_SPLIT_REGEX.split(title_main) if course in part.strip()),
            "",
        )
        if better:
            course = better

    if activity.startswith(course):
        activity = LEADING_PUNCT_REGEX.sub("", activity[len(course) :])

    if not group:
        match = GROUP_REGEX.search(text) or GROUP_REGEX.search(title)
        group = match.group(0) if match else ""

    course = TRAILING_PUNCT_REGEX.sub("", course)
    activity = TRAILING_PUNCT_REGEX.sub("", activity)
    return group, course, activity


def _header_link(node: DomNode) -> Optional[DomNode]:
    cell = node.closest("td")
    grid = node.closest(".appoints")
    if cell is None or grid is None or not cell.position():
        return None
    return grid.query(f"thead th:nth-child({cell.position()}) .title a")


def monthly_event_date(node: DomNode, scope: ExtractionScope) -> date:
    link = _header_link(node)
    if link is not None:
        resolved = _iso_date_from_href(link.attribute("href")) or scope.date_index.get(link.text())
        if resolved:
            return resolved
    return parse_date_from_text(scope.calendar_text, ViewType.MONTHLY, scope.today)


def extract_monthly(node: DomNode, scope: ExtractionScope) -> ElementFields:
    source = ElementSource.from_node(node, with_title=True)
    label_node = node.query("p")
    label = label_node.text().strip() if label_node else ""

    group, course, activity = monthly_course_fields(label, source.title, source.text)
    start, end = extract_times(source, TITLE_TIME_MATCHERS)
    return ElementFields(
        group=group,
        course=course,
        activity=activity,
        room=extract_room(source, MONTHLY_ROOM_MATCHERS),
        start=start,
        end=end,
        event_date=monthly_event_date(node, scope),
        raw_text=source.text,
    )


# ---------------------------------------------------------------------------
# Daily / weekly list
# ---------------------------------------------------------------------------


def daily_candidates(root: DomNode) -> List[DomNode]:
    return root.query_all(DAILY_CANDIDATE_SELECTOR)


def split_daily_course_line(line: str) -> Tuple[str, str, str]:
    """``"G3-Advanced C++ » Lecture"`` -> ``("G3", "Advanced C++", "Lecture")``."""
    parts = [part.strip() for part in line.split("»")]
    group_and_course = parts[0]
    activity = parts[1] if len(parts) > 1 else ""
    # Course names may contain hyphens themselves.
    group, sep, course = group_and_course.partition("-")
    if not sep:
        return "", group_and_course, activity
    return group.strip(), course.strip(), activity


def daily_event_date(node: DomNode, scope: ExtractionScope) -> date:
    column = node.closest(".planning-week-day")
    if column is not None:
        header = column.query(".day-header")
        header_text = header.text() if header else ""
        return parse_date_from_text(header_text or scope.calendar_text, ViewType.DAILY, scope.today)
    return parse_date_from_text(scope.calendar_text, ViewType.DAILY, scope.today)


def extract_daily(node: DomNode, scope: ExtractionScope) -> ElementFields:
    source = ElementSource.from_node(node)
    group, course, activity = split_daily_course_line(source.lines.first())
    start, end = extract_times(source, [])
    return ElementFields(
        group=group,
        course=course,
        activity=activity,
        room=extract_room(source, DAILY_ROOM_MATCHERS),
        start=start,
        end=end,
        event_date=daily_event_date(node, scope),
        raw_text=source.text,
    )


@dataclass(frozen=True)
class Strategy:
    candidates: Callable[[DomNode], List[DomNode]]
    extract: Callable[[DomNode, ExtractionScope], ElementFields]


STRATEGIES = {
    ViewType.MONTHLY: Strategy(candidates=monthly_candidates, extract=extract_monthly),
    ViewType.DAILY: Strategy(candidates=daily_candidates, extract=extract_daily),
}
