from __future__ import annotations

import re
from typing import Iterator, Optional, Pattern, Union

# Boilerplate printed by the planner between the event title and its time
# range. Each run is removed up to (not including) the next HH:MM token.
BOILERPLATE_PHRASES = [
    r"Etudiants inscrits|Students registered|Students enrolled",
    r"Voir les créneaux|See slots",
    r"Plus d'options|More options",
    r"Vous avez été présent|You were present",
    r"View appointment slots",
]

BOILERPLATE_REGEXES = [re.compile(rf"(?:{phrase}).*?(?=\d{{2}}:\d{{2}})", re.DOTALL) for phrase in BOILERPLATE_PHRASES]

# Leftover option lines once the runs above are gone.
STRAY_LINE_REGEX = re.compile(r"^(?:More|Plus|View|Voir|You|Vous)")


def strip_boilerplate(text: str) -> str:
    cleaned = (text or "").strip()
    for regex in BOILERPLATE_REGEXES:
        cleaned = regex.sub("", cleaned)
    return cleaned


class CleanLines:
    """Trimmed, non-empty lines of an element text.

    Lines are produced lazily and every iteration starts from the top again.
    """

    def __init__(self, text: str):
        self.text = text

    def __iter__(self) -> Iterator[str]:
        for line in self.text.split("\n"):
            line = line.strip()
            if not line or STRAY_LINE_REGEX.match(line):
                continue
            yield line

    def first(self) -> str:
        return next(iter(self), "")

    def find(self, pattern: Union[str, Pattern[str]]) -> Optional[str]:
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        return next((line for line in self if regex.search(line)), None)


def normalize(text: str) -> tuple[str, CleanLines]:
    cleaned = strip_boilerplate(text)
    return cleaned, CleanLines(cleaned)
