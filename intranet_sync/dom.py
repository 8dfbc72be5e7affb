"""Thin read-only view over a BeautifulSoup tree.

Extraction code only talks to :class:`DomNode`, so fixtures can be plain
HTML strings and the live page only needs to hand over its rendered markup.
"""

from __future__ import annotations

from typing import List, Optional

from bs4 import BeautifulSoup, Tag


class DomNode:
    def __init__(self, tag: Tag):
        self._tag = tag

    @classmethod
    def from_html(cls, html: str) -> "DomNode":
        return cls(BeautifulSoup(html, "lxml"))

    def query_all(self, selector: str) -> List["DomNode"]:
        return [DomNode(tag) for tag in self._tag.select(selector)]

    def query(self, selector: str) -> Optional["DomNode"]:
        tag = self._tag.select_one(selector)
        return DomNode(tag) if tag is not None else None

    def closest(self, selector: str) -> Optional["DomNode"]:
        # Like Element.closest(): the node itself counts as a match.
        tag = self._tag.css.closest(selector)
        return DomNode(tag) if tag is not None else None

    def attribute(self, name: str) -> Optional[str]:
        value = self._tag.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value

    def text(self) -> str:
        return self._tag.get_text()

    def has_class(self, name: str) -> bool:
        return name in (self._tag.get("class") or [])

    def position(self) -> int:
        """1-based index among the parent's element children, 0 when detached."""
        parent = self._tag.parent
        if parent is None:
            return 0
        siblings = [child for child in parent.children if isinstance(child, Tag)]
        for idx, child in enumerate(siblings, start=1):
            if child is self._tag:
                return idx
        return 0

    def __repr__(self) -> str:
        return f"DomNode(<{self._tag.name}>)"
