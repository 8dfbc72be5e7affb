import unittest

from intranet_sync.dom import DomNode
from intranet_sync.layout import detect_language, detect_layout, detect_view_type
from intranet_sync.models import Language, ViewType


class TestLayout(unittest.TestCase):
    def test_language(self) -> None:
        self.assertEqual(detect_language("Menu Gérer les calendriers Aide"), Language.FR)
        self.assertEqual(detect_language("Manage calendars"), Language.EN)
        self.assertEqual(detect_language(""), Language.EN)

    def test_view_types(self) -> None:
        daily = DomNode.from_html('<div class="calendar planner daysview"></div>')
        monthly = DomNode.from_html('<div class="calendar planner weeksview"></div>')
        other = DomNode.from_html('<div class="calendar planner yearview"></div>')
        missing = DomNode.from_html('<div class="calendar daysview"></div>')
        self.assertEqual(detect_view_type(daily), ViewType.DAILY)
        self.assertEqual(detect_view_type(monthly), ViewType.MONTHLY)
        self.assertEqual(detect_view_type(other), ViewType.UNKNOWN)
        self.assertEqual(detect_view_type(missing), ViewType.UNKNOWN)

    def test_layout_context(self) -> None:
        root = DomNode.from_html(
            '<html><body><a>Gérer les calendriers</a><div class="calendar planner weeksview"></div></body></html>'
        )
        context = detect_layout(root)
        self.assertEqual(context.language, Language.FR)
        self.assertEqual(context.view_type, ViewType.MONTHLY)


class TestDomNode(unittest.TestCase):
    def setUp(self) -> None:
        self.root = DomNode.from_html(
            '<table class="grid"><tr><td>a</td><td><div class="cell x" title="t">b</div></td></tr></table>'
        )

    def test_closest_includes_self(self) -> None:
        cell = self.root.query(".cell")
        self.assertIsNotNone(cell.closest(".cell"))
        self.assertIsNotNone(cell.closest(".grid"))
        self.assertIsNone(cell.closest(".missing"))

    def test_position_and_attributes(self) -> None:
        cell = self.root.query(".cell")
        self.assertEqual(cell.closest("td").position(), 2)
        self.assertEqual(cell.attribute("title"), "t")
        self.assertEqual(cell.attribute("class"), "cell x")
        self.assertIsNone(cell.attribute("href"))
        self.assertTrue(cell.has_class("x"))
        self.assertEqual(len(self.root.query_all("td")), 2)


if __name__ == "__main__":
    unittest.main()
