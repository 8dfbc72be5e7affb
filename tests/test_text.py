import unittest

from intranet_sync.text import CleanLines, normalize, strip_boilerplate


class TestNormalize(unittest.TestCase):
    def test_removes_english_boilerplate_up_to_time(self) -> None:
        text, lines = normalize(
            "G3-Algorithms » Lecture\nStudents registered: 25\nSee slots\n09:00 - 12:00\nRoom 204"
        )
        self.assertEqual(text, "G3-Algorithms » Lecture\n09:00 - 12:00\nRoom 204")
        self.assertEqual(list(lines), ["G3-Algorithms » Lecture", "09:00 - 12:00", "Room 204"])

    def test_removes_french_boilerplate(self) -> None:
        cleaned = strip_boilerplate("Algo » TD\nEtudiants inscrits : 12\nVous avez été présent\n10:00 - 11:00")
        self.assertEqual(cleaned, "Algo » TD\n10:00 - 11:00")

    def test_boilerplate_without_following_time_is_kept(self) -> None:
        self.assertEqual(strip_boilerplate("Algo\nStudents enrolled: 3"), "Algo\nStudents enrolled: 3")

    def test_stray_option_lines_are_dropped(self) -> None:
        lines = CleanLines("  Algo » TD \n\nMore options\nVoir plus\nYou were absent\nRoom 101\n")
        self.assertEqual(list(lines), ["Algo » TD", "Room 101"])

    def test_lines_are_restartable(self) -> None:
        lines = CleanLines("a\nb\nc")
        self.assertEqual(list(lines), list(lines))
        self.assertEqual(lines.first(), "a")
        self.assertEqual(lines.first(), "a")

    def test_find_and_first_on_empty_text(self) -> None:
        lines = CleanLines("")
        self.assertEqual(lines.first(), "")
        self.assertIsNone(lines.find(r"\d"))
        self.assertEqual(CleanLines("x\nroom 12\nroom 345").find(r"\d{3}"), "room 345")


if __name__ == "__main__":
    unittest.main()
