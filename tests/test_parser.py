from __future__ import annotations

import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from predial.tools.parser import (
    TABLE_FALLBACK,
    Suggestion,
    extract_json_array,
    extract_table,
    parse_suggestions,
    strip_code_fences,
)


class TableExtractionTests(unittest.TestCase):
    def test_extracts_exact_table(self) -> None:
        raw = "blah <table><tr><td>x</td></tr></table> blah"
        self.assertEqual(extract_table(raw), "<table><tr><td>x</td></tr></table>")

    def test_first_table_non_greedy_case_insensitive(self) -> None:
        raw = "```html\n<TABLE><tr><td>1</td></tr></TABLE>\n<table><tr><td>2</td></tr></table>```"
        self.assertEqual(extract_table(raw), "<TABLE><tr><td>1</td></tr></TABLE>")

    def test_missing_table_gives_fallback(self) -> None:
        self.assertEqual(extract_table("Desculpe, não consegui."), TABLE_FALLBACK)
        self.assertEqual(extract_table(""), TABLE_FALLBACK)

    def test_custom_fallback(self) -> None:
        self.assertEqual(extract_table("nada", fallback="<p>x</p>"), "<p>x</p>")

    def test_strip_code_fences(self) -> None:
        self.assertEqual(strip_code_fences("```html\n<h4>Ok</h4>\n```"), "<h4>Ok</h4>")
        self.assertEqual(strip_code_fences("```HTML<p>a</p>```"), "<p>a</p>")


class SuggestionParsingTests(unittest.TestCase):
    def test_invalid_elements_dropped(self) -> None:
        raw = 'noise [{"typology":"A","periodicity":"P","justification":"J"}, {"typology":"B"}] noise'
        with self.assertLogs("predial.tools.parser", level="WARNING"):
            result = parse_suggestions(raw)
        self.assertEqual(result, [Suggestion(typology="A", periodicity="P", justification="J")])

    def test_non_string_fields_dropped(self) -> None:
        raw = '[{"typology":"A","periodicity":3,"justification":"J"}, "texto", null]'
        with self.assertLogs("predial.tools.parser", level="WARNING"):
            self.assertEqual(parse_suggestions(raw), [])

    def test_missing_or_unbalanced_brackets(self) -> None:
        for raw in ("sem colchetes", '{"typology": "A"}', '[{"typology": "A"', "] contra [", ""):
            with self.subTest(raw=raw):
                self.assertEqual(parse_suggestions(raw), [])

    def test_broken_json_gives_empty(self) -> None:
        self.assertEqual(parse_suggestions('[{"typology": "A",}]'), [])

    def test_json_array_must_be_list(self) -> None:
        self.assertIsNone(extract_json_array("nada aqui"))
        self.assertEqual(extract_json_array("x [1, 2] y"), [1, 2])

    def test_suggestion_to_dict(self) -> None:
        suggestion = Suggestion(typology="A", periodicity="P", justification="J")
        self.assertEqual(suggestion.to_dict(), {"typology": "A", "periodicity": "P", "justification": "J"})


if __name__ == "__main__":
    unittest.main()
