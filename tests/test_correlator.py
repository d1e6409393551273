from __future__ import annotations

import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from predial.knowledge.catalog import Pathology
from predial.tools.correlator import find_related_pathologies, strip_tags

FISSURAS = Pathology(title="Fissuras", symptoms="Aberturas lineares")
CORROSAO = Pathology(title="Corrosão de Armaduras", symptoms="Manchas de ferrugem")
EFLORESCENCIA_A = Pathology(title="Eflorescência", symptoms="Reservatório", typology_link="Reservatórios")
EFLORESCENCIA_B = Pathology(title="Eflorescência", symptoms="Fachada", typology_link="Revestimento Cerâmico")

CATALOG_ORDER = [FISSURAS, CORROSAO, EFLORESCENCIA_A, EFLORESCENCIA_B]


class CorrelatorTests(unittest.TestCase):
    def test_single_exact_title(self) -> None:
        text = "<p>Foram observadas <strong>fissuras</strong> na laje.</p>"
        self.assertEqual(find_related_pathologies(text, CATALOG_ORDER), [FISSURAS])

    def test_first_seen_order_not_catalog_order(self) -> None:
        text = "<h4>Corrosão de Armaduras</h4><p>Também há Fissuras. Fissuras de novo; corrosão de armaduras.</p>"
        self.assertEqual(find_related_pathologies(text, CATALOG_ORDER), [CORROSAO, FISSURAS])

    def test_duplicate_titles_across_systems_listed_once(self) -> None:
        result = find_related_pathologies("Presença de eflorescência.", CATALOG_ORDER)
        self.assertEqual(result, [EFLORESCENCIA_A])

    def test_whole_words_only(self) -> None:
        self.assertEqual(find_related_pathologies("Microfissurasx aparentes", CATALOG_ORDER), [])

    def test_tags_do_not_glue_words(self) -> None:
        self.assertEqual(find_related_pathologies("<b>x</b>Fissuras<i>y</i>", CATALOG_ORDER), [FISSURAS])
        self.assertEqual(strip_tags("<p>a</p><p>b</p>").split(), ["a", "b"])

    def test_empty_input(self) -> None:
        self.assertEqual(find_related_pathologies("", CATALOG_ORDER), [])
        self.assertEqual(find_related_pathologies("Fissuras", []), [])

    def test_regex_special_titles_do_not_raise(self) -> None:
        weird = [Pathology(title="(*+?)"), Pathology(title="[a-z"), Pathology(title="   ")]
        self.assertEqual(find_related_pathologies("texto (*+?) [a-z", weird), [])


if __name__ == "__main__":
    unittest.main()
