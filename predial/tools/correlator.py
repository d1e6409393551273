# correlator.py — Match generated text back to catalog pathologies
#
# Only exact, whole-word, case-insensitive title matches count. Markup is
# stripped first so tag names and attributes never match.

from __future__ import annotations

import re
from typing import Iterable

from predial.knowledge.catalog import Pathology

_TAG_PATTERN = re.compile(r"<[^>]*>")


def strip_tags(text: str) -> str:
    return _TAG_PATTERN.sub(" ", text)


def _title_pattern(title: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(title)}\b", re.IGNORECASE)


def find_related_pathologies(text: str, pathologies: Iterable[Pathology]) -> list[Pathology]:
    """Return the pathologies whose titles appear in ``text``.

    Each title is reported once (the first catalog entry carrying it), ordered
    by where the title first appears in the text.
    """
    if not text:
        return []

    surface = strip_tags(text)
    found: dict[str, tuple[int, int, Pathology]] = {}

    for order, pathology in enumerate(pathologies):
        title = pathology.title
        if not title.strip() or title in found:
            continue
        match = _title_pattern(title).search(surface)
        if match:
            found[title] = (match.start(), order, pathology)

    return [item[2] for item in sorted(found.values(), key=lambda item: (item[0], item[1]))]
