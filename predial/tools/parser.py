# parser.py — Pull structured payloads out of free-text model responses
#
# Model output is untrusted. Nothing in here raises on bad input: a missing
# table becomes a visible placeholder, a broken JSON array becomes [].

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

TABLE_FALLBACK = "<table><tr><td>Erro ao gerar a tabela. Tente novamente.</td></tr></table>"

_TABLE_PATTERN = re.compile(r"<table[\s\S]*?</table>", re.IGNORECASE)
_FENCE_PATTERN = re.compile(r"```(html)?", re.IGNORECASE)


@dataclass(frozen=True)
class Suggestion:
    typology: str
    periodicity: str
    justification: str

    def to_dict(self) -> dict[str, str]:
        return {
            "typology": self.typology,
            "periodicity": self.periodicity,
            "justification": self.justification,
        }


def strip_code_fences(raw: str) -> str:
    """Drop ``` / ```html fences models like to wrap HTML in."""
    return _FENCE_PATTERN.sub("", raw or "").strip()


def extract_table(raw: str, fallback: str = TABLE_FALLBACK) -> str:
    """Return the first <table>…</table> span, or ``fallback`` when there is none."""
    match = _TABLE_PATTERN.search(raw or "")
    if not match:
        logger.warning("No <table> found in model response (%d chars)", len(raw or ""))
        return fallback
    return match.group(0)


def extract_json_array(raw: str) -> list[Any] | None:
    """Parse the text between the first '[' and the last ']' as a JSON array."""
    text = raw or ""
    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end == -1 or end < start:
        logger.warning("No JSON array found in model response")
        return None

    try:
        parsed = json.loads(text[start:end + 1])
    except json.JSONDecodeError as exc:
        logger.warning("Could not parse JSON array from model response: %s", exc)
        return None

    if not isinstance(parsed, list):
        logger.warning("Parsed JSON is not an array: %s", type(parsed).__name__)
        return None
    return parsed


def _validate_suggestion(item: Any) -> Suggestion | None:
    if not isinstance(item, dict):
        return None
    typology = item.get("typology")
    periodicity = item.get("periodicity")
    justification = item.get("justification")
    if not all(isinstance(value, str) for value in (typology, periodicity, justification)):
        return None
    return Suggestion(typology=typology, periodicity=periodicity, justification=justification)


def parse_suggestions(raw: str) -> list[Suggestion]:
    items = extract_json_array(raw)
    if items is None:
        return []

    suggestions = [s for s in (_validate_suggestion(item) for item in items) if s is not None]
    if len(suggestions) != len(items):
        logger.warning(
            "Dropped %d of %d suggestion items that did not match the expected shape",
            len(items) - len(suggestions),
            len(items),
        )
    return suggestions
