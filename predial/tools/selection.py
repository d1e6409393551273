# selection.py — Which typologies are checked, per workflow
#
# Two-level state: system key → typology id → checked.
# Labels and selected items are always derived by walking the catalog in its
# declared order, so the click order never leaks into prompts or reports.
# Entries for systems or typologies the catalog doesn't know are kept but
# never reported.

from __future__ import annotations

from typing import Iterator

from predial.knowledge.catalog import Catalog, Category, System, Typology, get_catalog, typology_id


class SelectionTracker:
    def __init__(self) -> None:
        self._state: dict[str, dict[str, bool]] = {}

    def _system_entry(self, system_key: str) -> dict[str, bool]:
        """Return the typology map for a system, creating it on first use."""
        entry = self._state.get(system_key)
        if entry is None:
            entry = {}
            self._state[system_key] = entry
        return entry

    def set_checked(self, system_key: str, typology: str, checked: bool) -> None:
        self._system_entry(system_key)[typology] = bool(checked)

    def is_checked(self, system_key: str, typology: str) -> bool:
        return self._state.get(system_key, {}).get(typology, False)

    def is_any_selected(self) -> bool:
        return any(any(leaves.values()) for leaves in self._state.values())

    def iter_selected(self, catalog: Catalog | None = None) -> Iterator[tuple[Category, System, Typology]]:
        """Yield checked (category, system, typology) triples in catalog order."""
        catalog = get_catalog() if catalog is None else catalog
        for category in catalog.values():
            for system in category.systems.values():
                leaves = self._state.get(system.key)
                if not leaves:
                    continue
                for typology in system.typologies:
                    if leaves.get(typology_id(typology.title)):
                        yield category, system, typology

    def flatten_selected_labels(self, catalog: Catalog | None = None) -> list[str]:
        return [f"{system.title}: {typology.title}" for _, system, typology in self.iter_selected(catalog)]

    def reset(self) -> None:
        self._state = {}

    def as_dict(self) -> dict[str, dict[str, bool]]:
        return {key: dict(leaves) for key, leaves in self._state.items()}
