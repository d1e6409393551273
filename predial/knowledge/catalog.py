# catalog.py — Load the building-systems catalog into memory
#
# The catalog is a static data blob (catalog.json) loaded once at startup:
#   categories → systems → typologies / pathologies / diagnostics /
#   technologies / maintenance schedules
#
# Everything returned from here is immutable. Lookups never raise for a
# missing key; "not found" is an empty result or None.

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterator, Mapping

logger = logging.getLogger(__name__)

CATALOG_PATH = Path(__file__).resolve().parent / "catalog.json"


@dataclass(frozen=True)
class Typology:
    title: str
    definition: str = ""
    components: str = ""
    applications: str = ""
    advantages: str = ""
    disadvantages: str = ""


@dataclass(frozen=True)
class Pathology:
    title: str
    symptoms: str = ""
    typology_link: str = ""


@dataclass(frozen=True)
class Diagnostic:
    title: str
    description: str = ""


@dataclass(frozen=True)
class Technology:
    title: str
    description: str = ""
    icon: str = ""


@dataclass(frozen=True)
class ScheduleEntry:
    activity: str
    periodicity: str
    recommendations: str = ""
    tech_diagnostics: str = ""
    type: str = ""


@dataclass(frozen=True)
class System:
    key: str
    title: str
    icon: str = ""
    typologies: tuple[Typology, ...] = ()
    pathologies: tuple[Pathology, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()
    technologies: tuple[Technology, ...] = ()
    maintenance_schedules: Mapping[str, tuple[ScheduleEntry, ...]] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True)
class Category:
    key: str
    title: str
    systems: Mapping[str, System] = field(default_factory=lambda: MappingProxyType({}))


Catalog = Mapping[str, Category]

_catalog: Catalog | None = None


def typology_id(title: str) -> str:
    """Checkbox id for a typology: lower-cased title, spaces → hyphens."""
    return title.lower().replace(" ", "-")


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def _load_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except Exception:
        logger.exception("Could not read catalog data from %s", path)
        return default


def _text(item: dict[str, Any], key: str) -> str:
    value = item.get(key, "")
    return value if isinstance(value, str) else str(value or "")


def _dicts(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _build_system(key: str, raw: dict[str, Any]) -> System:
    typologies = tuple(
        Typology(
            title=_text(t, "title"),
            definition=_text(t, "definicao"),
            components=_text(t, "componentes"),
            applications=_text(t, "aplicacoes"),
            advantages=_text(t, "vantagens"),
            disadvantages=_text(t, "desvantagens"),
        )
        for t in _dicts(raw.get("tipologias"))
    )
    pathologies = tuple(
        Pathology(
            title=_text(p, "title"),
            symptoms=_text(p, "sintomas"),
            typology_link=_text(p, "typology_link"),
        )
        for p in _dicts(raw.get("patologias"))
    )
    diagnostics = tuple(
        Diagnostic(title=_text(d, "title"), description=_text(d, "desc"))
        for d in _dicts(raw.get("diagnostico"))
    )
    technologies = tuple(
        Technology(title=_text(t, "title"), description=_text(t, "desc"), icon=_text(t, "icon"))
        for t in _dicts(raw.get("tecnologias"))
    )

    schedules: dict[str, tuple[ScheduleEntry, ...]] = {}
    raw_schedules = raw.get("maintenance_schedules", {})
    if isinstance(raw_schedules, dict):
        for typology_title, entries in raw_schedules.items():
            schedules[str(typology_title)] = tuple(
                ScheduleEntry(
                    activity=_text(e, "activity"),
                    periodicity=_text(e, "periodicity"),
                    recommendations=_text(e, "recommendations"),
                    tech_diagnostics=_text(e, "tech_diagnostics"),
                    type=_text(e, "type"),
                )
                for e in _dicts(entries)
            )

    return System(
        key=key,
        title=_text(raw, "title") or key,
        icon=_text(raw, "icon"),
        typologies=typologies,
        pathologies=pathologies,
        diagnostics=diagnostics,
        technologies=technologies,
        maintenance_schedules=MappingProxyType(schedules),
    )


def build_catalog(data: dict[str, Any]) -> Catalog:
    """Build the immutable catalog from the raw JSON structure.

    System keys must be unique across the whole catalog: selection state is
    keyed by system key alone.
    """
    categories: dict[str, Category] = {}
    seen_systems: dict[str, str] = {}

    for cat_key, raw_category in data.items():
        if not isinstance(raw_category, dict):
            continue
        systems: dict[str, System] = {}
        raw_systems = raw_category.get("systems", {})
        if not isinstance(raw_systems, dict):
            raw_systems = {}
        for sys_key, raw_system in raw_systems.items():
            if not isinstance(raw_system, dict):
                continue
            if sys_key in seen_systems:
                raise ValueError(
                    f"System key '{sys_key}' appears in both '{seen_systems[sys_key]}' and '{cat_key}'"
                )
            seen_systems[sys_key] = cat_key
            systems[sys_key] = _build_system(sys_key, raw_system)

        categories[cat_key] = Category(
            key=cat_key,
            title=_text(raw_category, "title") or cat_key,
            systems=MappingProxyType(systems),
        )

    return MappingProxyType(categories)


def load_catalog(path: Path | str | None = None) -> Catalog:
    """Load the catalog data blob. A missing or unreadable file gives an empty catalog."""
    if path is None:
        path = os.getenv("PREDIAL_CATALOG_PATH", "").strip() or CATALOG_PATH
    path = Path(path)

    data = _load_json(path, {})
    if not isinstance(data, dict) or not data:
        logger.warning("Catalog at %s is missing or empty", path)
        return MappingProxyType({})

    catalog = build_catalog(data)
    system_count = sum(len(c.systems) for c in catalog.values())
    logger.info("Loaded catalog: %d categories, %d systems", len(catalog), system_count)
    return catalog


def init_catalog(catalog: Catalog | None) -> None:
    """Install the process-wide catalog (None forces a reload on next access)."""
    global _catalog
    _catalog = catalog


def get_catalog() -> Catalog:
    """Return the process-wide catalog, loading it on first use."""
    global _catalog
    if _catalog is None:
        _catalog = load_catalog()
    return _catalog


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

def iter_systems(catalog: Catalog | None = None) -> Iterator[tuple[Category, System]]:
    """Walk every (category, system) pair in catalog-declared order."""
    catalog = get_catalog() if catalog is None else catalog
    for category in catalog.values():
        for system in category.systems.values():
            yield category, system


def find_system(system_key: str, catalog: Catalog | None = None) -> System | None:
    for _, system in iter_systems(catalog):
        if system.key == system_key:
            return system
    return None


def find_pathologies_by_system(system_key: str, catalog: Catalog | None = None) -> tuple[Pathology, ...]:
    system = find_system(system_key, catalog)
    return system.pathologies if system else ()


def find_schedule_by_typology(
    system_key: str,
    typology_title: str,
    catalog: Catalog | None = None,
) -> tuple[ScheduleEntry, ...]:
    system = find_system(system_key, catalog)
    if not system:
        return ()
    return system.maintenance_schedules.get(typology_title, ())


def find_typology(system: System, title: str) -> Typology | None:
    for typology in system.typologies:
        if typology.title == title:
            return typology
    return None


def find_pathology(system_key: str, title: str, catalog: Catalog | None = None) -> Pathology | None:
    for pathology in find_pathologies_by_system(system_key, catalog):
        if pathology.title == title:
            return pathology
    return None


def linked_typology(system: System, pathology: Pathology) -> Typology | None:
    """Resolve a pathology's soft typology link inside its system."""
    if not pathology.typology_link:
        return None
    return find_typology(system, pathology.typology_link)


def all_pathologies(catalog: Catalog | None = None) -> list[Pathology]:
    """Every pathology in the catalog, in catalog order (titles may repeat across systems)."""
    pathologies: list[Pathology] = []
    for _, system in iter_systems(catalog):
        pathologies.extend(system.pathologies)
    return pathologies


def typologies_with_pathologies(
    system: System,
    typology_filter: str | None = None,
) -> list[tuple[Typology, list[Pathology]]]:
    """Group a system's pathologies under the typologies they link to.

    Typologies with no linked pathology are left out, as are pathologies whose
    link matches no typology. The optional filter keeps a single typology.
    """
    grouped: dict[str, list[Pathology]] = {}
    for pathology in system.pathologies:
        grouped.setdefault(pathology.typology_link, []).append(pathology)

    result = [
        (typology, grouped[typology.title])
        for typology in system.typologies
        if grouped.get(typology.title)
    ]
    if typology_filter:
        result = [item for item in result if item[0].title == typology_filter]
    return result


def typology_filters(system: System) -> list[Typology]:
    """Typologies that have at least one linked pathology (filter buttons)."""
    linked = {p.typology_link for p in system.pathologies}
    return [t for t in system.typologies if t.title in linked]
