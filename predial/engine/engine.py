# engine.py — Wire the engine components together
#
# Loads the catalog, builds the AI service, the profile store, the notice
# queue and one instance of every tool workflow. The HTTP layer lives in
# api/routes.py; the server entry point is server.py (root).

from __future__ import annotations

import logging
import os
from typing import Any

from predial.engine.config import PROVIDERS
from predial.engine.service import AIService, resolve_engine
from predial.identity.profile import ProfileStore
from predial.knowledge.catalog import Catalog, get_catalog, init_catalog
from predial.messaging.notices import Notices
from predial.tools.export import FileExportSurface
from predial.workflows.base import Workflow
from predial.workflows.chat import ChatAssistantWorkflow
from predial.workflows.image_diagnosis import ImageDiagnosisWorkflow
from predial.workflows.inspection import InspectionChecklistWorkflow
from predial.workflows.maintenance_schedule import MaintenanceScheduleWorkflow
from predial.workflows.pathology_plan import PathologyActionPlanWorkflow
from predial.workflows.tech_diagnosis import TechDiagnosisWorkflow

logger = logging.getLogger(__name__)

WORKFLOW_CLASSES: list[type[Workflow]] = [
    ImageDiagnosisWorkflow,
    InspectionChecklistWorkflow,
    TechDiagnosisWorkflow,
    MaintenanceScheduleWorkflow,
    PathologyActionPlanWorkflow,
    ChatAssistantWorkflow,
]


def build_workflows(
    ai: Any,
    notices: Notices,
    profiles: ProfileStore,
    catalog: Catalog | None = None,
) -> dict[str, Workflow]:
    """One instance of each tool, keyed by its name."""
    return {cls.name: cls(ai, notices, profiles, catalog) for cls in WORKFLOW_CLASSES}


def setup(engine_name: str | None = None, catalog: Catalog | None = None) -> dict[str, Any]:
    """Initialize the engine components.

    Returns a dict with everything the API needs:
        {
            "engine_name": str,
            "provider_name": str,
            "model": str,
            "display": str,
            "catalog": Mapping[str, Category],
            "ai": AIService,
            "profiles": ProfileStore,
            "notices": Notices,
            "workflows": dict[str, Workflow],
            "export_surface": FileExportSurface,
        }
    """
    engine_name = resolve_engine(engine_name)
    provider_config = PROVIDERS[engine_name]

    if catalog is None:
        catalog = get_catalog()
    else:
        init_catalog(catalog)

    ai = AIService(engine_name)
    if not ai.configured:
        logger.warning("No API key for engine '%s'; AI features are disabled", engine_name)

    notices = Notices()
    profiles = ProfileStore()
    reports_dir = os.getenv("PREDIAL_REPORTS_DIR", "").strip() or None

    return {
        "engine_name": engine_name,
        "provider_name": provider_config["provider"],
        "model": provider_config["model"],
        "display": provider_config["display"],
        "catalog": catalog,
        "ai": ai,
        "profiles": profiles,
        "notices": notices,
        "workflows": build_workflows(ai, notices, profiles, catalog),
        "export_surface": FileExportSurface(reports_dir),
    }
