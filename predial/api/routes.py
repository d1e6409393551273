# routes.py — REST API for the Gestor Predial frontend
#
# Mount: app.include_router(api_router, prefix="/api")
#
# Endpoints:
#   GET  /api/health                                        — Health + engine info
#   GET  /api/catalog                                       — Categories → systems → typology titles
#   GET  /api/catalog/systems/:key                          — Full system card
#   GET  /api/catalog/systems/:key/pathologies?typology=    — Pathologies grouped by typology
#   GET  /api/catalog/systems/:key/schedules/:typology      — Schedule entries for one typology
#   POST /api/pathologies/correlate                         — Catalog pathologies named in a text
#   GET  /api/profile                                       — Current profile + letterhead
#   GET  /api/profile/options                               — Professions, header texts, fonts
#   PUT  /api/profile                                       — Replace profile (validated)
#   POST /api/profile/logo                                  — Raw jpeg/png body → letterhead logo
#   GET  /api/workflows                                     — All tools and their state
#   GET  /api/workflows/:tool                               — One tool's state
#   POST /api/workflows/:tool/reset                         — Back to idle
#   POST /api/workflows/:tool/form                          — Set one form field
#   POST /api/workflows/:tool/selection                     — Check/uncheck, choose, or open
#   POST /api/workflows/:tool/images                        — Attach or remove images
#   POST /api/workflows/:tool/actions/:action               — Run an AI request
#   GET  /api/workflows/:tool/report                        — Rendered report (text/html)
#   POST /api/workflows/:tool/export                        — Write report to the reports dir
#   GET  /api/notices                                       — Drain pending notices

from __future__ import annotations

import copy
from dataclasses import asdict
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Body, HTTPException, Query, Request
from fastapi.responses import HTMLResponse

from predial.identity.profile import (
    FONT_FAMILIES,
    FONT_SIZES,
    HEADER_TEXT_OPTIONS,
    LOGO_MIME_TYPES,
    PROFESSIONS,
    Letterhead,
    format_cnpj,
    logo_data_url,
    profile_from_dict,
)
from predial.knowledge.catalog import (
    System,
    all_pathologies,
    find_schedule_by_typology,
    find_system,
    typologies_with_pathologies,
    typology_filters,
)
from predial.messaging.notices import ERROR
from predial.tools.correlator import find_related_pathologies
from predial.workflows.base import SelectionWorkflow, Workflow
from predial.workflows.chat import ChatAssistantWorkflow
from predial.workflows.image_diagnosis import ImageDiagnosisWorkflow
from predial.workflows.pathology_plan import PathologyActionPlanWorkflow

api_router = APIRouter()

_session: dict[str, Any] | None = None  # engine.setup() result


def init_api(session: dict[str, Any]) -> None:
    """Wire up the API with runtime references."""
    global _session
    _session = session


def _require_session() -> dict[str, Any]:
    if _session is None:
        raise HTTPException(status_code=503, detail="Engine not initialized")
    return _session


def _require_system(system_key: str) -> System:
    session = _require_session()
    system = find_system(system_key, session["catalog"])
    if system is None:
        raise HTTPException(status_code=404, detail=f"System '{system_key}' not found")
    return system


def _require_workflow(tool: str) -> Workflow:
    workflow = _require_session()["workflows"].get(tool)
    if workflow is None:
        raise HTTPException(status_code=404, detail=f"Workflow '{tool}' not found")
    return workflow


def _drain_notices() -> list[dict[str, Any]]:
    return [n.to_dict() for n in _require_session()["notices"].drain()]


def _with_notices(workflow: Workflow, **extra: Any) -> dict[str, Any]:
    return {"state": workflow.snapshot(), "notices": _drain_notices(), **extra}


def _text(payload: dict[str, Any], key: str) -> str:
    """A string payload field; missing or null reads as empty, anything else is 422."""
    value = payload.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise HTTPException(status_code=422, detail=f"'{key}' must be a string")
    return value


def _refused(default: str) -> HTTPException:
    """409 carrying the last error notice the workflow posted."""
    notices = _drain_notices()
    errors = [n["message"] for n in notices if n["kind"] == ERROR]
    return HTTPException(status_code=409, detail=errors[-1] if errors else default)


# ===================================================================
# Serialization
# ===================================================================

def _system_summary(system: System) -> dict[str, Any]:
    return {
        "key": system.key,
        "title": system.title,
        "icon": system.icon,
        "typologies": [t.title for t in system.typologies],
    }


def _system_detail(system: System) -> dict[str, Any]:
    return {
        **_system_summary(system),
        "typologies": [asdict(t) for t in system.typologies],
        "pathologies": [asdict(p) for p in system.pathologies],
        "diagnostics": [asdict(d) for d in system.diagnostics],
        "technologies": [asdict(t) for t in system.technologies],
        "maintenance_schedules": {
            title: [asdict(e) for e in entries]
            for title, entries in system.maintenance_schedules.items()
        },
    }


# ===================================================================
# Health
# ===================================================================

@api_router.get("/health")
async def health():
    session = _require_session()
    return {
        "status": "ok",
        "engine": session["engine_name"],
        "model": session["model"],
        "ai_configured": session["ai"].configured,
        "time": datetime.now().isoformat(),
    }


# ===================================================================
# Catalog
# ===================================================================

@api_router.get("/catalog")
async def get_catalog_tree():
    catalog = _require_session()["catalog"]
    return [
        {
            "key": category.key,
            "title": category.title,
            "systems": [_system_summary(s) for s in category.systems.values()],
        }
        for category in catalog.values()
    ]


@api_router.get("/catalog/systems/{system_key}")
async def get_system(system_key: str):
    return _system_detail(_require_system(system_key))


@api_router.get("/catalog/systems/{system_key}/pathologies")
async def get_system_pathologies(
    system_key: str,
    typology: str | None = Query(None, description="Only this typology's pathologies"),
):
    system = _require_system(system_key)
    return {
        "filters": [t.title for t in typology_filters(system)],
        "groups": [
            {"typology": asdict(t), "pathologies": [asdict(p) for p in pathologies]}
            for t, pathologies in typologies_with_pathologies(system, typology)
        ],
    }


@api_router.get("/catalog/systems/{system_key}/schedules/{typology_title}")
async def get_schedule(system_key: str, typology_title: str):
    session = _require_session()
    _require_system(system_key)
    entries = find_schedule_by_typology(system_key, typology_title, session["catalog"])
    return [asdict(e) for e in entries]


@api_router.post("/pathologies/correlate")
async def correlate_pathologies(payload: dict[str, Any] = Body(...)):
    session = _require_session()
    text = payload.get("text", "")
    if not isinstance(text, str):
        raise HTTPException(status_code=422, detail="'text' must be a string")
    matches = find_related_pathologies(text, all_pathologies(session["catalog"]))
    return [asdict(p) for p in matches]


# ===================================================================
# Profile
# ===================================================================

@api_router.get("/profile")
async def get_profile():
    return _require_session()["profiles"].get().to_dict()


@api_router.get("/profile/options")
async def get_profile_options():
    return {
        "professions": PROFESSIONS,
        "header_texts": HEADER_TEXT_OPTIONS,
        "font_families": FONT_FAMILIES,
        "font_sizes": FONT_SIZES,
        "logo_mime_types": sorted(LOGO_MIME_TYPES),
    }


@api_router.put("/profile")
async def put_profile(payload: dict[str, Any] = Body(...)):
    profiles = _require_session()["profiles"]
    try:
        profile = profile_from_dict(payload)
        if profile.public_agency_cnpj:
            profile.public_agency_cnpj = format_cnpj(str(profile.public_agency_cnpj))
        errors = profiles.update(profile)
    except (TypeError, AttributeError) as exc:
        raise HTTPException(status_code=422, detail=f"Invalid profile: {exc}")
    if errors:
        raise HTTPException(status_code=422, detail=errors)
    return profiles.get().to_dict()


@api_router.post("/profile/logo")
async def upload_profile_logo(request: Request):
    """Raw image body; Content-Type must be image/jpeg or image/png."""
    profiles = _require_session()["profiles"]
    mime_type = request.headers.get("content-type", "").split(";")[0].strip()
    try:
        logo = logo_data_url(await request.body(), mime_type)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    profile = copy.deepcopy(profiles.get())
    if profile.letterhead is None:
        profile.letterhead = Letterhead()
    profile.letterhead.logo = logo
    errors = profiles.update(profile)
    if errors:
        raise HTTPException(status_code=422, detail=errors)
    return profiles.get().to_dict()


# ===================================================================
# Workflows
# ===================================================================

@api_router.get("/workflows")
async def list_workflows():
    return [w.snapshot() for w in _require_session()["workflows"].values()]


@api_router.get("/workflows/{tool}")
async def get_workflow(tool: str):
    return _require_workflow(tool).snapshot()


@api_router.post("/workflows/{tool}/reset")
async def reset_workflow(tool: str):
    workflow = _require_workflow(tool)
    workflow.reset()
    return _with_notices(workflow)


@api_router.post("/workflows/{tool}/form")
async def update_workflow_form(tool: str, payload: dict[str, Any] = Body(...)):
    workflow = _require_workflow(tool)
    try:
        workflow.update_form(str(payload.get("field", "")), payload.get("value", ""))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return _with_notices(workflow)


@api_router.post("/workflows/{tool}/selection")
async def update_workflow_selection(tool: str, payload: dict[str, Any] = Body(...)):
    workflow = _require_workflow(tool)

    if isinstance(workflow, SelectionWorkflow):
        system_key = _text(payload, "system_key")
        typology = _text(payload, "typology")
        if not system_key or not typology:
            raise HTTPException(status_code=422, detail="'system_key' and 'typology' are required")
        workflow.select(system_key, typology, bool(payload.get("checked", True)))

    elif isinstance(workflow, ImageDiagnosisWorkflow):
        choices = {key: _text(payload, key) for key in ("category_key", "system_key", "typology") if key in payload}
        if "category_key" in choices:
            workflow.choose_category(choices["category_key"])
        if "system_key" in choices:
            workflow.choose_system(choices["system_key"])
        if "typology" in choices:
            workflow.choose_typology(choices["typology"])

    elif isinstance(workflow, PathologyActionPlanWorkflow):
        system_key = _text(payload, "system_key")
        title = _text(payload, "title")
        if workflow.open(system_key, title) is None:
            raise HTTPException(status_code=404, detail=f"Pathology '{title}' not found in '{system_key}'")

    else:
        raise HTTPException(status_code=422, detail=f"Workflow '{tool}' has no selection")

    return _with_notices(workflow)


@api_router.post("/workflows/{tool}/images")
async def update_workflow_images(tool: str, payload: dict[str, Any] = Body(...)):
    workflow = _require_workflow(tool)
    if not isinstance(workflow, ImageDiagnosisWorkflow):
        raise HTTPException(status_code=422, detail=f"Workflow '{tool}' does not take images")

    if "remove" in payload:
        try:
            workflow.remove_image(int(payload["remove"]))
        except (TypeError, ValueError):
            raise HTTPException(status_code=422, detail="'remove' must be an image index")

    images = payload.get("images") or []
    if not isinstance(images, list):
        raise HTTPException(status_code=422, detail="'images' must be a list of data URLs")
    try:
        added = workflow.add_images([str(url) for url in images]) if images else 0
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return _with_notices(workflow, added=added)


@api_router.post("/workflows/{tool}/actions/{action}")
async def run_workflow_action(tool: str, action: str, payload: dict[str, Any] | None = Body(None)):
    workflow = _require_workflow(tool)
    method_name = workflow.ACTIONS.get(action)
    if method_name is None:
        raise HTTPException(status_code=404, detail=f"Action '{action}' not found for '{tool}'")

    method = getattr(workflow, method_name)
    if isinstance(workflow, ChatAssistantWorkflow):
        await method(str((payload or {}).get("text", "")))
    else:
        await method()
    return _with_notices(workflow)


@api_router.get("/workflows/{tool}/report", response_class=HTMLResponse)
async def get_workflow_report(tool: str):
    workflow = _require_workflow(tool)
    document = workflow.export()
    if document is None:
        raise _refused("Não foi possível gerar o relatório.")
    return HTMLResponse(content=document)


@api_router.post("/workflows/{tool}/export")
async def export_workflow_report(tool: str):
    session = _require_session()
    workflow = _require_workflow(tool)
    document = workflow.export(session["export_surface"])
    if document is None:
        raise _refused("Não foi possível gerar o relatório.")
    return _with_notices(workflow, path=workflow.last_export)


# ===================================================================
# Notices
# ===================================================================

@api_router.get("/notices")
async def get_notices():
    return _drain_notices()
