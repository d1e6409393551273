# test_api.py — Tests for the REST API routes
#
# Uses FastAPI's TestClient (no real server needed). The AI service is a
# fake that answers from a queue, so no API key is required.

from __future__ import annotations

import base64
import io
import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fastapi import FastAPI
from fastapi.testclient import TestClient
from PIL import Image

from predial.api.routes import api_router, init_api
from predial.engine.engine import build_workflows
from predial.identity.profile import ProfileStore
from predial.knowledge.catalog import CATALOG_PATH, load_catalog
from predial.messaging.notices import Notices
from predial.tools.export import FileExportSurface

CATALOG = load_catalog(CATALOG_PATH)
TABLE = "<table><tr><th>Sistema</th></tr></table>"


def _png_data_url(size: tuple[int, int] = (4, 4)) -> str:
    buf = io.BytesIO()
    Image.new("RGB", size, (200, 30, 30)).save(buf, "PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


VALID_PROFILE = {
    "full_name": "Ana Souza",
    "profession": "Engenheiro Civil",
    "public_agency_name": "Prefeitura",
    "public_agency_address": "Rua A, 1",
    "public_agency_cnpj": "12345678000190",
}


class FakeAIService:
    configured = True

    def __init__(self) -> None:
        self.responses: list[str] = []
        self.prompts: list[str] = []

    async def _next(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.responses.pop(0) if self.responses else ""

    async def complete(self, prompt: str, enable_thinking: bool = False) -> str:
        return await self._next(prompt)

    async def complete_with_images(self, prompt: str, images: list) -> str:
        return await self._next(prompt)

    async def chat(self, system_prompt: str, messages: list) -> str:
        return await self._next(messages[-1]["content"])


class ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.ai = FakeAIService()
        notices = Notices()
        profiles = ProfileStore()
        init_api({
            "engine_name": "gemini",
            "provider_name": "google",
            "model": "gemini-2.5-flash",
            "display": "Gemini 2.5 Flash",
            "catalog": CATALOG,
            "ai": self.ai,
            "profiles": profiles,
            "notices": notices,
            "workflows": build_workflows(self.ai, notices, profiles, CATALOG),
            "export_surface": FileExportSurface(self._tmp.name),
        })
        app = FastAPI()
        app.include_router(api_router, prefix="/api")
        self.client = TestClient(app)

    def tearDown(self) -> None:
        self._tmp.cleanup()


class HealthAndCatalogTests(ApiTestCase):
    def test_health(self) -> None:
        data = self.client.get("/api/health").json()
        self.assertEqual(data["status"], "ok")
        self.assertEqual(data["engine"], "gemini")
        self.assertTrue(data["ai_configured"])

    def test_catalog_tree_in_declared_order(self) -> None:
        data = self.client.get("/api/catalog").json()
        self.assertEqual(data[0]["key"], "estrutura")
        first = data[0]["systems"][0]
        self.assertEqual(first["key"], "impermeabilizacao")
        self.assertEqual(first["typologies"], ["Cobertura", "Reservatórios", "Áreas Molhadas"])

    def test_system_detail_and_unknown(self) -> None:
        r = self.client.get("/api/catalog/systems/impermeabilizacao")
        self.assertEqual(r.status_code, 200)
        self.assertIn("Cobertura", r.json()["maintenance_schedules"])

        self.assertEqual(self.client.get("/api/catalog/systems/nada").status_code, 404)

    def test_schedule_for_typology(self) -> None:
        entries = self.client.get("/api/catalog/systems/impermeabilizacao/schedules/Cobertura").json()
        self.assertEqual(entries[0]["periodicity"], "Mensal")
        empty = self.client.get("/api/catalog/systems/impermeabilizacao/schedules/Nada").json()
        self.assertEqual(empty, [])

    def test_pathologies_filtered(self) -> None:
        data = self.client.get(
            "/api/catalog/systems/impermeabilizacao/pathologies", params={"typology": "Cobertura"}
        ).json()
        self.assertEqual([g["typology"]["title"] for g in data["groups"]], ["Cobertura"])
        self.assertIn("Cobertura", data["filters"])

    def test_correlate(self) -> None:
        r = self.client.post("/api/pathologies/correlate", json={"text": "<p>Fissuras e infiltração</p>"})
        self.assertEqual([p["title"] for p in r.json()], ["Fissuras", "Infiltração"])

        bad = self.client.post("/api/pathologies/correlate", json={"text": 3})
        self.assertEqual(bad.status_code, 422)


class ProfileTests(ApiTestCase):
    def test_options(self) -> None:
        data = self.client.get("/api/profile/options").json()
        self.assertIn("Engenheiro Civil", data["professions"])
        self.assertIn("11pt", data["font_sizes"])
        self.assertEqual(data["logo_mime_types"], ["image/jpeg", "image/png"])

    def test_put_masks_cnpj(self) -> None:
        r = self.client.put("/api/profile", json=VALID_PROFILE)
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["public_agency_cnpj"], "12.345.678/0001-90")

    def test_invalid_profile_is_422_and_unchanged(self) -> None:
        before = self.client.get("/api/profile").json()
        r = self.client.put("/api/profile", json={**VALID_PROFILE, "full_name": ""})
        self.assertEqual(r.status_code, 422)
        self.assertIsInstance(r.json()["detail"], list)
        self.assertEqual(self.client.get("/api/profile").json(), before)

    def test_non_text_letterhead_field_is_422_and_report_still_renders(self) -> None:
        r = self.client.put("/api/profile", json={**VALID_PROFILE, "letterhead": {"header_font_size": 12}})
        self.assertEqual(r.status_code, 422)
        self.assertEqual(r.json()["detail"], ["Campo 'header_font_size' deve ser texto."])
        self.assertEqual(self.client.get("/api/profile").json()["letterhead"]["header_font_size"], "10pt")

        base = "/api/workflows/maintenance-schedule"
        self.client.post(f"{base}/form", json={"field": "building_name", "value": "Sede"})
        self.client.post(f"{base}/form", json={"field": "address", "value": "Rua A"})
        self.client.post(
            f"{base}/selection",
            json={"system_key": "impermeabilizacao", "typology": "Cobertura", "checked": True},
        )
        self.ai.responses = [TABLE]
        self.client.post(f"{base}/actions/schedule")
        self.assertEqual(self.client.get(f"{base}/report").status_code, 200)

    def test_logo_upload(self) -> None:
        self.client.put("/api/profile", json=VALID_PROFILE)
        r = self.client.post("/api/profile/logo", content=b"\x89PNG", headers={"content-type": "image/png"})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["letterhead"]["logo"], "data:image/png;base64,iVBORw==")

        gif = self.client.post("/api/profile/logo", content=b"GIF89a", headers={"content-type": "image/gif"})
        self.assertEqual(gif.status_code, 422)


class WorkflowRouteTests(ApiTestCase):
    def test_list_and_unknown(self) -> None:
        names = [w["tool"] for w in self.client.get("/api/workflows").json()]
        self.assertIn("maintenance-schedule", names)
        self.assertIn("chat", names)
        self.assertEqual(self.client.get("/api/workflows/nada").status_code, 404)

    def test_unknown_form_field_is_422(self) -> None:
        r = self.client.post("/api/workflows/maintenance-schedule/form", json={"field": "x", "value": "y"})
        self.assertEqual(r.status_code, 422)

    def test_schedule_flow_and_report(self) -> None:
        base = "/api/workflows/maintenance-schedule"
        self.client.post(f"{base}/form", json={"field": "building_name", "value": "Sede"})
        self.client.post(f"{base}/form", json={"field": "address", "value": "Rua A"})
        r = self.client.post(
            f"{base}/selection",
            json={"system_key": "impermeabilizacao", "typology": "Cobertura", "checked": True},
        )
        self.assertEqual(r.json()["state"]["selected_labels"], ["Impermeabilização: Cobertura"])

        self.ai.responses = [TABLE]
        r = self.client.post(f"{base}/actions/schedule")
        body = r.json()
        self.assertEqual(body["state"]["schedule_html"], TABLE)
        self.assertEqual(body["state"]["phase"], "result")
        self.assertEqual([n["kind"] for n in body["notices"]], ["success"])

        report = self.client.get(f"{base}/report")
        self.assertEqual(report.status_code, 200)
        self.assertIn("text/html", report.headers["content-type"])
        self.assertIn(TABLE, report.text)

        exported = self.client.post(f"{base}/export").json()
        self.assertTrue(Path(exported["path"]).exists())

    def test_report_refused_is_409(self) -> None:
        r = self.client.get("/api/workflows/inspection/report")
        self.assertEqual(r.status_code, 409)
        self.assertIn("checklist", r.json()["detail"])

    def test_unknown_action_is_404(self) -> None:
        r = self.client.post("/api/workflows/inspection/actions/nada")
        self.assertEqual(r.status_code, 404)

    def test_action_precondition_posts_notice(self) -> None:
        body = self.client.post("/api/workflows/inspection/actions/checklist").json()
        self.assertEqual([n["kind"] for n in body["notices"]], ["error"])
        self.assertEqual(self.ai.prompts, [])

    def test_pathology_open(self) -> None:
        base = "/api/workflows/pathology-plan"
        missing = self.client.post(f"{base}/selection", json={"system_key": "estrutura_concreto", "title": "Nada"})
        self.assertEqual(missing.status_code, 404)

        r = self.client.post(f"{base}/selection", json={"system_key": "estrutura_concreto", "title": "Fissuras"})
        self.assertEqual(r.json()["state"]["pathology"]["title"], "Fissuras")

    def test_selection_fields_must_be_strings(self) -> None:
        schedule = "/api/workflows/maintenance-schedule/selection"
        numeric = self.client.post(schedule, json={"system_key": "impermeabilizacao", "typology": 3})
        self.assertEqual(numeric.status_code, 422)
        listed = self.client.post(schedule, json={"system_key": ["impermeabilizacao"], "typology": "Cobertura"})
        self.assertEqual(listed.status_code, 422)
        self.assertEqual(self.client.get("/api/workflows/maintenance-schedule").json()["selected_labels"], [])

        image = self.client.post(
            "/api/workflows/image-diagnosis/selection", json={"category_key": "estrutura", "system_key": [1]}
        )
        self.assertEqual(image.status_code, 422)
        self.assertEqual(self.client.get("/api/workflows/image-diagnosis").json()["category_key"], "")

        plan = self.client.post("/api/workflows/pathology-plan/selection", json={"system_key": {}, "title": "Fissuras"})
        self.assertEqual(plan.status_code, 422)

    def test_chat_has_no_selection(self) -> None:
        self.assertEqual(self.client.post("/api/workflows/chat/selection", json={}).status_code, 422)

    def test_chat_message(self) -> None:
        self.ai.responses = ["<p>Olá!</p>"]
        body = self.client.post("/api/workflows/chat/actions/message", json={"text": "Oi"}).json()
        self.assertEqual(body["state"]["messages"][-1], {"role": "assistant", "content": "<p>Olá!</p>"})
        self.assertEqual(self.ai.prompts, ["Oi"])

    def test_images(self) -> None:
        base = "/api/workflows/image-diagnosis"
        r = self.client.post(f"{base}/images", json={"images": [_png_data_url()]})
        self.assertEqual(r.json()["added"], 1)
        self.assertEqual(r.json()["state"]["image_count"], 1)

        bad = self.client.post(f"{base}/images", json={"images": ["nao"]})
        self.assertEqual(bad.status_code, 422)

        wrong = self.client.post("/api/workflows/chat/images", json={"images": []})
        self.assertEqual(wrong.status_code, 422)

    def test_reset_and_notices(self) -> None:
        self.client.post("/api/workflows/tech-diagnosis/actions/suggestions")
        self.assertEqual([n["kind"] for n in self.client.get("/api/notices").json()], [])

        self.client.post("/api/workflows/tech-diagnosis/form", json={"field": "symptom_description", "value": "x"})
        state = self.client.post("/api/workflows/tech-diagnosis/reset").json()["state"]
        self.assertEqual(state["phase"], "idle")
        self.assertEqual(state["form"], {"symptom_description": ""})


if __name__ == "__main__":
    unittest.main()
