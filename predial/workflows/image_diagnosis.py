# image_diagnosis.py — Diagnosis from photos of a building component
#
# The user narrows category → system → typology (changing a level clears
# the ones below it), attaches up to MAX_IMAGES photos and asks the model
# for an analysis. Catalog pathologies named in the analysis are listed
# alongside it.

from __future__ import annotations

import html
import re
from typing import Any

from predial.engine.config import MAX_IMAGES
from predial.engine.service import ImageInput
from predial.identity.profile import UserProfile
from predial.knowledge.catalog import Pathology, all_pathologies
from predial.tools.correlator import find_related_pathologies
from predial.tools.document import PAGE_BREAK, ReportMetadata, format_date, signatory_from_profile
from predial.tools.images import prepare_image
from predial.tools.parser import strip_code_fences
from predial.tools.prompts import image_diagnosis_prompt
from predial.workflows.base import Workflow

_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.+)$", re.DOTALL)

REPORT_CSS = """
h1, h2, h3, h4, h5 { page-break-after: avoid; color: #333; }
h2 { font-size: 16pt; border-bottom: 1px solid #ccc; padding-bottom: 5px; margin-top: 40px; }
.image-container { text-align: center; margin: 20px 0; page-break-inside: avoid; }
.image-container img { max-width: 100%; max-height: 15cm; border-radius: 8px; border: 1px solid #ccc; }
"""


class ImageDiagnosisWorkflow(Workflow):
    name = "image-diagnosis"
    title = "Diagnóstico por Imagem"
    ACTIONS = {"diagnose": "run_diagnosis"}
    REPORT_SUBJECT = "diagnóstico"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._clear_state()

    def _clear_state(self) -> None:
        self.category_key = ""
        self.system_key = ""
        self.typology_title = ""
        self.images: list[ImageInput] = []
        self.diagnosis_html: str | None = None
        self.related_pathologies: list[Pathology] = []

    # -- cascading choice ----------------------------------------------------

    def choose_category(self, category_key: str) -> None:
        self.category_key = category_key if category_key in self.catalog else ""
        self.system_key = ""
        self.typology_title = ""
        self._touch()

    def choose_system(self, system_key: str) -> None:
        category = self.catalog.get(self.category_key)
        self.system_key = system_key if category and system_key in category.systems else ""
        self.typology_title = ""
        self._touch()

    def choose_typology(self, typology_title: str) -> None:
        system = self._system()
        titles = {t.title for t in system.typologies} if system else set()
        self.typology_title = typology_title if typology_title in titles else ""
        self._touch()

    def _system(self):
        category = self.catalog.get(self.category_key)
        if category is None:
            return None
        return category.systems.get(self.system_key)

    # -- images --------------------------------------------------------------

    def add_image(self, data: str, mime_type: str) -> bool:
        if len(self.images) >= MAX_IMAGES:
            self.notices.info(f"Você atingiu o limite de {MAX_IMAGES} imagens.")
            return False
        self.images.append(ImageInput(base64=data, mime_type=mime_type))
        self._touch()
        return True

    def _decode_data_url(self, url: str) -> tuple[str, str]:
        match = _DATA_URL.match(url or "")
        if not match:
            raise ValueError("Imagem inválida: esperado um data URL em base64.")
        return prepare_image(match.group("data"), match.group("mime"))

    def add_data_url(self, url: str) -> bool:
        """Attach an uploaded photo, checked and scaled down by prepare_image()."""
        return self.add_image(*self._decode_data_url(url))

    def add_images(self, urls: list[str]) -> int:
        """Attach as many of ``urls`` as fit; returns how many were added.

        Every photo is prepared before any is attached, so one bad upload
        rejects the whole batch.
        """
        remaining = MAX_IMAGES - len(self.images)
        if remaining <= 0:
            self.notices.info(f"Você atingiu o limite de {MAX_IMAGES} imagens.")
            return 0
        prepared = [self._decode_data_url(url) for url in urls[:remaining]]
        if len(urls) > remaining:
            self.notices.info(f"Você pode adicionar mais {remaining} imagem(ns). As demais foram ignoradas.")
        for data, mime_type in prepared:
            self.images.append(ImageInput(base64=data, mime_type=mime_type))
        if prepared:
            self._touch()
        return len(prepared)

    def remove_image(self, index: int) -> None:
        if 0 <= index < len(self.images):
            del self.images[index]

    # -- request -------------------------------------------------------------

    async def run_diagnosis(self) -> str | None:
        if self._busy():
            return None
        system = self._system()
        if not self.images or system is None or not self.typology_title:
            self.notices.error("Selecione a tipologia e adicione pelo menos uma imagem.")
            return None

        self.diagnosis_html = None
        self.related_pathologies = []
        category = self.catalog[self.category_key]
        prompt = image_diagnosis_prompt(category.title, system.title, self.typology_title)
        images = list(self.images)
        raw = await self._request(
            lambda: self.ai.complete_with_images(prompt, images),
            "Erro ao gerar diagnóstico por imagem.",
        )
        if raw is None:
            return None

        self.diagnosis_html = strip_code_fences(raw)
        self.related_pathologies = find_related_pathologies(self.diagnosis_html, all_pathologies(self.catalog))
        self._succeed("Diagnóstico gerado com sucesso!")
        return self.diagnosis_html

    # -- state / export ------------------------------------------------------

    def has_result(self) -> bool:
        return self.diagnosis_html is not None

    def export_ready(self) -> bool:
        return self.has_result() and bool(self.images)

    def result_snapshot(self) -> dict[str, Any]:
        return {
            "category_key": self.category_key,
            "system_key": self.system_key,
            "typology_title": self.typology_title,
            "image_count": len(self.images),
            "max_images": MAX_IMAGES,
            "diagnosis_html": self.diagnosis_html,
            "related_pathologies": [
                {"title": p.title, "symptoms": p.symptoms, "typology_link": p.typology_link}
                for p in self.related_pathologies
            ],
        }

    def report_fragments(self) -> list[str]:
        images_html = "\n".join(
            f'<div class="image-container"><img src="{html.escape(image.data_url)}" alt="Imagem Analisada"></div>'
            for image in self.images
        )
        return [
            f"<h2>Imagens Analisadas</h2>\n{images_html}",
            PAGE_BREAK,
            f'<h2>Análise da Inteligência Artificial</h2>\n<div class="content">{self.diagnosis_html or ""}</div>',
        ]

    def report_metadata(self, profile: UserProfile) -> ReportMetadata:
        info = [("Data do Relatório", format_date())]
        system = self._system()
        if system is not None:
            info.insert(0, ("Sistema", system.title))
        if self.typology_title:
            info.insert(1, ("Tipologia", self.typology_title))
        return ReportMetadata(
            title="Relatório de Diagnóstico por Imagem",
            info=tuple(info),
            signatory=signatory_from_profile(profile),
            extra_css=REPORT_CSS,
        )
