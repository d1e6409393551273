# inspection.py — Inspection checklist tool

from __future__ import annotations

from datetime import date
from typing import Any

from predial.identity.profile import UserProfile
from predial.tools.document import SIGNATURE_RESPONSIBLE, ReportMetadata, format_date, signatory_from_profile
from predial.tools.parser import extract_table
from predial.tools.prompts import inspection_checklist_prompt
from predial.workflows.base import REQUIRED_FIELDS_MESSAGE, SelectionWorkflow

CHECKLIST_FALLBACK = "<table><tr><td>Erro ao gerar o checklist. Tente novamente.</td></tr></table>"

REPORT_CSS = """
table { width: 100%; border-collapse: collapse; font-size: 9pt; margin-top: 20px; page-break-inside: auto; }
tr { page-break-inside: avoid; page-break-after: auto; }
th, td { border: 1px solid #ccc; padding: 8px; text-align: left; vertical-align: top; }
th { background-color: #f0f0f0; color: #333; font-weight: bold; }
td[colspan="3"] { background-color: #e0e0e0; font-weight: bold; }
thead { display: table-header-group; }
"""


def format_inspection_date(value: str) -> str:
    """ISO date from the form → dd/mm/yyyy, or "Não informada"."""
    if not value.strip():
        return "Não informada"
    try:
        return format_date(date.fromisoformat(value.strip()))
    except ValueError:
        return value.strip()


class InspectionChecklistWorkflow(SelectionWorkflow):
    name = "inspection"
    title = "Assistente de Vistoria"
    FORM_FIELDS = ("building_name", "address", "inspection_date")
    ACTIONS = {"checklist": "generate_checklist"}
    REPORT_SUBJECT = "checklist"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.checklist_html: str | None = None

    def _clear_state(self) -> None:
        super()._clear_state()
        self.checklist_html = None

    async def generate_checklist(self) -> str | None:
        if self._busy():
            return None
        labels = self.selected_labels()
        if not self.required_fields_filled() or not labels:
            self.notices.error(REQUIRED_FIELDS_MESSAGE)
            return None

        self.checklist_html = None
        prompt = inspection_checklist_prompt(labels)
        raw = await self._request(lambda: self.ai.complete(prompt), "Erro ao gerar checklist.")
        if raw is None:
            return None

        self.checklist_html = extract_table(raw, fallback=CHECKLIST_FALLBACK)
        self._succeed("Checklist gerado com sucesso!")
        return self.checklist_html

    def has_result(self) -> bool:
        return self.checklist_html is not None

    def result_snapshot(self) -> dict[str, Any]:
        return {"checklist_html": self.checklist_html}

    def report_fragments(self) -> list[str]:
        return [self.checklist_html or ""]

    def report_metadata(self, profile: UserProfile) -> ReportMetadata:
        return ReportMetadata(
            title="Checklist de Inspeção Predial",
            info=(
                ("Edificação", self.form["building_name"]),
                ("Endereço", self.form["address"]),
                ("Data da Vistoria", format_inspection_date(self.form["inspection_date"])),
            ),
            signatory=signatory_from_profile(profile),
            extra_css=REPORT_CSS,
            signature_style=SIGNATURE_RESPONSIBLE,
        )
