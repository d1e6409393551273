# maintenance_schedule.py — Maintenance schedule tool
#
# Pick typologies, optionally ask the model for a consolidated periodicity
# per typology (JSON), then generate the full schedule table (HTML).

from __future__ import annotations

from typing import Any

from predial.identity.profile import UserProfile
from predial.knowledge.catalog import find_schedule_by_typology
from predial.tools.document import ReportMetadata, format_date, signatory_from_profile
from predial.tools.parser import Suggestion, extract_table, parse_suggestions
from predial.tools.prompts import maintenance_schedule_prompt, periodicity_suggestions_prompt, schedule_data_block
from predial.workflows.base import REQUIRED_FIELDS_MESSAGE, SelectionWorkflow

REPORT_CSS = """
table { width: 100%; border-collapse: collapse; font-size: 9pt; margin-top: 20px; page-break-inside: auto; }
tr { page-break-inside: avoid; page-break-after: auto; }
th, td { border: 1px solid #ddd; padding: 8px; text-align: left; vertical-align: top; }
th { background-color: #dbeafe; color: #1e3a8a; font-weight: bold; }
thead { display: table-header-group; }
"""


class MaintenanceScheduleWorkflow(SelectionWorkflow):
    name = "maintenance-schedule"
    title = "Cronograma de Manutenção"
    FORM_FIELDS = ("building_name", "address")
    ACTIONS = {"suggestions": "generate_suggestions", "schedule": "generate_schedule"}
    REPORT_SUBJECT = "cronograma"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.suggestions: list[Suggestion] = []
        self.schedule_html: str | None = None

    def _clear_state(self) -> None:
        super()._clear_state()
        self.suggestions = []
        self.schedule_html = None

    def schedule_data_blocks(self) -> list[str]:
        """Schedule data for every checked typology that has entries, in catalog order."""
        blocks = []
        for _, system, typology in self.selection.iter_selected(self.catalog):
            entries = find_schedule_by_typology(system.key, typology.title, self.catalog)
            if entries:
                blocks.append(schedule_data_block(f"{system.title}: {typology.title}", entries))
        return blocks

    async def generate_suggestions(self) -> list[Suggestion] | None:
        if self._busy():
            return None
        if not self.selection.is_any_selected():
            self.notices.error("Por favor, selecione pelo menos um sistema.")
            return None

        blocks = self.schedule_data_blocks()
        if not blocks:
            self.notices.info("Não há dados de manutenção para as tipologias selecionadas.")
            return None

        self.suggestions = []
        prompt = periodicity_suggestions_prompt(blocks)
        raw = await self._request(lambda: self.ai.complete(prompt), "Erro ao gerar sugestões.")
        if raw is None:
            return None

        self.suggestions = parse_suggestions(raw)
        self._succeed("Sugestões geradas com sucesso!")
        return self.suggestions

    async def generate_schedule(self) -> str | None:
        if self._busy():
            return None
        labels = self.selected_labels()
        if not self.required_fields_filled() or not labels:
            self.notices.error(REQUIRED_FIELDS_MESSAGE)
            return None

        self.schedule_html = None
        prompt = maintenance_schedule_prompt(labels)
        raw = await self._request(lambda: self.ai.complete(prompt), "Erro ao gerar cronograma.")
        if raw is None:
            return None

        self.schedule_html = extract_table(raw)
        self._succeed("Cronograma gerado com sucesso!")
        return self.schedule_html

    def has_result(self) -> bool:
        return self.schedule_html is not None

    def result_snapshot(self) -> dict[str, Any]:
        return {
            "suggestions": [s.to_dict() for s in self.suggestions],
            "schedule_html": self.schedule_html,
        }

    def report_fragments(self) -> list[str]:
        return [self.schedule_html or ""]

    def report_metadata(self, profile: UserProfile) -> ReportMetadata:
        return ReportMetadata(
            title="Cronograma de Manutenção Predial",
            info=(
                ("Edifício", self.form["building_name"]),
                ("Endereço", self.form["address"]),
                ("Data", format_date()),
            ),
            signatory=signatory_from_profile(profile),
            extra_css=REPORT_CSS,
        )
