# pathology_plan.py — Action plan and preliminary budget for one catalog pathology

from __future__ import annotations

from typing import Any

from predial.identity.profile import UserProfile
from predial.knowledge.catalog import Pathology, find_pathology
from predial.tools.document import PAGE_BREAK, ReportMetadata, format_date, signatory_from_profile
from predial.tools.parser import extract_table, strip_code_fences
from predial.tools.prompts import action_plan_prompt, budget_prompt
from predial.workflows.base import Workflow

BUDGET_FALLBACK = "<p>Erro ao gerar o orçamento. Tente novamente.</p>"

REPORT_CSS = """
h1, h2, h3, h4, h5 { page-break-after: avoid; color: #333; }
h2 { font-size: 16pt; border-bottom: 1px solid #ccc; padding-bottom: 5px; margin-top: 40px; }
table { width: 100%; border-collapse: collapse; font-size: 10pt; margin-top: 20px; page-break-inside: auto; }
tr { page-break-inside: avoid; page-break-after: auto; }
th, td { border: 1px solid #ddd; padding: 8px; text-align: left; }
th { background-color: #f0f0f0; color: #333333; font-weight: bold; }
"""


class PathologyActionPlanWorkflow(Workflow):
    name = "pathology-plan"
    title = "Plano de Ação para Patologia"
    ACTIONS = {"action-plan": "generate_action_plan", "budget": "generate_budget"}

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._clear_state()

    def _clear_state(self) -> None:
        self.system_key = ""
        self.pathology: Pathology | None = None
        self.action_plan: str | None = None
        self.budget: str | None = None

    def open(self, system_key: str, title: str) -> Pathology | None:
        """Start a fresh session for a catalog pathology; None if it doesn't exist."""
        pathology = find_pathology(system_key, title, self.catalog)
        self.reset()
        if pathology is None:
            return None
        self.system_key = system_key
        self.pathology = pathology
        self._touch()
        return pathology

    async def generate_action_plan(self) -> str | None:
        if self._busy():
            return None
        if self.pathology is None:
            self.notices.error("Selecione uma patologia do catálogo.")
            return None

        self.action_plan = None
        self.budget = None
        prompt = action_plan_prompt(self.pathology)
        raw = await self._request(lambda: self.ai.complete(prompt), "Erro ao gerar plano de ação.")
        if raw is None:
            return None

        self.action_plan = strip_code_fences(raw)
        self._succeed("Plano de Ação gerado com sucesso!")
        return self.action_plan

    async def generate_budget(self) -> str | None:
        if self._busy():
            return None
        if self.pathology is None or not self.action_plan:
            self.notices.error("É necessário gerar o Plano de Ação primeiro.")
            return None

        self.budget = None
        prompt = budget_prompt(self.pathology, self.action_plan)
        raw = await self._request(lambda: self.ai.complete(prompt), "Erro ao gerar orçamento.")
        if raw is None:
            return None

        self.budget = extract_table(raw, fallback=BUDGET_FALLBACK)
        self._succeed("Orçamento gerado com sucesso!")
        return self.budget

    def has_result(self) -> bool:
        return self.pathology is not None and self.action_plan is not None

    def missing_result_message(self) -> str:
        return "É necessário gerar o Plano de Ação primeiro."

    def missing_data_message(self) -> str:
        return "Não foi possível gerar o PDF. Dados do perfil estão faltando."

    def result_snapshot(self) -> dict[str, Any]:
        pathology = None
        if self.pathology is not None:
            pathology = {
                "system_key": self.system_key,
                "title": self.pathology.title,
                "symptoms": self.pathology.symptoms,
                "typology_link": self.pathology.typology_link,
            }
        return {"pathology": pathology, "action_plan": self.action_plan, "budget": self.budget}

    def report_fragments(self) -> list[str]:
        fragments = [f"<h2>Plano de Ação</h2>\n{self.action_plan or ''}"]
        if self.budget:
            fragments.append(PAGE_BREAK)
            fragments.append(f"<h2>Orçamento Estimativo</h2>\n{self.budget}")
        return fragments

    def report_metadata(self, profile: UserProfile) -> ReportMetadata:
        title = self.pathology.title if self.pathology else ""
        return ReportMetadata(
            title=f"Relatório de Patologia - {title}",
            info=(
                ("Patologia", title),
                ("Sintomas Observados", self.pathology.symptoms if self.pathology else ""),
                ("Data do Relatório", format_date()),
            ),
            signatory=signatory_from_profile(profile),
            extra_css=REPORT_CSS,
        )
