# tech_diagnosis.py — Symptoms in, probable causes + 4.0 technologies out,
# then a correction plan built on that analysis.

from __future__ import annotations

from typing import Any

from predial.identity.profile import UserProfile
from predial.tools.document import PAGE_BREAK, ReportMetadata, format_date, signatory_from_profile
from predial.tools.parser import strip_code_fences
from predial.tools.prompts import correction_plan_prompt, diagnostic_suggestions_prompt
from predial.workflows.base import Workflow

REPORT_CSS = """
h1, h2, h3, h4, h5 { page-break-after: avoid; color: #333; }
h2 { font-size: 16pt; border-bottom: 1px solid #ccc; padding-bottom: 5px; margin-top: 40px; }
"""


class TechDiagnosisWorkflow(Workflow):
    name = "tech-diagnosis"
    title = "Diagnóstico Tecnológico"
    FORM_FIELDS = ("symptom_description",)
    ACTIONS = {"suggestions": "get_diagnostic_suggestions", "correction-plan": "get_correction_plan"}
    REPORT_SUBJECT = "diagnóstico"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.diagnostic_suggestions: str | None = None
        self.correction_plan: str | None = None

    def _clear_state(self) -> None:
        self.diagnostic_suggestions = None
        self.correction_plan = None

    @property
    def symptoms(self) -> str:
        return self.form["symptom_description"].strip()

    async def get_diagnostic_suggestions(self) -> str | None:
        if self._busy():
            return None
        if not self.symptoms:
            self.notices.error("Por favor, descreva os sintomas observados.")
            return None

        self.diagnostic_suggestions = None
        self.correction_plan = None
        prompt = diagnostic_suggestions_prompt(self.symptoms)
        raw = await self._request(lambda: self.ai.complete(prompt), "Erro ao gerar diagnóstico.")
        if raw is None:
            return None

        self.diagnostic_suggestions = strip_code_fences(raw)
        self._succeed("Análise de diagnóstico gerada!")
        return self.diagnostic_suggestions

    async def get_correction_plan(self) -> str | None:
        if self._busy():
            return None
        if not self.diagnostic_suggestions:
            self.notices.info("Gere a análise de diagnóstico primeiro.")
            return None

        self.correction_plan = None
        prompt = correction_plan_prompt(self.symptoms, self.diagnostic_suggestions)
        raw = await self._request(lambda: self.ai.complete(prompt), "Erro ao gerar plano de correção.")
        if raw is None:
            return None

        self.correction_plan = strip_code_fences(raw)
        self._succeed("Plano de correção gerado!")
        return self.correction_plan

    def has_result(self) -> bool:
        return self.diagnostic_suggestions is not None

    def result_snapshot(self) -> dict[str, Any]:
        return {
            "diagnostic_suggestions": self.diagnostic_suggestions,
            "correction_plan": self.correction_plan,
        }

    def report_fragments(self) -> list[str]:
        fragments = [f"<h2>Análise de Diagnóstico</h2>\n{self.diagnostic_suggestions or ''}"]
        if self.correction_plan:
            fragments.append(PAGE_BREAK)
            fragments.append(f"<h2>Plano de Correção</h2>\n{self.correction_plan}")
        return fragments

    def report_metadata(self, profile: UserProfile) -> ReportMetadata:
        return ReportMetadata(
            title="Relatório de Diagnóstico e Correção",
            info=(
                ("Sintomas Observados", self.symptoms),
                ("Data", format_date()),
            ),
            signatory=signatory_from_profile(profile),
            extra_css=REPORT_CSS,
        )
