# prompts.py — Prompt text for each workflow
#
# Every prompt is plain Portuguese text built from catalog labels and form
# input. HTML-producing prompts ask for a bare fragment; the parser still
# strips fences and cuts out tables in case the model ignores that.

from __future__ import annotations

from predial.knowledge.catalog import Pathology, ScheduleEntry

_NO_EXTRA_TEXT = (
    "Não inclua nenhum texto introdutório, conclusões, comentários, markdown ```html "
    "ou qualquer texto fora da tag <table>."
)
_TABLE_TAGS = "(`<table>`, `<thead>`, `<tbody>`, `<tr>`, `<th>`, `<td>`)"


def schedule_data_block(label: str, entries: tuple[ScheduleEntry, ...] | list[ScheduleEntry]) -> str:
    """One typology's schedules, as fed to the periodicity prompt."""
    lines = [f"Tipologia: {label}"]
    lines.extend(f"  - Atividade: {e.activity}, Periodicidade: {e.periodicity}" for e in entries)
    return "\n".join(lines)


def periodicity_suggestions_prompt(data_blocks: list[str]) -> str:
    return (
        "Como um especialista em engenharia de manutenção predial, analise os seguintes planos de "
        "manutenção para as tipologias selecionadas. Para cada tipologia, sugira uma periodicidade "
        "consolidada e ideal para a manutenção geral, justificando brevemente sua resposta com base "
        "nas atividades mais frequentes e críticas. A resposta deve ser um array JSON, onde cada "
        'objeto contém as chaves "typology" (string), "periodicity" (string), e "justification" '
        "(string). Forneça APENAS o array JSON, sem nenhum texto adicional, comentários ou "
        "formatação markdown (sem ```json). Exemplo de formato de resposta: "
        '[{"typology": "Nome da Tipologia", "periodicity": "Periodicidade Sugerida", '
        '"justification": "Justificativa."}]'
        "\n\nDados:\n\n" + "\n\n".join(data_blocks)
    )


def maintenance_schedule_prompt(labels: list[str]) -> str:
    return (
        f'Crie um plano de manutenção (preventiva e preditiva) para os sistemas: "{", ".join(labels)}". '
        f"A resposta deve ser APENAS o código de uma tabela HTML {_TABLE_TAGS} com as colunas: "
        '"Sistema", "Atividade", "Periodicidade" e "Recomendações". Agrupe as atividades por sistema. '
        + _NO_EXTRA_TEXT
    )


def inspection_checklist_prompt(labels: list[str]) -> str:
    return (
        "Como um engenheiro de manutenção predial, crie um checklist de vistoria detalhado para os "
        f"seguintes sistemas e tipologias: {', '.join(labels)}. A resposta deve ser APENAS o código "
        f'de uma tabela HTML {_TABLE_TAGS} com as colunas: "Item a Verificar", "Status (C/NC/NA)" e '
        '"Observações". A coluna "Status" e "Observações" devem estar vazias para preenchimento '
        "manual. Agrupe os itens por sistema usando uma linha `<tr>` com uma única `<td>` com "
        '`colspan="3"` e estilo para o título do sistema. '
        + _NO_EXTRA_TEXT
    )


def image_diagnosis_prompt(category_title: str, system_title: str, typology_title: str) -> str:
    return (
        "Analise a(s) imagem(ns) a seguir de um componente de edificação. O componente analisado "
        f'pertence à categoria "{category_title}", sistema "{system_title}", e é uma tipologia de '
        f'"{typology_title}". Identifique possíveis patologias (como fissuras, infiltrações, '
        "corrosão, etc.), descreva suas possíveis causas, os riscos associados e sugira os próximos "
        "passos para diagnóstico e reparo. Formate a resposta de forma clara e organizada em tópicos "
        "com HTML (use headings h4, lists ul/li, bold strong)."
    )


def diagnostic_suggestions_prompt(symptoms: str) -> str:
    return (
        f'Com base nos seguintes sintomas em uma edificação: "{symptoms}", gere uma análise técnica '
        "em HTML. A análise deve conter: 1. Uma lista de possíveis causas prováveis. 2. As "
        "tecnologias de diagnóstico 4.0 mais indicadas para investigar o problema, explicando o "
        "porquê de cada uma. Use headings (h4, h5) e listas (ul, li)."
    )


def correction_plan_prompt(symptoms: str, suggestions: str) -> str:
    return (
        f'Com base na seguinte descrição de sintomas: "{symptoms}" e na análise de diagnóstico: '
        f'"{suggestions}", crie um plano de ação e correção em HTML. O plano deve detalhar os passos '
        "recomendados para a correção da patologia, incluindo materiais e técnicas a serem "
        "empregadas. Use headings (h4, h5) e listas (ul, li)."
    )


def action_plan_prompt(pathology: Pathology) -> str:
    return (
        f'Crie um plano de ação detalhado em HTML para corrigir a patologia "{pathology.title}", '
        f'cujos sintomas são "{pathology.symptoms}". O plano deve incluir: 1. Etapas de preparação '
        "da área. 2. Procedimentos de correção. 3. Materiais recomendados. 4. Cuidados de "
        "segurança. Use headings (h4) e listas (ol, li)."
    )


def budget_prompt(pathology: Pathology, action_plan: str) -> str:
    return (
        f'Com base no plano de ação para a patologia "{pathology.title}": "{action_plan}", crie um '
        "orçamento preliminar simplificado em formato de tabela HTML (`<table>`). A resposta deve "
        'ser APENAS o código da tabela. A tabela deve ter as colunas "Item", "Unidade", '
        '"Quantidade (Estimada)", "Custo Unitário (Estimado)" e "Custo Total (Estimado)". Inclua '
        "itens para material, mão de obra e equipamentos. Adicione uma nota de rodapé informando "
        "que os valores são estimativas e devem ser confirmados com cotações de mercado."
    )
