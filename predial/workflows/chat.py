# chat.py — Free-form building-maintenance assistant
#
# Keeps the message history for the session. The whole history goes to the
# model on every turn; the greeting is display-only and never sent.

from __future__ import annotations

from typing import Any

from predial.engine.config import CHAT_SYSTEM_PROMPT
from predial.workflows.base import FAILED, RESULT, Workflow

GREETING = (
    "Olá! Sou seu assistente de manutenção predial. Como posso ajudar? "
    "Você pode digitar sua pergunta ou usar o microfone para falar."
)
APOLOGY = (
    "Desculpe, ocorreu um erro ao processar sua solicitação. "
    "Verifique sua conexão ou tente novamente mais tarde."
)


class ChatAssistantWorkflow(Workflow):
    name = "chat"
    title = "Assistente Virtual"
    ACTIONS = {"message": "send_message"}

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._clear_state()

    def _clear_state(self) -> None:
        self.messages: list[dict[str, str]] = [{"role": "assistant", "content": GREETING}]

    def _history(self) -> list[dict[str, str]]:
        """Messages to send: everything after the greeting, minus the pending slot."""
        return [dict(m) for m in self.messages[1:-1]]

    async def send_message(self, text: str) -> str | None:
        message = (text or "").strip()
        if not message or self._busy():
            return None

        self.messages.append({"role": "user", "content": message})
        self.messages.append({"role": "assistant", "content": ""})
        pending = len(self.messages) - 1
        generation = self._generation
        history = self._history()

        reply = await self._request(
            lambda: self.ai.chat(CHAT_SYSTEM_PROMPT, history),
            "Erro ao comunicar com a IA.",
        )
        if reply is None:
            # after a reset the history is already fresh; leave it alone
            if self.phase == FAILED and not self._is_stale(generation):
                self.messages[pending]["content"] = APOLOGY
            return None

        self.messages[pending]["content"] = reply
        self.phase = RESULT
        return reply

    def has_result(self) -> bool:
        return False

    def export_ready(self) -> bool:
        return False

    def missing_result_message(self) -> str:
        return "O assistente virtual não gera relatórios."

    def result_snapshot(self) -> dict[str, Any]:
        return {"messages": [dict(m) for m in self.messages]}
