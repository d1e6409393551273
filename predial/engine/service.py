# service.py — The AI text service the workflows talk to
#
# One object, three calls:
#   complete(prompt)                      → text
#   complete_with_images(prompt, images)  → text
#   chat(system_prompt, messages)         → text
#
# The provider SDKs are blocking, so each call runs in a worker thread and
# the event loop stays free for the other workflows. Provider modules are
# imported lazily: only the configured one has to be installed.

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Any

from predial.engine.config import DEFAULT, PROVIDERS

logger = logging.getLogger(__name__)


class AIConfigurationError(RuntimeError):
    """The AI service is unavailable or unconfigured (no key, unknown engine)."""


class AIServiceError(RuntimeError):
    """A call to the AI service failed."""


@dataclass(frozen=True)
class ImageInput:
    base64: str
    mime_type: str

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64}"


def resolve_engine(engine_name: str | None = None) -> str:
    name = engine_name or os.getenv("PREDIAL_ENGINE", "").strip() or DEFAULT
    if name not in PROVIDERS:
        raise AIConfigurationError(
            f"Unknown engine '{name}'. Available: {', '.join(sorted(PROVIDERS))}"
        )
    return name


def _api_key_for(config: dict[str, Any]) -> str:
    for env_name in config["api_key_env"]:
        value = os.getenv(env_name, "").strip()
        if value:
            return value
    return ""


def _load_provider(provider_name: str):
    if provider_name == "google":
        from predial.engine.providers import google as provider
    elif provider_name == "openai":
        from predial.engine.providers import openai as provider
    elif provider_name == "anthropic":
        from predial.engine.providers import anthropic as provider
    else:
        raise AIConfigurationError(f"Unknown provider: {provider_name}")
    return provider


class AIService:
    def __init__(self, engine_name: str | None = None, api_key: str | None = None):
        self.engine_name = resolve_engine(engine_name)
        config = PROVIDERS[self.engine_name]
        self.provider_name = config["provider"]
        self.model = config["model"]
        self.display = config["display"]
        self._api_key = api_key if api_key is not None else _api_key_for(config)
        self._provider = None
        self._client = None

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def _ensure_client(self):
        if not self._api_key:
            env_names = " / ".join(PROVIDERS[self.engine_name]["api_key_env"])
            raise AIConfigurationError(
                f"A chave da API ({env_names}) não está configurada. O serviço de IA está indisponível."
            )
        if self._client is None:
            try:
                self._provider = _load_provider(self.provider_name)
                self._client = self._provider.create_client(self._api_key)
            except ImportError as exc:
                raise AIConfigurationError(
                    f"O SDK do provedor '{self.provider_name}' não está instalado: {exc}"
                ) from exc
            except AIConfigurationError:
                raise
            except Exception as exc:
                logger.exception("Could not create %s client", self.provider_name)
                raise AIServiceError(str(exc) or exc.__class__.__name__) from exc
        return self._provider, self._client

    async def _call(self, what: str, func, *args) -> str:
        provider, client = self._ensure_client()
        try:
            text = await asyncio.to_thread(getattr(provider, func), client, self.model, *args)
        except Exception as exc:
            logger.exception("%s call to %s failed", what, self.engine_name)
            raise AIServiceError(str(exc) or exc.__class__.__name__) from exc
        return text or ""

    async def complete(self, prompt: str, enable_thinking: bool = False) -> str:
        return await self._call("Completion", "complete", prompt, enable_thinking)

    async def complete_with_images(self, prompt: str, images: list[ImageInput]) -> str:
        pairs = [(image.base64, image.mime_type) for image in images]
        return await self._call("Image completion", "complete_with_images", prompt, pairs)

    async def chat(self, system_prompt: str, messages: list[dict[str, str]]) -> str:
        return await self._call("Chat", "chat", system_prompt, messages)
