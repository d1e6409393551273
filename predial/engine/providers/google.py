# google.py — Gemini API provider
#
# Translates between the service's generic text-completion interface and
# the google-genai SDK. Thinking is disabled unless a caller asks for it.

from __future__ import annotations

import base64
from typing import Any

from google import genai
from google.genai import types


def create_client(api_key: str) -> genai.Client:
    """Create a Gemini API client."""
    return genai.Client(api_key=api_key)


def _config(enable_thinking: bool = False, system_prompt: str | None = None) -> types.GenerateContentConfig:
    kwargs: dict[str, Any] = {}
    if not enable_thinking:
        kwargs["thinking_config"] = types.ThinkingConfig(thinking_budget=0)
    if system_prompt:
        kwargs["system_instruction"] = system_prompt
    return types.GenerateContentConfig(**kwargs)


def complete(client: genai.Client, model: str, prompt: str, enable_thinking: bool = False) -> str:
    response = client.models.generate_content(
        model=model,
        contents=prompt,
        config=_config(enable_thinking),
    )
    return response.text or ""


def complete_with_images(
    client: genai.Client,
    model: str,
    prompt: str,
    images: list[tuple[str, str]],
) -> str:
    """``images`` is a list of (base64 data, mime type) pairs."""
    parts = [types.Part.from_text(text=prompt)]
    for data, mime_type in images:
        parts.append(types.Part.from_bytes(data=base64.b64decode(data), mime_type=mime_type))

    response = client.models.generate_content(
        model=model,
        contents=parts,
        config=_config(),
    )
    return response.text or ""


def chat(client: genai.Client, model: str, system_prompt: str, messages: list[dict[str, str]]) -> str:
    """One turn of a conversation. Gemini calls the assistant role "model"."""
    contents = [
        types.Content(
            role="user" if msg["role"] == "user" else "model",
            parts=[types.Part.from_text(text=msg["content"])],
        )
        for msg in messages
    ]
    response = client.models.generate_content(
        model=model,
        contents=contents,
        config=_config(system_prompt=system_prompt),
    )
    return response.text or ""
