# openai.py — GPT API provider
#
# Translates between the service's generic text-completion interface and
# OpenAI's Chat Completions API. Images go in as data-URL content parts.

from __future__ import annotations

from typing import Any

from openai import OpenAI


def create_client(api_key: str) -> OpenAI:
    """Create an OpenAI API client."""
    return OpenAI(api_key=api_key)


def _first_text(response: Any) -> str:
    return response.choices[0].message.content or ""


def complete(client: OpenAI, model: str, prompt: str, enable_thinking: bool = False) -> str:
    response = client.chat.completions.create(
        model=model,
        messages=[{"role": "user", "content": prompt}],
    )
    return _first_text(response)


def complete_with_images(
    client: OpenAI,
    model: str,
    prompt: str,
    images: list[tuple[str, str]],
) -> str:
    content: list[dict[str, Any]] = [{"type": "text", "text": prompt}]
    for data, mime_type in images:
        content.append({
            "type": "image_url",
            "image_url": {"url": f"data:{mime_type};base64,{data}"},
        })
    response = client.chat.completions.create(
        model=model,
        messages=[{"role": "user", "content": content}],
    )
    return _first_text(response)


def chat(client: OpenAI, model: str, system_prompt: str, messages: list[dict[str, str]]) -> str:
    response = client.chat.completions.create(
        model=model,
        messages=[{"role": "system", "content": system_prompt}, *messages],
    )
    return _first_text(response)
