# anthropic.py — Claude API provider
#
# Translates between the service's generic text-completion interface and
# Anthropic's Messages API, including base64 image content blocks.

from __future__ import annotations

from typing import Any

import anthropic

from predial.engine.config import MAX_OUTPUT_TOKENS


def create_client(api_key: str) -> anthropic.Anthropic:
    """Create an Anthropic API client."""
    return anthropic.Anthropic(api_key=api_key)


def _joined_text(response: Any) -> str:
    return "".join(
        block.text for block in response.content
        if getattr(block, "type", None) == "text" and block.text
    )


def complete(client: anthropic.Anthropic, model: str, prompt: str, enable_thinking: bool = False) -> str:
    response = client.messages.create(
        model=model,
        max_tokens=MAX_OUTPUT_TOKENS,
        messages=[{"role": "user", "content": prompt}],
    )
    return _joined_text(response)


def complete_with_images(
    client: anthropic.Anthropic,
    model: str,
    prompt: str,
    images: list[tuple[str, str]],
) -> str:
    content: list[dict[str, Any]] = [
        {
            "type": "image",
            "source": {"type": "base64", "media_type": mime_type, "data": data},
        }
        for data, mime_type in images
    ]
    content.append({"type": "text", "text": prompt})
    response = client.messages.create(
        model=model,
        max_tokens=MAX_OUTPUT_TOKENS,
        messages=[{"role": "user", "content": content}],
    )
    return _joined_text(response)


def chat(client: anthropic.Anthropic, model: str, system_prompt: str, messages: list[dict[str, str]]) -> str:
    response = client.messages.create(
        model=model,
        max_tokens=MAX_OUTPUT_TOKENS,
        system=system_prompt,
        messages=messages,
    )
    return _joined_text(response)
