# config.py — Model provider configuration
#
# Maps engine names to their provider module, model identifier and the
# environment variables holding their API keys. Add new models here.
#
# Environment (read from .env via python-dotenv):
#   PREDIAL_ENGINE        engine name (default below)
#   PREDIAL_CATALOG_PATH  alternate catalog data blob
#   PREDIAL_REPORTS_DIR   where exported reports are written
#   GEMINI_API_KEY / API_KEY, OPENAI_API_KEY, ANTHROPIC_API_KEY

from __future__ import annotations

from dotenv import load_dotenv

load_dotenv()

PROVIDERS = {
    "gemini": {
        "provider": "google",
        "model": "gemini-2.5-flash",
        "display": "Gemini 2.5 Flash",
        "api_key_env": ("GEMINI_API_KEY", "API_KEY"),
    },
    "gpt": {
        "provider": "openai",
        "model": "gpt-4o",
        "display": "GPT-4o",
        "api_key_env": ("OPENAI_API_KEY",),
    },
    "claude": {
        "provider": "anthropic",
        "model": "claude-sonnet-4-5",
        "display": "Claude Sonnet 4.5",
        "api_key_env": ("ANTHROPIC_API_KEY",),
    },
}

DEFAULT = "gemini"

# Chat assistant
CHAT_SYSTEM_PROMPT = (
    "Você é um assistente especialista em manutenção predial. Suas respostas devem ser "
    "baseadas em normas técnicas e boas práticas de engenharia. Seja claro, objetivo e use "
    "formatação HTML (parágrafos <p>, listas <ul><li>, e negrito <strong>) para organizar a "
    "informação. Não use markdown."
)

# Image diagnosis
MAX_IMAGES = 5
MAX_IMAGE_SIDE = 1600  # px; larger photos are scaled down before upload

MAX_OUTPUT_TOKENS = 4096
