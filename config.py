"""Configuration for the forum reply bot and its AI HTTP client."""

import os
from dotenv import load_dotenv

# Base directory
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# Load .env from the project root (silently ignored if the file doesn't exist)
load_dotenv(os.path.join(BASE_DIR, ".env"))


def _float_or_none(value: str | None) -> float | None:
    if value is None or value.strip() == "":
        return None
    return float(value)


# ── AI client ─────────────────────────────────────────────────────────────────
# AI_DEFAULT_PROVIDER must be set explicitly; there is no implicit default.
# Supported: "openai", "anthropic", "gemini", "grok", "openrouter"

AI_DEFAULT_PROVIDER = os.getenv("AI_DEFAULT_PROVIDER", "")
AI_REQUEST_TIMEOUT  = float(os.getenv("AI_REQUEST_TIMEOUT", "30"))
AI_MAX_TOKENS       = int(os.getenv("AI_MAX_TOKENS", "4096"))

# ── Provider defaults (overridable per provider via <NAME>_BASE_URL / _MODEL) ─
PROVIDER_DEFAULTS = {
    "openai": {
        "base_url": "https://api.openai.com/v1",
        "model": "gpt-4o-mini",
    },
    "anthropic": {
        "base_url": "https://api.anthropic.com",
        "model": "claude-sonnet-4-5",
    },
    "gemini": {
        "base_url": "https://generativelanguage.googleapis.com/v1beta",
        "model": "gemini-2.0-flash",
    },
    "grok": {
        "base_url": "https://api.x.ai/v1",
        "model": "grok-3-mini",
    },
    "openrouter": {
        "base_url": "https://openrouter.ai/api/v1",
        "model": "openai/gpt-4o-mini",
    },
}


def get_provider_settings(provider_name: str) -> dict:
    """Read the settings for one provider from the environment.

    A fresh dict is returned on every call; callers cache it if they need to.

    Args:
        provider_name: Provider identifier, e.g. "openai".

    Returns:
        Dict with 'api_key', 'model', 'base_url', 'temperature',
        'max_tokens' and any provider-specific extras.
    """
    name = provider_name.lower().strip()
    prefix = name.upper()
    defaults = PROVIDER_DEFAULTS.get(name, {})

    settings = {
        "api_key": os.getenv(f"{prefix}_API_KEY", ""),
        "model": os.getenv(f"{prefix}_MODEL", defaults.get("model", "")),
        "base_url": os.getenv(f"{prefix}_BASE_URL", defaults.get("base_url", "")),
        "temperature": _float_or_none(os.getenv(f"{prefix}_TEMPERATURE")),
        "max_tokens": AI_MAX_TOKENS,
    }

    if name == "openrouter":
        settings["site_url"] = os.getenv("OPENROUTER_SITE_URL", "")
        settings["app_name"] = os.getenv("OPENROUTER_APP_NAME", "")

    return settings


# ── Bot settings ──────────────────────────────────────────────────────────────
AI_BOT_USERNAME      = os.getenv("AI_BOT_USERNAME", "")
AI_BOT_USER_ID       = int(os.getenv("AI_BOT_USER_ID") or 0) or None
AI_BOT_SYSTEM_PROMPT = os.getenv("AI_BOT_SYSTEM_PROMPT", "You are a helpful forum assistant.")
AI_BOT_PROVIDER      = os.getenv("AI_BOT_PROVIDER", "")
AI_BOT_MODEL         = os.getenv("AI_BOT_MODEL", "")
AI_BOT_TEMPERATURE   = _float_or_none(os.getenv("AI_BOT_TEMPERATURE"))

AI_BOT_REPLY_HISTORY_LIMIT = int(os.getenv("AI_BOT_REPLY_HISTORY_LIMIT", "10"))
AI_BOT_MAX_TOOL_ROUNDS     = int(os.getenv("AI_BOT_MAX_TOOL_ROUNDS", "1"))

# Comma- or whitespace-separated words that trigger a reply without a mention
AI_BOT_TRIGGER_KEYWORDS = os.getenv("AI_BOT_TRIGGER_KEYWORDS", "")

# "all" → respond in every forum; "selected" → only in AI_BOT_ALLOWED_FORUMS
AI_BOT_FORUM_RESTRICTION = os.getenv("AI_BOT_FORUM_RESTRICTION", "all")
AI_BOT_ALLOWED_FORUMS    = [
    f.strip() for f in os.getenv("AI_BOT_ALLOWED_FORUMS", "").split(",") if f.strip()
]

# ── Remote knowledge base ─────────────────────────────────────────────────────
AI_BOT_REMOTE_ENDPOINT_URL = os.getenv("AI_BOT_REMOTE_ENDPOINT_URL", "")
REMOTE_SEARCH_TIMEOUT      = 15
