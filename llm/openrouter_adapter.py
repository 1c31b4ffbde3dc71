"""OpenRouter adapter: OpenAI-compatible gateway to many upstream models.

Delegates the wire format to OpenAIAdapter. OpenRouter accepts two optional
attribution headers, filled from OPENROUTER_SITE_URL and OPENROUTER_APP_NAME.
"""

from collections.abc import Callable, Mapping
from typing import Any

from .base import BaseProvider
from .openai_adapter import OpenAIAdapter


class OpenRouterAdapter(BaseProvider):
    """Calls OpenRouter's OpenAI-compatible endpoint."""

    name = "openrouter"
    wire_format = "openai"

    def __init__(self, settings: Mapping):
        super().__init__(settings)
        headers = {}
        if self.settings.get("site_url"):
            headers["HTTP-Referer"] = self.settings["site_url"]
        if self.settings.get("app_name"):
            headers["X-Title"] = self.settings["app_name"]
        self._delegate = OpenAIAdapter(
            self.settings, label="OpenRouter", default_headers=headers or None
        )

    def send_raw_request(self, wire_request: dict) -> dict:
        return self._delegate.send_raw_request(wire_request)

    def send_raw_streaming_request(
        self, wire_request: dict, on_chunk: Callable[[Any], None]
    ) -> None:
        self._delegate.send_raw_streaming_request(wire_request, on_chunk)

    def get_raw_models(self) -> list[str]:
        return self._delegate.get_raw_models()
