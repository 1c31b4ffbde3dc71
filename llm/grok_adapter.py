"""xAI Grok adapter.

Grok speaks the OpenAI Chat Completions protocol, so this adapter delegates
the wire format to OpenAIAdapter while exposing a distinct provider identity
and its own config section.

Config (defaults shown):
  GROK_API_KEY=...
  GROK_MODEL=grok-3-mini
  GROK_BASE_URL=https://api.x.ai/v1
"""

from collections.abc import Callable, Mapping
from typing import Any

from .base import BaseProvider
from .openai_adapter import OpenAIAdapter


class GrokAdapter(BaseProvider):
    """Calls xAI's OpenAI-compatible endpoint."""

    name = "grok"
    wire_format = "openai"

    def __init__(self, settings: Mapping):
        super().__init__(settings)
        self._delegate = OpenAIAdapter(self.settings, label="Grok")

    def send_raw_request(self, wire_request: dict) -> dict:
        return self._delegate.send_raw_request(wire_request)

    def send_raw_streaming_request(
        self, wire_request: dict, on_chunk: Callable[[Any], None]
    ) -> None:
        self._delegate.send_raw_streaming_request(wire_request, on_chunk)

    def get_raw_models(self) -> list[str]:
        return self._delegate.get_raw_models()
