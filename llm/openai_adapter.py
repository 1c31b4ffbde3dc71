"""OpenAI-compatible adapter.

Speaks the OpenAI Chat Completions API through the official SDK. Also serves as
the transport for other OpenAI-compatible vendors (Grok, OpenRouter), which
delegate to it with their own base URL and headers.
"""

from collections.abc import Callable, Mapping
from typing import Any

import openai
from openai import OpenAI

from .base import BaseProvider
from .errors import TransportError


def _to_transport_error(label: str, exc: openai.APIError) -> TransportError:
    if isinstance(exc, openai.APITimeoutError):
        return TransportError(f"{label} request timed out")
    if isinstance(exc, openai.APIStatusError):
        return TransportError(
            f"{label} API error {exc.status_code}: {exc.message}", status_code=exc.status_code
        )
    if isinstance(exc, openai.APIConnectionError):
        return TransportError(f"Connection to {label} failed: {exc}")
    return TransportError(f"{label} request failed: {exc}")


class OpenAIAdapter(BaseProvider):
    """Calls any OpenAI-compatible endpoint."""

    name = "openai"
    wire_format = "openai"

    def __init__(
        self,
        settings: Mapping,
        label: str = "OpenAI",
        default_headers: dict | None = None,
    ):
        super().__init__(settings)
        self.label = label
        self.client = OpenAI(
            base_url=self.settings.get("base_url") or None,
            api_key=self.settings.get("api_key") or "none",
            timeout=self.settings.get("timeout", 30),
            max_retries=0,
            default_headers=default_headers,
        )

    def send_raw_request(self, wire_request: dict) -> dict:
        try:
            raw = self.client.chat.completions.create(**wire_request)
        except openai.APIError as exc:
            raise _to_transport_error(self.label, exc) from exc
        return raw.model_dump()

    def send_raw_streaming_request(
        self, wire_request: dict, on_chunk: Callable[[Any], None]
    ) -> None:
        try:
            stream = self.client.chat.completions.create(**wire_request)
            for chunk in stream:
                on_chunk(chunk.model_dump())
        except openai.APIError as exc:
            raise _to_transport_error(self.label, exc) from exc

    def get_raw_models(self) -> list[str]:
        try:
            return [model.id for model in self.client.models.list()]
        except openai.APIError as exc:
            raise _to_transport_error(self.label, exc) from exc
