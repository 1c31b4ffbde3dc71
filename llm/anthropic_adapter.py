"""Anthropic Claude adapter: wraps the Anthropic SDK."""

from collections.abc import Callable, Mapping
from typing import Any

import anthropic

from .base import BaseProvider
from .errors import TransportError


def _to_transport_error(exc: anthropic.APIError) -> TransportError:
    if isinstance(exc, anthropic.APITimeoutError):
        return TransportError("Anthropic request timed out")
    if isinstance(exc, anthropic.APIStatusError):
        return TransportError(
            f"Anthropic API error {exc.status_code}: {exc.message}", status_code=exc.status_code
        )
    if isinstance(exc, anthropic.APIConnectionError):
        return TransportError(f"Connection to Anthropic failed: {exc}")
    return TransportError(f"Anthropic request failed: {exc}")


class AnthropicAdapter(BaseProvider):
    """Calls Claude via messages.create."""

    name = "anthropic"
    wire_format = "anthropic"

    def __init__(self, settings: Mapping):
        super().__init__(settings)
        self.client = anthropic.Anthropic(
            api_key=self.settings.get("api_key") or None,
            base_url=self.settings.get("base_url") or None,
            timeout=self.settings.get("timeout", 30),
            max_retries=0,
        )

    def send_raw_request(self, wire_request: dict) -> dict:
        try:
            raw = self.client.messages.create(**wire_request)
        except anthropic.APIError as exc:
            raise _to_transport_error(exc) from exc
        return raw.model_dump()

    def send_raw_streaming_request(
        self, wire_request: dict, on_chunk: Callable[[Any], None]
    ) -> None:
        try:
            stream = self.client.messages.create(**wire_request)
            for event in stream:
                on_chunk(event.model_dump())
        except anthropic.APIError as exc:
            raise _to_transport_error(exc) from exc

    def get_raw_models(self) -> list[str]:
        try:
            return [model.id for model in self.client.models.list()]
        except anthropic.APIError as exc:
            raise _to_transport_error(exc) from exc
