"""Google Gemini adapter: native generateContent REST API over requests.

Endpoints (relative to GEMINI_BASE_URL, default .../v1beta):
  POST models/{model}:generateContent
  POST models/{model}:streamGenerateContent?alt=sse
  GET  models

The model name travels inside the wire request under "model" and is moved
into the URL here; "alt" marks a streaming request.
"""

from collections.abc import Callable, Mapping
from typing import Any

import requests

from .base import BaseProvider
from .errors import TransportError


def _error_detail(resp: requests.Response) -> str:
    try:
        return resp.json().get("error", {}).get("message") or resp.text[:200]
    except ValueError:
        return resp.text[:200]


class GeminiAdapter(BaseProvider):
    """Calls the Gemini REST API directly."""

    name = "gemini"
    wire_format = "gemini"

    def __init__(self, settings: Mapping):
        super().__init__(settings)
        self.base_url = (self.settings.get("base_url") or "").rstrip("/")
        self.timeout = self.settings.get("timeout", 30)

    def _headers(self) -> dict:
        return {
            "x-goog-api-key": self.settings.get("api_key", ""),
            "Content-Type": "application/json",
        }

    def _split(self, wire_request: dict) -> tuple[str, dict, dict]:
        body = dict(wire_request)
        model = body.pop("model", None) or self.default_model
        params = {"alt": body.pop("alt")} if "alt" in body else {}
        return model, body, params

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            resp = requests.request(
                method, url, headers=self._headers(), timeout=self.timeout, **kwargs
            )
        except requests.Timeout as exc:
            raise TransportError(f"Gemini request timed out after {self.timeout}s") from exc
        except requests.RequestException as exc:
            raise TransportError(f"Gemini request failed: {exc}") from exc

        if resp.status_code != 200:
            detail = _error_detail(resp)
            resp.close()
            raise TransportError(
                f"Gemini API error {resp.status_code}: {detail}", status_code=resp.status_code
            )
        return resp

    def send_raw_request(self, wire_request: dict) -> dict:
        model, body, _params = self._split(wire_request)
        resp = self._request("POST", f"{self.base_url}/models/{model}:generateContent", json=body)
        try:
            return resp.json()
        except ValueError as exc:
            raise TransportError("Gemini returned a non-JSON response") from exc

    def send_raw_streaming_request(
        self, wire_request: dict, on_chunk: Callable[[Any], None]
    ) -> None:
        model, body, params = self._split(wire_request)
        params.setdefault("alt", "sse")
        resp = self._request(
            "POST",
            f"{self.base_url}/models/{model}:streamGenerateContent",
            json=body,
            params=params,
            stream=True,
        )
        with resp:
            try:
                for line in resp.iter_lines(decode_unicode=True):
                    if line:
                        on_chunk(line)
            except requests.RequestException as exc:
                raise TransportError(f"Gemini stream interrupted: {exc}") from exc

    def get_raw_models(self) -> list[str]:
        resp = self._request("GET", f"{self.base_url}/models", params={"pageSize": 1000})
        try:
            data = resp.json()
        except ValueError as exc:
            raise TransportError("Gemini returned a non-JSON response") from exc
        return [m["name"].removeprefix("models/") for m in data.get("models", []) if "name" in m]
