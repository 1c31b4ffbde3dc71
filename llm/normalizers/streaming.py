"""Streaming request variants and per-chunk decoding.

Chunks arrive either as dicts (SDK events dumped with `model_dump()`) or as
raw SSE lines (`data: {...}`). Anything that carries no text delta, including
heartbeats, `[DONE]` markers and unparseable payloads, decodes to None.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any

from ..base import StreamChunk
from ..factory import wire_format_for

logger = logging.getLogger(__name__)


def _decode(chunk: Any) -> dict | None:
    if isinstance(chunk, Mapping):
        return dict(chunk)
    if isinstance(chunk, bytes):
        chunk = chunk.decode("utf-8", errors="replace")
    if not isinstance(chunk, str):
        return None

    line = chunk.strip()
    if not line or line.startswith(":") or line.startswith("event:"):
        return None
    if line.startswith("data:"):
        line = line[len("data:"):].strip()
    if not line or line == "[DONE]":
        return None

    try:
        data = json.loads(line)
    except ValueError:
        logger.debug("Skipping malformed stream chunk: %.120s", line)
        return None
    return data if isinstance(data, dict) else None


def _openai_delta(data: dict) -> str | None:
    choices = data.get("choices") or []
    if not choices:
        return None
    delta = choices[0].get("delta") or {}
    return delta.get("content")


def _anthropic_delta(data: dict) -> str | None:
    if data.get("type") != "content_block_delta":
        return None
    delta = data.get("delta") or {}
    if delta.get("type") != "text_delta":
        return None
    return delta.get("text")


def _gemini_delta(data: dict) -> str | None:
    candidates = data.get("candidates") or []
    if not candidates:
        return None
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(p.get("text", "") for p in parts)


_EXTRACTORS = {
    "openai": _openai_delta,
    "anthropic": _anthropic_delta,
    "gemini": _gemini_delta,
}


class StreamingNormalizer:
    """Stateless; one instance can serve any number of concurrent streams."""

    def normalize_streaming_request(self, wire_request: dict, provider_name: str) -> dict:
        streaming = dict(wire_request)
        if wire_format_for(provider_name) == "gemini":
            streaming["alt"] = "sse"
        else:
            streaming["stream"] = True
        return streaming

    def process_chunk(self, chunk: Any, provider_name: str) -> StreamChunk | None:
        data = _decode(chunk)
        if data is None:
            return None
        extractor = _EXTRACTORS[wire_format_for(provider_name)]
        try:
            text = extractor(data)
        except (AttributeError, TypeError, IndexError):
            logger.debug("Skipping stream chunk with unexpected shape from %s", provider_name)
            return None
        if not text or not isinstance(text, str):
            return None
        return StreamChunk(content=text)
