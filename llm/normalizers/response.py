"""Provider wire response → canonical ChatResponse."""

import json
import logging
from collections.abc import Mapping

from ..base import ChatResponse, ResponseData, ToolCall, Usage
from ..errors import MalformedResponseError
from ..factory import wire_format_for

logger = logging.getLogger(__name__)


def _parse_arguments(arguments) -> dict:
    """OpenAI-style tool arguments arrive as a JSON string."""
    if isinstance(arguments, Mapping):
        return dict(arguments)
    if not arguments:
        return {}
    try:
        parsed = json.loads(arguments)
    except (TypeError, ValueError):
        logger.warning("Discarding unparseable tool arguments: %.200s", arguments)
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _finalize(content: str | None, tool_calls: list[ToolCall]) -> str | None:
    # A turn carries either text or tool calls; any preamble text is dropped with calls
    if tool_calls:
        return None
    return content


def from_openai(raw: Mapping) -> ResponseData:
    choices = raw.get("choices")
    if not choices:
        raise MalformedResponseError("response has no choices")
    choice = choices[0] or {}
    message = choice.get("message") or {}

    tool_calls = []
    for index, tc in enumerate(message.get("tool_calls") or []):
        function = tc.get("function") or {}
        name = function.get("name", "")
        tool_calls.append(
            ToolCall(
                name=name,
                parameters=_parse_arguments(function.get("arguments")),
                call_id=tc.get("id") or f"call_{index}_{name}",
            )
        )

    usage = raw.get("usage") or {}
    return ResponseData(
        content=_finalize(message.get("content"), tool_calls),
        tool_calls=tool_calls,
        usage=Usage(
            input_tokens=usage.get("prompt_tokens"),
            output_tokens=usage.get("completion_tokens"),
            total_tokens=usage.get("total_tokens"),
        ) if usage else None,
        model=raw.get("model"),
        finish_reason=choice.get("finish_reason"),
        response_id=raw.get("id"),
    )


def from_anthropic(raw: Mapping) -> ResponseData:
    blocks = raw.get("content")
    if blocks is None:
        raise MalformedResponseError("response has no content blocks")

    texts = []
    tool_calls = []
    for block in blocks:
        if block.get("type") == "text":
            texts.append(block.get("text") or "")
        elif block.get("type") == "tool_use":
            tool_calls.append(
                ToolCall(
                    name=block.get("name", ""),
                    parameters=dict(block.get("input") or {}),
                    call_id=block.get("id", ""),
                )
            )

    usage = raw.get("usage") or {}
    text = "\n".join(t for t in texts if t) or None
    return ResponseData(
        content=_finalize(text, tool_calls),
        tool_calls=tool_calls,
        usage=Usage(
            input_tokens=usage.get("input_tokens"),
            output_tokens=usage.get("output_tokens"),
        ) if usage else None,
        model=raw.get("model"),
        finish_reason=raw.get("stop_reason"),
        response_id=raw.get("id"),
    )


def from_gemini(raw: Mapping) -> ResponseData:
    candidates = raw.get("candidates")
    if not candidates:
        reason = (raw.get("promptFeedback") or {}).get("blockReason")
        if reason:
            raise MalformedResponseError(f"prompt blocked: {reason}")
        raise MalformedResponseError("response has no candidates")
    candidate = candidates[0] or {}
    parts = (candidate.get("content") or {}).get("parts") or []

    texts = []
    tool_calls = []
    for part in parts:
        if "text" in part:
            texts.append(part["text"])
        elif "functionCall" in part:
            call = part["functionCall"] or {}
            name = call.get("name", "")
            tool_calls.append(
                ToolCall(
                    name=name,
                    parameters=dict(call.get("args") or {}),
                    call_id=call.get("id") or f"call_{len(tool_calls)}_{name}",
                )
            )

    usage = raw.get("usageMetadata") or {}
    return ResponseData(
        content=_finalize("".join(texts) or None, tool_calls),
        tool_calls=tool_calls,
        usage=Usage(
            input_tokens=usage.get("promptTokenCount"),
            output_tokens=usage.get("candidatesTokenCount"),
            total_tokens=usage.get("totalTokenCount"),
        ) if usage else None,
        model=raw.get("modelVersion"),
        finish_reason=candidate.get("finishReason"),
        response_id=raw.get("responseId"),
    )


_PARSERS = {
    "openai": from_openai,
    "anthropic": from_anthropic,
    "gemini": from_gemini,
}


class ResponseNormalizer:
    """Extracts text, tool calls and usage from a provider response.

    A response the parser cannot make sense of is logged and treated as an
    empty success; transport failures never reach this class.
    """

    def normalize(self, raw: Mapping, provider_name: str) -> ChatResponse:
        parser = _PARSERS[wire_format_for(provider_name)]
        try:
            if not isinstance(raw, Mapping):
                raise MalformedResponseError(f"expected a JSON object, got {type(raw).__name__}")
            data = parser(raw)
        except (MalformedResponseError, AttributeError, TypeError) as exc:
            logger.warning("Malformed %s response treated as empty: %s", provider_name, exc)
            data = ResponseData()
        return ChatResponse(success=True, data=data, provider=provider_name, raw_response=raw)
