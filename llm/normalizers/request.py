"""Canonical request → provider wire request."""

import json
from collections.abc import Mapping

from ..base import ChatRequest, Message, ToolChoice, ToolDefinition
from ..factory import wire_format_for

DEFAULT_ANTHROPIC_MAX_TOKENS = 4096

_OPENAI_TOOL_CHOICE = {
    ToolChoice.AUTO: "auto",
    ToolChoice.NONE: "none",
    ToolChoice.FORCED: "required",
}
_ANTHROPIC_TOOL_CHOICE = {
    ToolChoice.AUTO: {"type": "auto"},
    ToolChoice.NONE: {"type": "none"},
    ToolChoice.FORCED: {"type": "any"},
}
_GEMINI_TOOL_CHOICE = {
    ToolChoice.AUTO: "AUTO",
    ToolChoice.NONE: "NONE",
    ToolChoice.FORCED: "ANY",
}


def _resolve_model(request: ChatRequest, provider_config: Mapping) -> str:
    # Per-call model wins over the stored provider model
    return request.model or provider_config.get("model") or ""


def _resolve_temperature(request: ChatRequest, provider_config: Mapping) -> float | None:
    if request.temperature is not None:
        return request.temperature
    return provider_config.get("temperature")


def _parse_tool_content(content: str | None):
    if content is None:
        return ""
    try:
        return json.loads(content)
    except (TypeError, ValueError):
        return content


# ── OpenAI-compatible (openai, grok, openrouter) ─────────────────────────────

def _openai_message(message: Message) -> dict:
    if message.role == "assistant" and message.tool_calls:
        return {
            "role": "assistant",
            "content": message.content,
            "tool_calls": [
                {
                    "id": tc.call_id,
                    "type": "function",
                    "function": {
                        "name": tc.name,
                        "arguments": json.dumps(tc.parameters),
                    },
                }
                for tc in message.tool_calls
            ],
        }
    if message.role == "tool":
        return {
            "role": "tool",
            "tool_call_id": message.tool_call_id,
            "content": message.content or "",
        }
    return {"role": message.role, "content": message.content or ""}


def _openai_tool(tool: ToolDefinition) -> dict:
    return {
        "type": "function",
        "function": {
            "name": tool.name,
            "description": tool.description,
            "parameters": tool.parameters,
        },
    }


def to_openai(request: ChatRequest, provider_config: Mapping) -> dict:
    wire: dict = {
        "model": _resolve_model(request, provider_config),
        "messages": [_openai_message(m) for m in request.messages],
    }
    if request.tools:
        wire["tools"] = [_openai_tool(t) for t in request.tools]
        if request.tool_choice is not None:
            wire["tool_choice"] = _OPENAI_TOOL_CHOICE[request.tool_choice]
    temperature = _resolve_temperature(request, provider_config)
    if temperature is not None:
        wire["temperature"] = temperature
    if request.max_tokens:
        wire["max_tokens"] = request.max_tokens
    return wire


# ── Anthropic ────────────────────────────────────────────────────────────────

def _is_tool_result_turn(message: dict) -> bool:
    content = message.get("content")
    return (
        message.get("role") == "user"
        and isinstance(content, list)
        and all(block.get("type") == "tool_result" for block in content)
    )


def to_anthropic(request: ChatRequest, provider_config: Mapping) -> dict:
    system_parts = []
    messages: list[dict] = []

    for message in request.messages:
        if message.role == "system":
            if message.content:
                system_parts.append(message.content)
            continue

        if message.role == "tool":
            block = {
                "type": "tool_result",
                "tool_use_id": message.tool_call_id,
                "content": message.content or "",
            }
            # Anthropic wants every result for one assistant turn in a single user turn
            if messages and _is_tool_result_turn(messages[-1]):
                messages[-1]["content"].append(block)
            else:
                messages.append({"role": "user", "content": [block]})
            continue

        if message.role == "assistant" and message.tool_calls:
            blocks = [{"type": "text", "text": message.content}] if message.content else []
            blocks.extend(
                {"type": "tool_use", "id": tc.call_id, "name": tc.name, "input": tc.parameters}
                for tc in message.tool_calls
            )
            messages.append({"role": "assistant", "content": blocks})
            continue

        messages.append({"role": message.role, "content": message.content or ""})

    wire: dict = {
        "model": _resolve_model(request, provider_config),
        "max_tokens": (
            request.max_tokens
            or provider_config.get("max_tokens")
            or DEFAULT_ANTHROPIC_MAX_TOKENS
        ),
        "messages": messages,
    }
    if system_parts:
        wire["system"] = "\n\n".join(system_parts)
    if request.tools:
        wire["tools"] = [
            {"name": t.name, "description": t.description, "input_schema": t.parameters}
            for t in request.tools
        ]
        if request.tool_choice is not None:
            wire["tool_choice"] = _ANTHROPIC_TOOL_CHOICE[request.tool_choice]
    temperature = _resolve_temperature(request, provider_config)
    if temperature is not None:
        wire["temperature"] = temperature
    return wire


# ── Gemini ───────────────────────────────────────────────────────────────────

def to_gemini(request: ChatRequest, provider_config: Mapping) -> dict:
    system_parts = []
    contents: list[dict] = []
    tool_names: dict[str, str] = {}

    for message in request.messages:
        if message.role == "system":
            if message.content:
                system_parts.append(message.content)
            continue

        if message.role == "assistant" and message.tool_calls:
            parts = [{"text": message.content}] if message.content else []
            for tc in message.tool_calls:
                tool_names[tc.call_id] = tc.name
                parts.append({"functionCall": {"name": tc.name, "args": tc.parameters}})
            contents.append({"role": "model", "parts": parts})
            continue

        if message.role == "tool":
            # functionResponse correlates by name, recovered from the matching call
            part = {
                "functionResponse": {
                    "name": tool_names.get(message.tool_call_id, "tool"),
                    "response": {"result": _parse_tool_content(message.content)},
                }
            }
            last = contents[-1] if contents else None
            if last and last["role"] == "user" and all("functionResponse" in p for p in last["parts"]):
                last["parts"].append(part)
            else:
                contents.append({"role": "user", "parts": [part]})
            continue

        role = "model" if message.role == "assistant" else "user"
        contents.append({"role": role, "parts": [{"text": message.content or ""}]})

    wire: dict = {
        "model": _resolve_model(request, provider_config),
        "contents": contents,
    }
    if system_parts:
        wire["systemInstruction"] = {"parts": [{"text": "\n\n".join(system_parts)}]}
    if request.tools:
        wire["tools"] = [
            {
                "functionDeclarations": [
                    {"name": t.name, "description": t.description, "parameters": t.parameters}
                    for t in request.tools
                ]
            }
        ]
        if request.tool_choice is not None:
            wire["toolConfig"] = {
                "functionCallingConfig": {"mode": _GEMINI_TOOL_CHOICE[request.tool_choice]}
            }

    generation_config = {}
    temperature = _resolve_temperature(request, provider_config)
    if temperature is not None:
        generation_config["temperature"] = temperature
    if request.max_tokens:
        generation_config["maxOutputTokens"] = request.max_tokens
    if generation_config:
        wire["generationConfig"] = generation_config
    return wire


_FORMATTERS = {
    "openai": to_openai,
    "anthropic": to_anthropic,
    "gemini": to_gemini,
}


class RequestNormalizer:
    """Maps a ChatRequest onto the wire shape of a provider's chat endpoint.

    Fields a provider does not support are dropped silently.
    """

    def normalize(
        self, request: ChatRequest, provider_name: str, provider_config: Mapping
    ) -> dict:
        formatter = _FORMATTERS[wire_format_for(provider_name)]
        return formatter(request, provider_config or {})
