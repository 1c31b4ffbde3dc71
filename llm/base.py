"""Canonical request/response model shared by all providers, plus the adapter interface."""

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .errors import ValidationError

VALID_ROLES = ("system", "user", "assistant", "tool")


class ToolChoice(str, Enum):
    AUTO = "auto"
    NONE = "none"
    FORCED = "forced"


@dataclass
class ToolCall:
    """A model-issued request to invoke a named tool."""

    name: str
    parameters: dict
    call_id: str

    def to_dict(self) -> dict:
        return {"name": self.name, "parameters": dict(self.parameters), "call_id": self.call_id}

    @classmethod
    def from_dict(cls, data: Mapping) -> "ToolCall":
        return cls(
            name=data.get("name", ""),
            parameters=dict(data.get("parameters") or {}),
            call_id=data.get("call_id") or data.get("id") or "",
        )


@dataclass
class ToolDefinition:
    name: str
    description: str
    parameters: dict = field(default_factory=lambda: {"type": "object", "properties": {}})

    @classmethod
    def from_dict(cls, data: Mapping) -> "ToolDefinition":
        return cls(
            name=data["name"],
            description=data.get("description", ""),
            parameters=dict(data.get("parameters") or {"type": "object", "properties": {}}),
        )


@dataclass
class Message:
    role: str
    content: str | None = None
    tool_calls: list[ToolCall] = field(default_factory=list)
    tool_call_id: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping) -> "Message":
        if not isinstance(data, Mapping):
            raise ValidationError("Each message must be a mapping")
        role = data.get("role")
        if role not in VALID_ROLES:
            raise ValidationError(f"Invalid message role: {role!r}")
        if role == "tool" and not data.get("tool_call_id"):
            raise ValidationError("Tool messages must include tool_call_id")
        return cls(
            role=role,
            content=data.get("content"),
            tool_calls=[
                tc if isinstance(tc, ToolCall) else ToolCall.from_dict(tc)
                for tc in data.get("tool_calls") or []
            ],
            tool_call_id=data.get("tool_call_id"),
        )

    def to_dict(self) -> dict:
        msg: dict = {"role": self.role, "content": self.content}
        if self.tool_calls:
            msg["tool_calls"] = [tc.to_dict() for tc in self.tool_calls]
        if self.tool_call_id is not None:
            msg["tool_call_id"] = self.tool_call_id
        return msg


@dataclass
class ChatRequest:
    """Provider-agnostic chat request."""

    messages: list[Message]
    tools: list[ToolDefinition] = field(default_factory=list)
    tool_choice: ToolChoice | None = None
    model: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping) -> "ChatRequest":
        """Build a request from a plain mapping, validating the message list.

        Raises:
            ValidationError: If 'messages' is missing, not a list, or empty.
        """
        if not isinstance(data, Mapping):
            raise ValidationError("Request must be a mapping")
        messages = data.get("messages")
        if messages is None or isinstance(messages, (str, bytes, Mapping)):
            raise ValidationError("Request must include messages array")
        if not isinstance(messages, (list, tuple)):
            raise ValidationError("Request must include messages array")
        if not messages:
            raise ValidationError("Messages array cannot be empty")

        tool_choice = data.get("tool_choice")
        if tool_choice and tool_choice not in [c.value for c in ToolChoice]:
            raise ValidationError(f"Invalid tool_choice: {tool_choice!r}")
        return cls(
            messages=[m if isinstance(m, Message) else Message.from_dict(m) for m in messages],
            tools=[
                t if isinstance(t, ToolDefinition) else ToolDefinition.from_dict(t)
                for t in data.get("tools") or []
            ],
            tool_choice=ToolChoice(tool_choice) if tool_choice else None,
            model=data.get("model"),
            temperature=data.get("temperature"),
            max_tokens=data.get("max_tokens"),
        )

    def validate(self) -> None:
        if not isinstance(self.messages, (list, tuple)):
            raise ValidationError("Request must include messages array")
        if not self.messages:
            raise ValidationError("Messages array cannot be empty")
        for message in self.messages:
            if message.role == "tool" and not message.tool_call_id:
                raise ValidationError("Tool messages must include tool_call_id")


@dataclass
class Usage:
    input_tokens: int | None = None
    output_tokens: int | None = None
    total_tokens: int | None = None

    def __post_init__(self):
        if self.total_tokens is None and self.input_tokens is not None and self.output_tokens is not None:
            self.total_tokens = self.input_tokens + self.output_tokens


@dataclass
class ResponseData:
    content: str | None = None
    tool_calls: list[ToolCall] = field(default_factory=list)
    usage: Usage | None = None
    model: str | None = None
    finish_reason: str | None = None
    response_id: str | None = None


@dataclass
class ChatResponse:
    """Provider-agnostic response. `error` is set only when `success` is False."""

    success: bool
    data: ResponseData | None = None
    error: str | None = None
    provider: str = "unknown"
    raw_response: Any = field(repr=False, default=None)

    @classmethod
    def failure(cls, error: str, provider: str | None = None) -> "ChatResponse":
        return cls(success=False, data=None, error=error, provider=provider or "unknown")

    @property
    def content(self) -> str:
        """Assistant text, or an empty string when there is none."""
        if not self.success or self.data is None:
            return ""
        return self.data.content or ""

    @property
    def tool_calls(self) -> list[ToolCall]:
        if not self.success or self.data is None:
            return []
        return self.data.tool_calls


@dataclass
class StreamChunk:
    content: str


@dataclass
class ToolResult:
    tool_name: str
    result: Any
    call_id: str | None = None


@dataclass
class ContinuationContext:
    """Conversation state needed to hand tool results back to the model.

    Args:
        request: The request that produced the tool calls.
        tool_calls: Intents the model issued, echoed back verbatim.
        assistant_content: Any text the model emitted alongside the calls.
        keep_tools: Leave tool definitions on the follow-up request.
    """

    request: ChatRequest
    tool_calls: list[ToolCall]
    assistant_content: str | None = None
    keep_tools: bool = False


@dataclass
class ConnectionTestResult:
    success: bool
    message: str
    provider: str
    model: str | None = None
    content: str | None = None


class BaseProvider(ABC):
    """Per-vendor transport: sends provider-native requests, returns provider-native data."""

    name: str = ""
    wire_format: str = ""

    def __init__(self, settings: Mapping):
        self.settings = dict(settings)

    @property
    def default_model(self) -> str:
        return self.settings.get("model") or ""

    @abstractmethod
    def send_raw_request(self, wire_request: dict) -> dict:
        """Send a provider-native request and return the provider-native response dict."""

    @abstractmethod
    def send_raw_streaming_request(
        self, wire_request: dict, on_chunk: Callable[[Any], None]
    ) -> None:
        """Send a streaming request, invoking `on_chunk` with each raw chunk."""

    @abstractmethod
    def get_raw_models(self) -> list[str]:
        """Return the model identifiers the provider exposes."""
