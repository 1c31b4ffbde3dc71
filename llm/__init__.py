"""Provider-agnostic AI client: import AIHttpClient to talk to any supported LLM."""

from .base import (
    ChatRequest,
    ChatResponse,
    ConnectionTestResult,
    ContinuationContext,
    Message,
    StreamChunk,
    ToolCall,
    ToolChoice,
    ToolDefinition,
    ToolResult,
)
from .client import AIHttpClient
from .errors import (
    AIClientError,
    ConfigurationError,
    MalformedResponseError,
    TransportError,
    UnsupportedProviderError,
    ValidationError,
)
from .factory import SUPPORTED_PROVIDERS

__all__ = [
    "AIHttpClient",
    "AIClientError",
    "ChatRequest",
    "ChatResponse",
    "ConfigurationError",
    "ConnectionTestResult",
    "ContinuationContext",
    "MalformedResponseError",
    "Message",
    "StreamChunk",
    "SUPPORTED_PROVIDERS",
    "ToolCall",
    "ToolChoice",
    "ToolDefinition",
    "ToolResult",
    "TransportError",
    "UnsupportedProviderError",
    "ValidationError",
]
