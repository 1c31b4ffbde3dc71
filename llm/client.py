"""AI HTTP client: one request/response contract in front of every provider.

Pipeline for each call:
    validate → resolve provider → normalize request → adapter call → normalize response

Request-path failures on `send_request` are captured into a failed
ChatResponse. Streaming and unsupported providers on the streaming and
continuation paths raise instead, since their callers handle exceptions.
"""

import logging
import threading
from collections.abc import Callable, Mapping, Sequence
from typing import TextIO

from opentelemetry import trace

import config
from .base import (
    BaseProvider,
    ChatRequest,
    ChatResponse,
    ConnectionTestResult,
    ContinuationContext,
    StreamChunk,
    ToolResult,
)
from .errors import AIClientError, ConfigurationError, TransportError, ValidationError
from .factory import create_provider, get_provider_class
from .normalizers import (
    ConnectionTestNormalizer,
    RequestNormalizer,
    ResponseNormalizer,
    StreamingNormalizer,
    ToolResultsNormalizer,
)

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

NOT_CONFIGURED_MESSAGE = "AI client is not configured: no default provider set"


class AIHttpClient:
    """Facade over the provider adapters and normalizers.

    Provider settings and adapter instances are resolved on first use and
    cached for the lifetime of the client.

    Args:
        default_provider: Provider used when a call names none. Falls back to
            config.AI_DEFAULT_PROVIDER; if neither is set the client is
            unconfigured and every call fails closed without network I/O.
        provider_settings: Explicit per-provider settings, merged over what
            `settings_loader` returns.
        settings_loader: Callable returning a provider's settings dict.
            Defaults to config.get_provider_settings.
        timeout: Per-request timeout in seconds applied to every provider.

    Raises:
        ConfigurationError: If the construction arguments are malformed.
    """

    def __init__(
        self,
        default_provider: str | None = None,
        provider_settings: Mapping[str, Mapping] | None = None,
        settings_loader: Callable[[str], dict] | None = None,
        timeout: float | None = None,
    ):
        if provider_settings is not None and not isinstance(provider_settings, Mapping):
            raise ConfigurationError("provider_settings must be a mapping of provider name to settings")
        timeout = config.AI_REQUEST_TIMEOUT if timeout is None else timeout
        if not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigurationError(f"timeout must be a positive number, got {timeout!r}")

        self.timeout = timeout
        self.default_provider = (
            default_provider if default_provider is not None else config.AI_DEFAULT_PROVIDER
        ) or None
        self._explicit_settings = {
            name.lower(): dict(settings) for name, settings in (provider_settings or {}).items()
        }
        self._settings_loader = settings_loader or config.get_provider_settings

        self._providers: dict[str, BaseProvider] = {}
        self._provider_configs: dict[str, dict] = {}
        self._lock = threading.Lock()

        self.request_normalizer = RequestNormalizer()
        self.response_normalizer = ResponseNormalizer()
        self.streaming_normalizer = StreamingNormalizer()
        self.tool_results_normalizer = ToolResultsNormalizer(self.request_normalizer)
        self.connection_test_normalizer = ConnectionTestNormalizer(
            self.request_normalizer, self.response_normalizer
        )

        self.is_configured = bool(self.default_provider)
        if not self.is_configured:
            logger.warning("No AI provider configured; client will be non-functional")

    # ── Provider resolution ──────────────────────────────────────────────────

    def _resolve_name(self, provider_name: str | None) -> str:
        name = provider_name or self.default_provider
        if not name:
            raise ConfigurationError(NOT_CONFIGURED_MESSAGE)
        return name.lower().strip()

    def get_provider_config(self, provider_name: str) -> dict:
        """Return the (cached) settings for a provider."""
        name = provider_name.lower().strip()
        with self._lock:
            cached = self._provider_configs.get(name)
            if cached is None:
                cached = dict(self._settings_loader(name) or {})
                cached.update(self._explicit_settings.get(name, {}))
                cached["timeout"] = cached.get("timeout") or self.timeout
                self._provider_configs[name] = cached
        return dict(cached)

    def get_provider(self, provider_name: str) -> BaseProvider:
        """Return the adapter for a provider, constructing it once per client.

        Raises:
            UnsupportedProviderError: If the name is outside the supported set.
        """
        name = provider_name.lower().strip()
        get_provider_class(name)
        provider_config = self.get_provider_config(name)
        with self._lock:
            provider = self._providers.get(name)
            if provider is None:
                logger.debug("Creating %s provider adapter", name)
                provider = create_provider(name, provider_config)
                self._providers[name] = provider
        return provider

    @staticmethod
    def _validate_request(request: ChatRequest | Mapping) -> ChatRequest:
        if isinstance(request, ChatRequest):
            request.validate()
            return request
        if isinstance(request, Mapping):
            return ChatRequest.from_dict(request)
        raise ValidationError("Request must be a ChatRequest or a mapping")

    # ── Request paths ────────────────────────────────────────────────────────

    def send_request(
        self, request: ChatRequest | Mapping, provider_name: str | None = None
    ) -> ChatResponse:
        """Send a request and return a normalized response. Never raises.

        Args:
            request: Canonical request (ChatRequest or equivalent mapping).
            provider_name: Provider to use; the default provider if omitted.

        Returns:
            ChatResponse with success=True and data, or success=False and error.
        """
        if not self.is_configured:
            return ChatResponse.failure(NOT_CONFIGURED_MESSAGE, provider_name)

        with tracer.start_as_current_span("ai_client.send_request") as span:
            name = provider_name or self.default_provider
            try:
                name = self._resolve_name(provider_name)
                span.set_attribute("llm.provider", name)
                canonical = self._validate_request(request)
                provider = self.get_provider(name)
                wire = self.request_normalizer.normalize(
                    canonical, name, self.get_provider_config(name)
                )
                span.set_attribute("llm.model", wire.get("model", ""))
                logger.info("Sending request to %s (model=%s)", name, wire.get("model"))
                raw = provider.send_raw_request(wire)
                response = self.response_normalizer.normalize(raw, name)
            except AIClientError as exc:
                logger.warning("Request to %s failed: %s", name, exc)
                return ChatResponse.failure(str(exc), name)
            except Exception as exc:
                logger.exception("Unexpected error during request to %s", name)
                return ChatResponse.failure(str(exc), name)

        response.provider = name
        response.success = True
        return response

    def send_streaming_request(
        self,
        request: ChatRequest | Mapping,
        provider_name: str | None = None,
        on_chunk: Callable[[StreamChunk], None] | None = None,
        output: TextIO | None = None,
    ) -> str:
        """Stream a response, emitting each text delta as it arrives.

        Args:
            request: Canonical request.
            provider_name: Provider to use; the default provider if omitted.
            on_chunk: Called with each StreamChunk.
            output: Text stream each delta is written to and flushed.

        Returns:
            The full accumulated text.

        Raises:
            AIClientError: On any failure; output may already have been emitted.
        """
        if not self.is_configured:
            raise ConfigurationError(NOT_CONFIGURED_MESSAGE)

        name = self._resolve_name(provider_name)
        with tracer.start_as_current_span("ai_client.stream") as span:
            span.set_attribute("llm.provider", name)
            canonical = self._validate_request(request)
            provider = self.get_provider(name)
            wire = self.request_normalizer.normalize(canonical, name, self.get_provider_config(name))
            streaming = self.streaming_normalizer.normalize_streaming_request(wire, name)
            span.set_attribute("llm.model", streaming.get("model", ""))

            parts: list[str] = []

            def handle(raw_chunk):
                chunk = self.streaming_normalizer.process_chunk(raw_chunk, name)
                if chunk is None:
                    return
                parts.append(chunk.content)
                if on_chunk is not None:
                    on_chunk(chunk)
                if output is not None:
                    output.write(chunk.content)
                    output.flush()

            logger.info("Opening stream to %s (model=%s)", name, streaming.get("model"))
            try:
                provider.send_raw_streaming_request(streaming, handle)
            except AIClientError:
                raise
            except Exception as exc:
                raise TransportError(f"Streaming failed for {name}: {exc}") from exc

        return "".join(parts)

    def continue_with_tool_results(
        self,
        context_data: ContinuationContext | Mapping,
        tool_results: Sequence[ToolResult | Mapping],
        provider_name: str | None = None,
        on_chunk: Callable[[StreamChunk], None] | None = None,
        output: TextIO | None = None,
    ) -> ChatResponse | str:
        """Hand tool results back to the model and return its next turn.

        Streams when `on_chunk` is given (returning text), otherwise returns a
        ChatResponse like `send_request`.

        Raises:
            UnsupportedProviderError: If the provider name is not supported.
        """
        streaming = on_chunk is not None
        if not self.is_configured:
            if streaming:
                raise ConfigurationError(NOT_CONFIGURED_MESSAGE)
            return ChatResponse.failure(NOT_CONFIGURED_MESSAGE, provider_name)

        name = self._resolve_name(provider_name)
        get_provider_class(name)

        with tracer.start_as_current_span("ai_client.continue") as span:
            span.set_attribute("llm.provider", name)
            span.set_attribute("llm.tool_results", len(tool_results))
            try:
                continuation = self.tool_results_normalizer.build_continuation_request(
                    context_data, tool_results
                )
            except ValidationError as exc:
                if streaming:
                    raise
                logger.warning("Could not build continuation for %s: %s", name, exc)
                return ChatResponse.failure(str(exc), name)

            if streaming:
                return self.send_streaming_request(continuation, name, on_chunk, output)
            return self.send_request(continuation, name)

    def test_connection(self, provider_name: str | None = None) -> ConnectionTestResult:
        """Check that a provider answers. Configuration problems short-circuit before any network call."""
        normalizer = self.connection_test_normalizer
        if not self.is_configured:
            return normalizer.create_error_response(NOT_CONFIGURED_MESSAGE, provider_name or "unknown")

        name = provider_name or self.default_provider
        try:
            name = self._resolve_name(provider_name)
            get_provider_class(name)
            provider_config = self.get_provider_config(name)
            valid, message = normalizer.validate_provider_config(name, provider_config)
            if not valid:
                return normalizer.create_error_response(message, name)

            provider = self.get_provider(name)
            wire = normalizer.create_test_request(name, provider_config)
            raw = provider.send_raw_request(wire)
            return normalizer.normalize_test_response(raw, name, provider_config)
        except Exception as exc:
            logger.warning("Connection test for %s failed: %s", name, exc)
            return normalizer.create_error_response(str(exc), name)

    def get_available_models(self, provider_name: str | None = None) -> list[str]:
        """List a provider's models; any failure yields an empty list."""
        if not self.is_configured:
            return []
        name = provider_name or self.default_provider
        try:
            return self.get_provider(self._resolve_name(provider_name)).get_raw_models()
        except Exception as exc:
            logger.warning("Model fetch failed for %s: %s", name, exc)
            return []
