"""OpenTelemetry tracing: exports spans to a running Arize Phoenix server and
instruments the Anthropic and OpenAI SDK calls made by the provider adapters."""

import logging
import os

logger = logging.getLogger(__name__)

PHOENIX_ENDPOINT = os.getenv("PHOENIX_ENDPOINT", "http://localhost:6006/v1/traces")


def setup_observability(endpoint: str = PHOENIX_ENDPOINT) -> bool:
    """Register an OTLP exporter and instrument the LLM SDKs.

    Connects to an already-running collector; nothing is launched.

    Args:
        endpoint: OTLP/HTTP traces endpoint.

    Returns:
        True on success, False if the exporter package is missing or setup failed.
    """
    try:
        from opentelemetry import trace
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

        provider = TracerProvider()
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))

        # Global provider, so the ai_client.* spans and SDK instrumentation share it
        trace.set_tracer_provider(provider)

        _instrument_anthropic(provider)
        _instrument_openai(provider)

        logger.info("Tracing enabled, exporting to %s", endpoint)
        return True

    except ImportError as exc:
        logger.warning(
            "Tracing disabled, missing package: %s. "
            "Run: pip install opentelemetry-exporter-otlp-proto-http", exc,
        )
        return False
    except Exception as exc:
        logger.warning("Tracing setup failed: %s", exc)
        return False


def _instrument_anthropic(provider):
    try:
        from openinference.instrumentation.anthropic import AnthropicInstrumentor
    except ImportError:
        logger.debug("openinference Anthropic instrumentor not installed")
        return
    AnthropicInstrumentor().instrument(tracer_provider=provider)


def _instrument_openai(provider):
    """Covers the OpenAI, Grok and OpenRouter adapters, which all use the OpenAI SDK."""
    try:
        from openinference.instrumentation.openai import OpenAIInstrumentor
    except ImportError:
        logger.debug("openinference OpenAI instrumentor not installed")
        return
    OpenAIInstrumentor().instrument(tracer_provider=provider)
