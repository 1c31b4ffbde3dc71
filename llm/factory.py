"""Provider registry: the closed set of supported vendors and their adapters."""

from collections.abc import Mapping

from .anthropic_adapter import AnthropicAdapter
from .base import BaseProvider
from .errors import UnsupportedProviderError
from .gemini_adapter import GeminiAdapter
from .grok_adapter import GrokAdapter
from .openai_adapter import OpenAIAdapter
from .openrouter_adapter import OpenRouterAdapter

PROVIDERS: dict[str, type[BaseProvider]] = {
    "openai": OpenAIAdapter,
    "anthropic": AnthropicAdapter,
    "gemini": GeminiAdapter,
    "grok": GrokAdapter,
    "openrouter": OpenRouterAdapter,
}

SUPPORTED_PROVIDERS = tuple(PROVIDERS)


def get_provider_class(provider_name: str) -> type[BaseProvider]:
    """Return the adapter class for a provider name (case-insensitive).

    Raises:
        UnsupportedProviderError: If the name is not in PROVIDERS.
    """
    cls = PROVIDERS.get((provider_name or "").lower().strip())
    if cls is None:
        raise UnsupportedProviderError(provider_name)
    return cls


def wire_format_for(provider_name: str) -> str:
    """Return the wire format ("openai", "anthropic" or "gemini") a provider speaks."""
    return get_provider_class(provider_name).wire_format


def create_provider(provider_name: str, settings: Mapping) -> BaseProvider:
    """Instantiate the adapter for `provider_name` with its settings.

    Args:
        provider_name: One of SUPPORTED_PROVIDERS.
        settings: Provider configuration (api_key, model, base_url, timeout, ...).
    """
    return get_provider_class(provider_name)(settings)
