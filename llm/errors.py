"""Error taxonomy for the AI HTTP client."""


class AIClientError(Exception):
    """Base class for every error raised by the AI client layer."""


class ValidationError(AIClientError):
    """The canonical request is malformed (e.g. missing or empty messages)."""


class ConfigurationError(AIClientError):
    """No provider configured, or a provider is missing required settings."""


class UnsupportedProviderError(AIClientError):
    """Provider name is outside the supported set."""

    def __init__(self, provider_name: str):
        self.provider_name = provider_name
        super().__init__(f"Provider '{provider_name}' is not supported")


class TransportError(AIClientError):
    """Network failure, timeout or non-2xx status while talking to a provider."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class MalformedResponseError(AIClientError):
    """A provider response is missing the fields a normalizer expects."""
