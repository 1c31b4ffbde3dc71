"""Provider connection check: config validation, minimal request, result shaping."""

from collections.abc import Mapping

from ..base import ChatRequest, ConnectionTestResult, Message
from .request import RequestNormalizer
from .response import ResponseNormalizer

TEST_PROMPT = "Test connection"
TEST_MAX_TOKENS = 16


class ConnectionTestNormalizer:
    def __init__(
        self,
        request_normalizer: RequestNormalizer | None = None,
        response_normalizer: ResponseNormalizer | None = None,
    ):
        self.request_normalizer = request_normalizer or RequestNormalizer()
        self.response_normalizer = response_normalizer or ResponseNormalizer()

    def validate_provider_config(
        self, provider_name: str, provider_config: Mapping
    ) -> tuple[bool, str]:
        if not provider_config:
            return False, f"No configuration found for {provider_name}"
        if not provider_config.get("api_key"):
            return False, f"API key is missing for {provider_name}"
        return True, ""

    def create_test_request(self, provider_name: str, provider_config: Mapping) -> dict:
        request = ChatRequest(
            messages=[Message(role="user", content=TEST_PROMPT)],
            max_tokens=TEST_MAX_TOKENS,
        )
        return self.request_normalizer.normalize(request, provider_name, provider_config)

    def normalize_test_response(
        self, raw: Mapping, provider_name: str, provider_config: Mapping | None = None
    ) -> ConnectionTestResult:
        response = self.response_normalizer.normalize(raw, provider_name)
        model = response.data.model if response.data else None
        return ConnectionTestResult(
            success=True,
            message=f"Successfully connected to {provider_name}",
            provider=provider_name,
            model=model or (provider_config or {}).get("model"),
            content=response.content or None,
        )

    def create_error_response(self, message: str, provider_name: str) -> ConnectionTestResult:
        return ConnectionTestResult(
            success=False,
            message=f"Connection test failed: {message}",
            provider=provider_name,
        )
