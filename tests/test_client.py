"""AIHttpClient orchestration: validation, provider resolution, caching, streaming."""

import io
from unittest.mock import MagicMock, patch

import pytest

from conftest import FakeProvider, openai_text, openai_tool_call
from llm import (
    AIHttpClient,
    ChatRequest,
    ConfigurationError,
    ContinuationContext,
    Message,
    ToolCall,
    ToolResult,
    TransportError,
    UnsupportedProviderError,
    ValidationError,
)

VALID = {"messages": [{"role": "user", "content": "Hello"}]}


class TestConstruction:
    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ConfigurationError):
            AIHttpClient(default_provider="openai", timeout=0)

    def test_rejects_non_mapping_settings(self):
        with pytest.raises(ConfigurationError):
            AIHttpClient(default_provider="openai", provider_settings=["openai"])


class TestSendRequest:
    def test_success(self, client, provider):
        provider.responses = [openai_text("Hi!")]

        response = client.send_request(VALID)

        assert response.success
        assert response.provider == "openai"
        assert response.content == "Hi!"
        assert provider.requests[0]["model"] == "gpt-4o-mini"
        assert provider.requests[0]["messages"] == [{"role": "user", "content": "Hello"}]

    @pytest.mark.parametrize(
        "request_data, message",
        [
            ({}, "Request must include messages array"),
            ({"messages": []}, "Messages array cannot be empty"),
            ({"messages": "hello"}, "Request must include messages array"),
        ],
    )
    @pytest.mark.parametrize("provider_name", ["openai", "anthropic", "gemini", "grok", "openrouter"])
    def test_validation_failures_are_captured(self, client, request_data, message, provider_name):
        response = client.send_request(request_data, provider_name)
        assert not response.success
        assert response.error == message

    def test_unknown_provider_named_in_error(self, client):
        response = client.send_request(VALID, "unknown-vendor")
        assert not response.success
        assert "unknown-vendor" in response.error

    def test_transport_error_captured(self, client, provider):
        provider.responses = [TransportError("OpenAI API error 500: boom", status_code=500)]
        response = client.send_request(ChatRequest(messages=[Message(role="user", content="x")]))
        assert not response.success
        assert response.error == "OpenAI API error 500: boom"

    def test_unexpected_exception_captured(self, client, provider):
        provider.responses = [RuntimeError("socket closed")]
        response = client.send_request(VALID)
        assert not response.success
        assert "socket closed" in response.error


class TestUnconfiguredClient:
    @pytest.fixture
    def unconfigured(self):
        return AIHttpClient(default_provider="", settings_loader=lambda name: {"api_key": "k"})

    def test_fails_closed_without_network(self, unconfigured):
        with patch("llm.client.create_provider") as create:
            response = unconfigured.send_request(VALID)
            assert not unconfigured.is_configured
            assert not response.success
            assert "not configured" in response.error
            assert unconfigured.get_available_models() == []
            assert not unconfigured.test_connection().success
            create.assert_not_called()

    def test_streaming_raises(self, unconfigured):
        with pytest.raises(ConfigurationError):
            unconfigured.send_streaming_request(VALID)


class TestCaching:
    def test_provider_config_is_idempotent(self):
        loader = MagicMock(return_value={"api_key": "k", "model": "m"})
        client = AIHttpClient(default_provider="openai", settings_loader=loader)

        first = client.get_provider_config("openai")
        second = client.get_provider_config("OpenAI")

        assert first == second
        assert first["timeout"] == client.timeout
        loader.assert_called_once_with("openai")

    def test_explicit_settings_override_loader(self):
        client = AIHttpClient(
            default_provider="openai",
            provider_settings={"openai": {"model": "gpt-4o"}},
            settings_loader=lambda name: {"api_key": "k", "model": "gpt-4o-mini"},
        )
        assert client.get_provider_config("openai")["model"] == "gpt-4o"

    def test_adapter_constructed_once(self):
        client = AIHttpClient(default_provider="openai", settings_loader=lambda name: {"api_key": "k"})
        with patch("llm.client.create_provider", return_value=MagicMock()) as create:
            assert client.get_provider("openai") is client.get_provider("openai")
        create.assert_called_once()


class TestStreaming:
    def test_accumulates_and_writes_output(self, client, provider):
        provider.chunks = [
            {"choices": [{"delta": {"content": "Hel"}}]},
            "data: {broken",
            {"choices": [{"delta": {"content": "lo"}}]},
            "data: [DONE]",
        ]
        seen = []
        output = io.StringIO()

        text = client.send_streaming_request(VALID, on_chunk=seen.append, output=output)

        assert text == "Hello"
        assert [c.content for c in seen] == ["Hel", "lo"]
        assert output.getvalue() == "Hello"
        assert provider.requests[0]["stream"] is True

    def test_unknown_provider_raises(self, client):
        with pytest.raises(UnsupportedProviderError):
            client.send_streaming_request(VALID, "unknown-vendor")

    def test_invalid_request_raises(self, client):
        with pytest.raises(ValidationError):
            client.send_streaming_request({"messages": []})

    def test_unexpected_failure_wrapped(self, client, provider):
        provider.chunks = [RuntimeError("reset by peer")]
        with pytest.raises(TransportError, match="Streaming failed for openai"):
            client.send_streaming_request(VALID)


class TestContinueWithToolResults:
    def _context(self):
        request = ChatRequest(messages=[Message(role="user", content="find foo")])
        call = ToolCall(name="local_search", parameters={"query": "foo"}, call_id="call_abc")
        return ContinuationContext(request=request, tool_calls=[call])

    def test_sends_results_with_provider_call_id(self, client, provider):
        provider.responses = [openai_text("Here is what I found")]

        response = client.continue_with_tool_results(
            self._context(), [ToolResult("local_search", {"results": []})]
        )

        assert response.content == "Here is what I found"
        messages = provider.requests[0]["messages"]
        assert messages[1]["tool_calls"][0]["id"] == "call_abc"
        assert messages[2] == {"role": "tool", "tool_call_id": "call_abc", "content": '{"results": []}'}
        assert "tools" not in provider.requests[0]

    def test_streaming_continuation(self, client, provider):
        provider.chunks = [{"choices": [{"delta": {"content": "done"}}]}]
        text = client.continue_with_tool_results(
            self._context(), [ToolResult("local_search", "r")], on_chunk=lambda chunk: None
        )
        assert text == "done"

    def test_unknown_provider_raises(self, client):
        with pytest.raises(UnsupportedProviderError):
            client.continue_with_tool_results(self._context(), [], "unknown-vendor")

    def test_unmatched_result_is_captured(self, client, provider):
        response = client.continue_with_tool_results(self._context(), [ToolResult("remote_search", "x")])
        assert not response.success
        assert provider.requests == []

    def test_unknown_call_id_is_captured(self, client, provider):
        response = client.continue_with_tool_results(
            self._context(), [ToolResult("local_search", {}, call_id="bogus")]
        )
        assert not response.success
        assert "bogus" in response.error
        assert provider.requests == []


class TestConnectionAndModels:
    def test_missing_key_short_circuits(self):
        client = AIHttpClient(default_provider="openai", settings_loader=lambda name: {"model": "m"})
        with patch("llm.client.create_provider") as create:
            result = client.test_connection()
        assert not result.success
        assert result.message == "Connection test failed: API key is missing for openai"
        create.assert_not_called()

    def test_successful_connection(self, client, provider):
        provider.responses = [openai_text("ok", model="gpt-4o-mini-2024")]
        result = client.test_connection("openai")
        assert result.success
        assert result.model == "gpt-4o-mini-2024"
        assert provider.requests[0]["max_tokens"] == 16
        assert provider.requests[0]["messages"] == [{"role": "user", "content": "Test connection"}]

    def test_unknown_provider(self, client):
        result = client.test_connection("unknown-vendor")
        assert not result.success
        assert "unknown-vendor" in result.message

    def test_models(self, client, provider):
        provider.models = ["gpt-4o", "gpt-4o-mini"]
        assert client.get_available_models() == ["gpt-4o", "gpt-4o-mini"]

    def test_models_failure_yields_empty_list(self, client, provider):
        provider.models = TransportError("down")
        assert client.get_available_models() == []


def test_tool_call_response_round_trip(client, provider):
    provider.responses = [openai_tool_call("local_search", '{"query": "foo"}')]
    response = client.send_request(VALID)
    (call,) = response.tool_calls
    assert (call.name, call.parameters, call.call_id) == ("local_search", {"query": "foo"}, "call_abc")
    assert response.data.content is None


def test_fake_provider_is_used(client, provider):
    assert isinstance(client.get_provider("openai"), FakeProvider)


class TestToolMessageValidation:
    def test_tool_message_without_call_id_captured(self, client, provider):
        response = client.send_request(
            {"messages": [{"role": "user", "content": "q"}, {"role": "tool", "content": "r"}]}
        )
        assert not response.success
        assert response.error == "Tool messages must include tool_call_id"
        assert provider.requests == []

    def test_dataclass_request_checked_too(self, client, provider):
        request = ChatRequest(messages=[Message(role="user", content="q"), Message(role="tool", content="r")])
        response = client.send_request(request)
        assert not response.success
        assert "tool_call_id" in response.error
        assert provider.requests == []
