"""Provider adapters against mocked SDK clients and HTTP."""

from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest
import requests

from llm import TransportError, UnsupportedProviderError
from llm.anthropic_adapter import AnthropicAdapter
from llm.factory import SUPPORTED_PROVIDERS, create_provider, get_provider_class, wire_format_for
from llm.gemini_adapter import GeminiAdapter
from llm.grok_adapter import GrokAdapter
from llm.openai_adapter import OpenAIAdapter
from llm.openrouter_adapter import OpenRouterAdapter

SETTINGS = {"api_key": "sk-test", "model": "test-model", "base_url": "https://api.example.test/v1", "timeout": 5}


def _sdk_object(payload):
    obj = MagicMock()
    obj.model_dump.return_value = payload
    return obj


class TestFactory:
    def test_closed_set(self):
        assert SUPPORTED_PROVIDERS == ("openai", "anthropic", "gemini", "grok", "openrouter")

    def test_lookup_is_case_insensitive(self):
        assert get_provider_class(" Gemini ") is GeminiAdapter

    def test_unknown_provider(self):
        with pytest.raises(UnsupportedProviderError, match="'cohere'"):
            get_provider_class("cohere")

    @pytest.mark.parametrize(
        "name, wire_format",
        [("openai", "openai"), ("grok", "openai"), ("openrouter", "openai"), ("anthropic", "anthropic"), ("gemini", "gemini")],
    )
    def test_wire_formats(self, name, wire_format):
        assert wire_format_for(name) == wire_format

    def test_create_provider(self):
        adapter = create_provider("gemini", SETTINGS)
        assert isinstance(adapter, GeminiAdapter)
        assert adapter.default_model == "test-model"


class TestOpenAIAdapter:
    @pytest.fixture
    def sdk(self):
        with patch("llm.openai_adapter.OpenAI") as cls:
            yield cls

    def test_request_returns_dumped_response(self, sdk):
        sdk.return_value.chat.completions.create.return_value = _sdk_object({"id": "x", "choices": []})
        adapter = OpenAIAdapter(SETTINGS)

        assert adapter.send_raw_request({"model": "m", "messages": []}) == {"id": "x", "choices": []}
        sdk.return_value.chat.completions.create.assert_called_once_with(model="m", messages=[])
        kwargs = sdk.call_args.kwargs
        assert kwargs["api_key"] == "sk-test"
        assert kwargs["base_url"] == "https://api.example.test/v1"
        assert kwargs["timeout"] == 5
        assert kwargs["max_retries"] == 0

    def test_streaming_dumps_each_chunk(self, sdk):
        sdk.return_value.chat.completions.create.return_value = iter([_sdk_object({"n": 1}), _sdk_object({"n": 2})])
        seen = []
        OpenAIAdapter(SETTINGS).send_raw_streaming_request({"stream": True}, seen.append)
        assert seen == [{"n": 1}, {"n": 2}]

    def test_status_error_becomes_transport_error(self, sdk):
        request = httpx.Request("POST", "https://api.example.test/v1/chat/completions")
        response = httpx.Response(429, request=request)
        sdk.return_value.chat.completions.create.side_effect = openai.APIStatusError(
            "rate limited", response=response, body=None
        )
        with pytest.raises(TransportError) as excinfo:
            OpenAIAdapter(SETTINGS).send_raw_request({})
        assert excinfo.value.status_code == 429
        assert "OpenAI API error 429" in str(excinfo.value)

    def test_timeout_becomes_transport_error(self, sdk):
        request = httpx.Request("POST", "https://api.example.test/v1/chat/completions")
        sdk.return_value.chat.completions.create.side_effect = openai.APITimeoutError(request=request)
        with pytest.raises(TransportError, match="timed out"):
            OpenAIAdapter(SETTINGS).send_raw_request({})

    def test_models(self, sdk):
        sdk.return_value.models.list.return_value = [MagicMock(id="gpt-4o"), MagicMock(id="gpt-4o-mini")]
        assert OpenAIAdapter(SETTINGS).get_raw_models() == ["gpt-4o", "gpt-4o-mini"]


class TestCompatibleAdapters:
    def test_grok_delegates(self):
        with patch("llm.openai_adapter.OpenAI") as sdk:
            sdk.return_value.chat.completions.create.return_value = _sdk_object({"id": "g"})
            adapter = GrokAdapter(SETTINGS)
            assert adapter.send_raw_request({}) == {"id": "g"}
        assert adapter.name == "grok"

    def test_openrouter_attribution_headers(self):
        settings = dict(SETTINGS, site_url="https://forum.example", app_name="Forum Bot")
        with patch("llm.openai_adapter.OpenAI") as sdk:
            OpenRouterAdapter(settings)
        assert sdk.call_args.kwargs["default_headers"] == {
            "HTTP-Referer": "https://forum.example",
            "X-Title": "Forum Bot",
        }

    def test_openrouter_without_attribution(self):
        with patch("llm.openai_adapter.OpenAI") as sdk:
            OpenRouterAdapter(SETTINGS)
        assert sdk.call_args.kwargs["default_headers"] is None


class TestAnthropicAdapter:
    def test_request(self):
        with patch("llm.anthropic_adapter.anthropic.Anthropic") as sdk:
            sdk.return_value.messages.create.return_value = _sdk_object({"content": []})
            adapter = AnthropicAdapter(SETTINGS)
            assert adapter.send_raw_request({"model": "claude", "max_tokens": 10}) == {"content": []}
        sdk.return_value.messages.create.assert_called_once_with(model="claude", max_tokens=10)
        assert sdk.call_args.kwargs["max_retries"] == 0

    def test_streaming_events(self):
        with patch("llm.anthropic_adapter.anthropic.Anthropic") as sdk:
            sdk.return_value.messages.create.return_value = iter([_sdk_object({"type": "message_start"})])
            seen = []
            AnthropicAdapter(SETTINGS).send_raw_streaming_request({"stream": True}, seen.append)
        assert seen == [{"type": "message_start"}]


class TestGeminiAdapter:
    @pytest.fixture
    def http(self):
        with patch("llm.gemini_adapter.requests.request") as request:
            yield request

    def _response(self, status=200, payload=None, lines=None):
        resp = MagicMock()
        resp.status_code = status
        resp.json.return_value = payload or {}
        resp.text = "error text"
        resp.iter_lines.return_value = lines or []
        return resp

    def test_generate_content(self, http):
        http.return_value = self._response(payload={"candidates": []})
        adapter = GeminiAdapter(dict(SETTINGS, base_url="https://gemini.example/v1beta/"))

        raw = adapter.send_raw_request({"model": "gemini-2.0-flash", "contents": []})

        assert raw == {"candidates": []}
        args, kwargs = http.call_args
        assert args == ("POST", "https://gemini.example/v1beta/models/gemini-2.0-flash:generateContent")
        assert kwargs["json"] == {"contents": []}
        assert kwargs["headers"]["x-goog-api-key"] == "sk-test"
        assert kwargs["timeout"] == 5

    def test_stream_uses_sse(self, http):
        http.return_value = self._response(lines=["data: {}", "", "data: {}"])
        seen = []
        GeminiAdapter(SETTINGS).send_raw_streaming_request({"contents": [], "alt": "sse"}, seen.append)

        args, kwargs = http.call_args
        assert args[1].endswith("/models/test-model:streamGenerateContent")
        assert kwargs["params"] == {"alt": "sse"}
        assert kwargs["stream"] is True
        assert seen == ["data: {}", "data: {}"]

    def test_non_200_status(self, http):
        http.return_value = self._response(status=403, payload={"error": {"message": "API key invalid"}})
        with pytest.raises(TransportError) as excinfo:
            GeminiAdapter(SETTINGS).send_raw_request({"contents": []})
        assert excinfo.value.status_code == 403
        assert "API key invalid" in str(excinfo.value)

    def test_timeout(self, http):
        http.side_effect = requests.Timeout()
        with pytest.raises(TransportError, match="timed out"):
            GeminiAdapter(SETTINGS).send_raw_request({"contents": []})

    def test_models_strip_prefix(self, http):
        http.return_value = self._response(
            payload={"models": [{"name": "models/gemini-2.0-flash"}, {"name": "models/gemini-1.5-pro"}]}
        )
        assert GeminiAdapter(SETTINGS).get_raw_models() == ["gemini-2.0-flash", "gemini-1.5-pro"]
