"""Tests for LLMClient provider abstraction."""

import logging
from types import SimpleNamespace
from unittest.mock import Mock

import pytest
from nominations.common.config import LLMConfig
from nominations.common.llm_client import LLMClient


def _openai_response(content):
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class TestLLMClientInit:
    def test_missing_openai_key_logs_info(self, caplog):
        with caplog.at_level(logging.INFO, logger="nominations.common.llm_client"):
            client = LLMClient(provider="openai")
        assert not client.is_available
        assert "API key not provided" in caplog.text

    def test_missing_anthropic_key_logs_info(self, caplog):
        with caplog.at_level(logging.INFO, logger="nominations.common.llm_client"):
            client = LLMClient(provider="anthropic")
        assert not client.is_available
        assert "API key not provided" in caplog.text

    def test_missing_google_key_logs_info(self, caplog):
        with caplog.at_level(logging.INFO, logger="nominations.common.llm_client"):
            client = LLMClient(provider="google")
        assert not client.is_available
        assert "API key not provided" in caplog.text

    def test_unsupported_provider_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="nominations.common.llm_client"):
            client = LLMClient(provider="unsupported_xyz")
        assert not client.is_available
        assert "Unsupported" in caplog.text

    def test_default_provider_is_openai(self):
        assert LLMClient().provider == "openai"

    def test_from_config_without_key_is_unavailable(self):
        client = LLMClient.from_config(LLMConfig())
        assert client.provider == "openai"
        assert client.model == "gpt-4o-mini"
        assert not client.is_available


class TestLLMClientGenerate:
    def test_generate_raises_when_unavailable(self):
        client = LLMClient(provider="openai")
        with pytest.raises(RuntimeError, match="not available"):
            client.generate("test")

    def test_openai_passes_system_tokens_and_temperature(self):
        client = LLMClient(provider="openai", model="gpt-4o-mini")
        client._client = Mock()
        client._client.chat.completions.create.return_value = _openai_response("  {\"a\": 1}  ")

        result = client.generate("user text", system="system text", max_tokens=800, temperature=0.7)

        assert result == '{"a": 1}'
        kwargs = client._client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["max_tokens"] == 800
        assert kwargs["temperature"] == 0.7
        assert kwargs["messages"] == [
            {"role": "system", "content": "system text"},
            {"role": "user", "content": "user text"},
        ]

    def test_openai_empty_content_returns_empty_string(self):
        client = LLMClient(provider="openai", model="gpt-4o-mini")
        client._client = Mock()
        client._client.chat.completions.create.return_value = _openai_response(None)

        assert client.generate("x") == ""

    def test_openai_omits_temperature_when_not_given(self):
        client = LLMClient(provider="openai", model="gpt-4o-mini")
        client._client = Mock()
        client._client.chat.completions.create.return_value = _openai_response("ok")

        client.generate("x")

        assert "temperature" not in client._client.chat.completions.create.call_args.kwargs
