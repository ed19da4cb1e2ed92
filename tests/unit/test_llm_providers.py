"""Unit tests for LLM provider adapters — OpenAI and Anthropic."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.config.settings import Settings
from src.utils.errors import ProviderError


# ======================================================================
# Shared helpers
# ======================================================================

def _settings(**overrides) -> Settings:
    defaults = {
        "openai_api_key": "sk-test",
        "openai_base_url": "",
        "openai_text_model": "",
        "anthropic_api_key": "test-anthropic",
        "anthropic_model": "",
    }
    defaults.update(overrides)
    return Settings(**defaults)


# ======================================================================
# OpenAI LLM Provider
# ======================================================================


class TestOpenAILLMProvider:
    @pytest.fixture()
    def settings(self) -> Settings:
        return _settings()

    def test_get_provider_name(self, settings: Settings) -> None:
        from src.providers.llm.openai_provider import OpenAILLMProvider
        provider = OpenAILLMProvider(settings)
        assert provider.get_provider_name() == "openai"

    def test_compatible_endpoint_label(self) -> None:
        from src.providers.llm.openai_provider import OpenAILLMProvider
        provider = OpenAILLMProvider(_settings(openai_base_url="https://api.together.xyz/v1"))
        assert provider.get_provider_name() == "openai-compatible"

    def test_is_available_with_key(self, settings: Settings) -> None:
        from src.providers.llm.openai_provider import OpenAILLMProvider
        provider = OpenAILLMProvider(settings)
        assert provider.is_available() is True

    def test_is_available_without_key(self) -> None:
        from src.providers.llm.openai_provider import OpenAILLMProvider
        with patch("src.providers.llm.openai_provider.openai.AsyncOpenAI") as client_cls:
            provider = OpenAILLMProvider(_settings(openai_api_key=""))
        assert provider.is_available() is False
        client_cls.assert_not_called()

    @pytest.mark.asyncio
    async def test_complete_without_key_raises(self) -> None:
        from src.providers.llm.openai_provider import OpenAILLMProvider
        provider = OpenAILLMProvider(_settings(openai_api_key=""))
        with pytest.raises(ProviderError, match="API key not configured"):
            await provider.complete("system", "user")

    @pytest.mark.asyncio
    async def test_complete_success(self, settings: Settings) -> None:
        from src.providers.llm.openai_provider import OpenAILLMProvider

        mock_response = MagicMock()
        mock_response.choices = [MagicMock(message=MagicMock(content="LLM response text"))]
        mock_response.usage = MagicMock(total_tokens=100)

        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=mock_response)

        with patch("src.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(settings)
            result = await provider.complete("system prompt", "user prompt", temperature=0.9, max_tokens=50)

        assert result == "LLM response text"
        kwargs = mock_client.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["temperature"] == 0.9
        assert kwargs["messages"][0] == {"role": "system", "content": "system prompt"}

    @pytest.mark.asyncio
    async def test_complete_error(self, settings: Settings) -> None:
        from src.providers.llm.openai_provider import OpenAILLMProvider
        import openai

        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(
            side_effect=openai.APIError(
                message="Rate limit exceeded",
                request=MagicMock(),
                body=None,
            )
        )

        with patch("src.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(settings)
            with pytest.raises(ProviderError, match="Rate limit exceeded"):
                await provider.complete("system", "user")

    @pytest.mark.asyncio
    async def test_complete_empty_content(self, settings: Settings) -> None:
        from src.providers.llm.openai_provider import OpenAILLMProvider

        mock_response = MagicMock()
        mock_response.choices = [MagicMock(message=MagicMock(content=""))]

        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=mock_response)

        with patch("src.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(settings)
            with pytest.raises(ProviderError, match="empty response"):
                await provider.complete("system", "user")


# ======================================================================
# Anthropic LLM Provider
# ======================================================================


class TestAnthropicLLMProvider:
    @pytest.fixture()
    def settings(self) -> Settings:
        return _settings()

    def test_get_provider_name(self, settings: Settings) -> None:
        from src.providers.llm.anthropic_provider import AnthropicLLMProvider
        provider = AnthropicLLMProvider(settings)
        assert provider.get_provider_name() == "anthropic"

    def test_is_available_with_key(self, settings: Settings) -> None:
        from src.providers.llm.anthropic_provider import AnthropicLLMProvider
        provider = AnthropicLLMProvider(settings)
        assert provider.is_available() is True

    def test_is_available_without_key(self) -> None:
        from src.providers.llm.anthropic_provider import AnthropicLLMProvider
        provider = AnthropicLLMProvider(_settings(anthropic_api_key=""))
        assert provider.is_available() is False

    @pytest.mark.asyncio
    async def test_complete_joins_text_blocks(self, settings: Settings) -> None:
        from src.providers.llm.anthropic_provider import AnthropicLLMProvider

        text_block = MagicMock()
        text_block.type = "text"
        text_block.text = "Anthropic response"
        tool_block = MagicMock()
        tool_block.type = "tool_use"

        mock_response = MagicMock()
        mock_response.content = [text_block, tool_block]
        mock_response.usage = MagicMock(input_tokens=50, output_tokens=50)

        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=mock_response)

        with patch("src.providers.llm.anthropic_provider.anthropic.AsyncAnthropic", return_value=mock_client):
            provider = AnthropicLLMProvider(settings)
            result = await provider.complete("system", "user")

        assert result == "Anthropic response"
        assert mock_client.messages.create.await_args.kwargs["system"] == "system"

    @pytest.mark.asyncio
    async def test_no_text_blocks(self, settings: Settings) -> None:
        from src.providers.llm.anthropic_provider import AnthropicLLMProvider

        mock_response = MagicMock()
        mock_response.content = []
        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=mock_response)

        with patch("src.providers.llm.anthropic_provider.anthropic.AsyncAnthropic", return_value=mock_client):
            provider = AnthropicLLMProvider(settings)
            with pytest.raises(ProviderError):
                await provider.complete("system", "user")


# ======================================================================
# DuckDuckGo search provider
# ======================================================================


class TestDuckDuckGoSearchProvider:
    @pytest.mark.asyncio
    async def test_maps_results(self) -> None:
        from src.providers.search.duckduckgo_provider import DuckDuckGoSearchProvider

        raw = [{"title": "Jane Lift", "href": "https://instagram.com/janelift", "body": "48K followers"}]
        with patch.object(DuckDuckGoSearchProvider, "_sync_search", return_value=raw):
            results = await DuckDuckGoSearchProvider().search("yoga", 5)

        assert len(results) == 1
        assert results[0].url == "https://instagram.com/janelift"
        assert results[0].snippet == "48K followers"

    @pytest.mark.asyncio
    async def test_rate_limit_becomes_provider_error(self) -> None:
        from duckduckgo_search.exceptions import DuckDuckGoSearchException

        from src.providers.search.duckduckgo_provider import DuckDuckGoSearchProvider

        with patch.object(
            DuckDuckGoSearchProvider,
            "_sync_search",
            side_effect=DuckDuckGoSearchException("202 Ratelimit"),
        ):
            with pytest.raises(ProviderError, match="DuckDuckGo search failed"):
                await DuckDuckGoSearchProvider().search("yoga")
