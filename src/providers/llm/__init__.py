"""LLM provider adapters.

Concrete implementations of ILLMProvider (src/interfaces/llm_provider.py):
    - OpenAILLMProvider    -- gpt-4o-mini, or any OpenAI-compatible endpoint
    - AnthropicLLMProvider -- Claude via the Messages API

src/main.py builds the first provider whose API key is configured.
"""

from src.providers.llm.anthropic_provider import AnthropicLLMProvider
from src.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["AnthropicLLMProvider", "OpenAILLMProvider"]
