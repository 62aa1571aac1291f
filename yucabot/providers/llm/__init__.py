"""LLM provider adapters.

Three concrete implementations of ILLMProvider (yucabot/interfaces/llm_provider.py):
    - HuggingFaceLLMProvider -- one hosted text-generation model per instance
    - OpenAILLMProvider      -- gpt-4o-mini (also OpenAI-compatible APIs)
    - AnthropicLLMProvider   -- Claude via the messages API

At startup, main.py builds the ordered candidate list from
``generation.candidates`` in config.yaml, skipping providers without a key.
"""

from yucabot.providers.llm.anthropic_provider import AnthropicLLMProvider
from yucabot.providers.llm.huggingface_provider import HuggingFaceLLMProvider
from yucabot.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["AnthropicLLMProvider", "HuggingFaceLLMProvider", "OpenAILLMProvider"]
