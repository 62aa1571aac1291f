"""Abstract base class for LLM service providers.

Defines the contract for any language-model backend used to synthesize an
answer from retrieved context.  Implementations wrap the Hugging Face
Inference API, OpenAI chat completions or Anthropic messages.  Each
configured model is one candidate in the answer-synthesis chain.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations: HuggingFaceLLMProvider, OpenAILLMProvider, AnthropicLLMProvider
# Located in: yucabot/providers/llm/
class ILLMProvider(ABC):
    """Contract for LLM services used by the answer synthesizer."""

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.2,
        max_tokens: int = 200,
    ) -> str:
        """Generate a text completion from the model.

        Parameters
        ----------
        system_prompt:
            The instruction message that sets the model's behaviour.
        user_prompt:
            The prompt carrying the retrieved context and the question.
        temperature:
            Sampling temperature.
        max_tokens:
            Upper bound on the number of generated tokens.

        Returns
        -------
        str
            The model's non-empty text response.

        Raises
        ------
        yucabot.utils.errors.ProviderError
            If the call fails or the model returns no text.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"huggingface:zephyr-7b-beta"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider's credentials are configured."""
