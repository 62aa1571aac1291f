"""Hugging Face Inference API text-generation provider adapter.

Implements :class:`ILLMProvider` against the hosted text-generation pipeline
using ``httpx``.  One instance wraps one model, so the answer chain can hold
several Hugging Face candidates (Mistral, Zephyr) and fall through them in
order.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from yucabot.config.settings import Settings
from yucabot.interfaces.llm_provider import ILLMProvider
from yucabot.utils.errors import ProviderError

logger = structlog.get_logger(logger_name=__name__)

_ERROR_BODY_LIMIT = 300


def _build_prompt(system_prompt: str, user_prompt: str) -> str:
    """Render an instruction-tuned prompt in the ``[INST]`` format.

    Mistral and Zephyr instruct models both follow this layout closely
    enough for single-turn question answering.
    """
    return f"<s>[INST] {system_prompt}\n\n{user_prompt} [/INST]"


def _extract_generated_text(body: Any) -> str:
    """Pull ``generated_text`` out of either response layout.

    The API answers with ``[{"generated_text": ...}]`` for most models and
    with a bare ``{"generated_text": ...}`` object for some deployments.
    """
    if isinstance(body, list) and body and isinstance(body[0], dict):
        body = body[0]
    if isinstance(body, dict):
        text = body.get("generated_text")
        if isinstance(text, str):
            return text
    return ""


class HuggingFaceLLMProvider(ILLMProvider):
    """LLM provider backed by one Hugging Face text-generation model.

    Requests ``return_full_text: false``, but some endpoints ignore it and
    echo the prompt anyway; an echoed prompt prefix is stripped from the
    result.  Any failure, including an empty completion, raises
    :class:`ProviderError` so the synthesizer moves to the next candidate.
    """

    def __init__(
        self,
        settings: Settings,
        model: str,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = settings.huggingface_api_key
        self._model = model
        self._url = f"{settings.huggingface_api_base.rstrip('/')}/{model}"
        self._timeout = settings.generation_timeout_seconds
        self._client = http_client or httpx.AsyncClient(timeout=self._timeout)

    # ------------------------------------------------------------------
    # ILLMProvider implementation
    # ------------------------------------------------------------------

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.2,
        max_tokens: int = 200,
    ) -> str:
        """Generate a completion via the Inference API text-generation pipeline."""
        prompt = _build_prompt(system_prompt, user_prompt)
        payload = {
            "inputs": prompt,
            "parameters": {
                "max_new_tokens": max_tokens,
                "temperature": temperature,
                "return_full_text": False,
            },
            "options": {"wait_for_model": True},
        }
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        try:
            response = await self._client.post(
                self._url, json=payload, headers=headers, timeout=self._timeout
            )
        except httpx.HTTPError as exc:
            raise ProviderError(
                message=f"Hugging Face request failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if response.status_code >= 400:
            raise ProviderError(
                message=(
                    f"Hugging Face error {response.status_code}: "
                    f"{response.text[:_ERROR_BODY_LIMIT]}"
                ),
                provider_name=self.get_provider_name(),
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise ProviderError(
                message="Hugging Face returned a non-JSON completion",
                provider_name=self.get_provider_name(),
            ) from exc

        text = _extract_generated_text(body)
        if text.startswith(prompt):
            text = text[len(prompt):]
        text = text.strip()
        if not text:
            raise ProviderError(
                message=f"{self._model} returned empty response",
                provider_name=self.get_provider_name(),
            )
        logger.info("huggingface_completion", model=self._model, chars=len(text))
        return text

    def get_provider_name(self) -> str:
        return f"huggingface:{self._model}"

    def is_available(self) -> bool:
        """Return ``True`` if a Hugging Face API key is configured."""
        return bool(self._api_key)
