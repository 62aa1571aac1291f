"""Answer synthesis over an ordered chain of LLM candidates.

Given the retrieved context and the user's question, tries each configured
candidate once, in order, and returns the first non-empty completion:

    Trying(0) --fail--> Trying(1) --fail--> ... --fail--> Extractive
        |                   |
        ok                  ok
        v                   v
    Answered(text)      Answered(text)

A candidate "fails" on any exception, including an empty completion.  When
every candidate fails the synthesizer still answers, extractively: a fixed
message followed by the start of the context.  :meth:`synthesize` never
raises, so a model outage degrades the answer instead of failing the query.
"""

from __future__ import annotations

import structlog

from yucabot.interfaces.llm_provider import ILLMProvider
from yucabot.utils.logging import get_logger

logger: structlog.BoundLogger = get_logger(__name__)

NOT_FOUND_SENTINEL = "NOT_FOUND"

FALLBACK_MESSAGE = "No grounded answer found in the documents."


class AnswerSynthesizer:
    """Produces a grounded answer from context using a fallback chain.

    Parameters
    ----------
    candidates:
        LLM providers in the order they should be tried.
    max_tokens:
        Completion length limit passed to every candidate.
    temperature:
        Sampling temperature passed to every candidate.
    extractive_fallback_chars:
        How much of the context the extractive answer quotes.
    """

    _SYSTEM_PROMPT = (
        "You are the front-desk assistant for a fitness and wellness studio. "
        "Answer the member's question using ONLY the information in the provided "
        "context. Do not use outside knowledge and do not guess. Keep the answer "
        "short and friendly, in the same language as the question. If the context "
        f"does not contain the answer, reply with exactly {NOT_FOUND_SENTINEL}."
    )

    def __init__(
        self,
        candidates: list[ILLMProvider],
        max_tokens: int = 200,
        temperature: float = 0.2,
        extractive_fallback_chars: int = 500,
    ) -> None:
        self._candidates = list(candidates)
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._extractive_fallback_chars = extractive_fallback_chars

    @property
    def candidate_names(self) -> list[str]:
        return [c.get_provider_name() for c in self._candidates]

    async def synthesize(self, context: str, question: str) -> str:
        """Return an answer to *question* grounded in *context*.

        Empty context returns :data:`FALLBACK_MESSAGE` without calling any
        model.  Never raises.
        """
        if not context or not context.strip():
            logger.info("answer_no_context", question=question[:80])
            return FALLBACK_MESSAGE

        user_prompt = self._build_user_prompt(context, question)
        for index, candidate in enumerate(self._candidates):
            name = candidate.get_provider_name()
            try:
                text = await candidate.complete(
                    system_prompt=self._SYSTEM_PROMPT,
                    user_prompt=user_prompt,
                    temperature=self._temperature,
                    max_tokens=self._max_tokens,
                )
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "answer_candidate_failed",
                    candidate=name,
                    position=index,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                continue

            if text and text.strip():
                logger.info("answer_generated", candidate=name, position=index)
                return text.strip()
            logger.warning("answer_candidate_empty", candidate=name, position=index)

        logger.warning("answer_extractive_fallback", candidates=len(self._candidates))
        return self._extractive_answer(context)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _build_user_prompt(context: str, question: str) -> str:
        return f"Context:\n{context}\n\nQuestion: {question}\n\nAnswer:"

    def _extractive_answer(self, context: str) -> str:
        excerpt = context[: self._extractive_fallback_chars].strip()
        if not excerpt:
            return FALLBACK_MESSAGE
        return f"{FALLBACK_MESSAGE} Most relevant excerpt:\n\n{excerpt}"
