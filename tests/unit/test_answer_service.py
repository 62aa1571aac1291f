"""Unit tests for the AnswerSynthesizer fallback chain."""

from __future__ import annotations

import pytest

from yucabot.services.answer_service import (
    FALLBACK_MESSAGE,
    NOT_FOUND_SENTINEL,
    AnswerSynthesizer,
)
from yucabot.utils.errors import ProviderError


class TestAnswerSynthesizer:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("context", ["", "   ", "\n"])
    async def test_empty_context_short_circuits(self, context: str, llm_factory) -> None:
        candidate = llm_factory("a", answer="should not be used")
        synthesizer = AnswerSynthesizer([candidate])

        assert await synthesizer.synthesize(context, "When do you open?") == FALLBACK_MESSAGE
        assert candidate.calls == []

    @pytest.mark.asyncio
    async def test_first_success_wins(self, llm_factory) -> None:
        first = llm_factory("a", answer="First answer.")
        second = llm_factory("b", answer="Second answer.")
        synthesizer = AnswerSynthesizer([first, second])

        assert await synthesizer.synthesize("ctx", "q") == "First answer."
        assert second.calls == []

    @pytest.mark.asyncio
    async def test_failing_candidate_falls_through(self, llm_factory) -> None:
        first = llm_factory("a", error=ProviderError("HTTP 503"))
        second = llm_factory("b", answer="The studio opens at 7am.")
        synthesizer = AnswerSynthesizer([first, second])

        answer = await synthesizer.synthesize("Opening hours: 7am.", "When do you open?")

        assert answer == "The studio opens at 7am."
        assert len(first.calls) == 1
        assert len(second.calls) == 1

    @pytest.mark.asyncio
    async def test_unexpected_exception_also_falls_through(self, llm_factory) -> None:
        first = llm_factory("a", error=RuntimeError("boom"))
        second = llm_factory("b", answer="ok")
        assert await AnswerSynthesizer([first, second]).synthesize("ctx", "q") == "ok"

    @pytest.mark.asyncio
    async def test_empty_completion_falls_through(self, llm_factory) -> None:
        first = llm_factory("a", answer="   ")
        second = llm_factory("b", answer="real")
        assert await AnswerSynthesizer([first, second]).synthesize("ctx", "q") == "real"

    @pytest.mark.asyncio
    async def test_each_candidate_called_once(self, llm_factory) -> None:
        candidates = [llm_factory(str(i), error=ProviderError("x")) for i in range(3)]
        await AnswerSynthesizer(candidates).synthesize("ctx", "q")
        assert [len(c.calls) for c in candidates] == [1, 1, 1]

    @pytest.mark.asyncio
    async def test_all_failed_returns_extractive_answer(self, llm_factory) -> None:
        context = "A" * 600
        synthesizer = AnswerSynthesizer(
            [llm_factory("a", error=ProviderError("x"))], extractive_fallback_chars=500
        )

        answer = await synthesizer.synthesize(context, "q")

        assert answer.startswith(FALLBACK_MESSAGE)
        assert answer.endswith("A" * 500)
        assert "A" * 501 not in answer

    @pytest.mark.asyncio
    async def test_no_candidates_returns_extractive_answer(self) -> None:
        answer = await AnswerSynthesizer([]).synthesize("Pilates on Monday.", "q")
        assert answer.startswith(FALLBACK_MESSAGE)
        assert "Pilates on Monday." in answer

    @pytest.mark.asyncio
    async def test_prompt_carries_context_question_and_sentinel(self, llm_factory) -> None:
        candidate = llm_factory("a", answer="ok")
        await AnswerSynthesizer([candidate]).synthesize("CTX-123", "QUESTION-456")

        system_prompt, user_prompt = candidate.calls[0]
        assert NOT_FOUND_SENTINEL in system_prompt
        assert "ONLY" in system_prompt
        assert "CTX-123" in user_prompt
        assert "QUESTION-456" in user_prompt

    def test_candidate_names(self, llm_factory) -> None:
        synthesizer = AnswerSynthesizer([llm_factory("x"), llm_factory("y")])
        assert synthesizer.candidate_names == ["x", "y"]
