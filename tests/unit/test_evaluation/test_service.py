"""
Tests for Evaluation Service
"""

import asyncio

import pytest
from unittest.mock import AsyncMock, Mock

from speakeval.core.exceptions import (
    EvaluationError,
    InvalidArgument,
    ModelAPIError,
    RateLimitError,
    ValidationError,
)
from speakeval.evaluation.fallback import FallbackEvaluator
from speakeval.evaluation.service import EvaluationService
from speakeval.models.base import AIEvaluator
from speakeval.models.openai_client import OpenAIEvaluator
from speakeval.models.schemas import (
    PronunciationEvaluation,
    PronunciationRequest,
    StoryEvaluation,
    StoryRequest,
)


def _ai_pronunciation(final_score=92):
    return PronunciationEvaluation(
        accuracy=final_score, final_score=final_score, feedback="Excellent vowels.",
        grade="A", feedback_tier="high", score_breakdown={}, source="ai"
    )


def _ai_story(final_score=88):
    return StoryEvaluation(
        overall_score=final_score, final_score=final_score, feedback="Lovely story.", grade="B",
        word_count=35, keywords_used=["forest"], score_breakdown={}, source="ai"
    )


def _mock_ai(available=True):
    ai = Mock(spec=AIEvaluator)
    ai.is_available.return_value = available
    ai.evaluate_pronunciation = AsyncMock(return_value=_ai_pronunciation())
    ai.evaluate_story = AsyncMock(return_value=_ai_story())
    ai.close = AsyncMock()
    return ai


class TestPronunciationOrchestration:
    """Test cases for AI-first pronunciation evaluation with fallback."""

    def setup_method(self):
        self.ai = _mock_ai()

    def _service(self, config, ai=None):
        return EvaluationService(ai_evaluator=ai, config=config)

    @pytest.mark.asyncio
    async def test_ai_result_returned(self, test_config):
        service = self._service(test_config, self.ai)

        evaluation = await service.evaluate_pronunciation("hello", "helo")

        assert evaluation.source == "ai"
        assert evaluation.final_score == 92
        request = self.ai.evaluate_pronunciation.call_args[0][0]
        assert request == PronunciationRequest(target_word="hello", transcription="helo", difficulty="medium")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        ModelAPIError("API request failed with status 500", status_code=500),
        RateLimitError("Rate limit exceeded", retry_after=60, status_code=429),
        EvaluationError("Invalid accuracy score from AI"),
        asyncio.TimeoutError(),
    ])
    async def test_ai_failure_falls_back(self, test_config, error):
        self.ai.evaluate_pronunciation.side_effect = error
        service = self._service(test_config, self.ai)

        evaluation = await service.evaluate_pronunciation("cat", "bat")

        assert evaluation.source == "fallback"
        assert evaluation.accuracy == 67
        assert evaluation.grade == "D"

    @pytest.mark.asyncio
    async def test_slow_ai_falls_back_at_deadline(self, test_config):
        test_config.evaluation.ai_deadline = 0.05
        never_set = asyncio.Event()

        async def stalled(request):
            await never_set.wait()

        self.ai.evaluate_pronunciation = AsyncMock(side_effect=stalled)
        service = self._service(test_config, self.ai)

        evaluation = await asyncio.wait_for(service.evaluate_pronunciation("cat", "bat"), timeout=5)

        assert evaluation.source == "fallback"
        assert evaluation.accuracy == 67
        assert service.get_statistics()['pronunciation']['fallback_count'] == 1

    @pytest.mark.asyncio
    async def test_unexpected_errors_propagate(self, test_config):
        self.ai.evaluate_pronunciation.side_effect = RuntimeError("bug")
        service = self._service(test_config, self.ai)

        with pytest.raises(RuntimeError):
            await service.evaluate_pronunciation("cat", "bat")

    @pytest.mark.asyncio
    async def test_no_ai_uses_fallback(self, test_config):
        service = self._service(test_config)

        evaluation = await service.evaluate_pronunciation("hello", "hello")

        assert not service.ai_enabled
        assert evaluation.source == "fallback"
        assert evaluation.final_score == 100

    @pytest.mark.asyncio
    async def test_unavailable_ai_is_skipped(self, test_config):
        ai = _mock_ai(available=False)
        service = self._service(test_config, ai)

        evaluation = await service.evaluate_pronunciation("hello", "helo")

        assert evaluation.source == "fallback"
        ai.evaluate_pronunciation.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_transcription_allowed(self, test_config):
        service = self._service(test_config)

        evaluation = await service.evaluate_pronunciation("hello", "")

        assert evaluation.accuracy == 0
        assert evaluation.grade == "F"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("target,transcription", [(None, "x"), ("x", None), (5, "x")])
    async def test_non_string_inputs_rejected(self, test_config, target, transcription):
        service = self._service(test_config, self.ai)

        with pytest.raises(InvalidArgument):
            await service.evaluate_pronunciation(target, transcription)

        self.ai.evaluate_pronunciation.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_blank_target_rejected(self, test_config):
        service = self._service(test_config, self.ai)

        with pytest.raises(ValidationError, match="Target word is required") as exc_info:
            await service.evaluate_pronunciation("   ", "hello")

        assert exc_info.value.field_name == "target_word"

    @pytest.mark.asyncio
    async def test_invalid_difficulty_rejected(self, test_config):
        service = self._service(test_config, self.ai)

        with pytest.raises(ValidationError, match="Invalid difficulty level"):
            await service.evaluate_pronunciation("hello", "hello", difficulty="extreme")

    @pytest.mark.asyncio
    async def test_long_inputs_truncated(self, test_config):
        test_config.evaluation.max_input_length = 5
        service = self._service(test_config, self.ai)

        await service.evaluate_pronunciation("abcdefgh", "abcdefghij")

        request = self.ai.evaluate_pronunciation.call_args[0][0]
        assert request.target_word == "abcde"
        assert request.transcription == "abcde"

    @pytest.mark.asyncio
    async def test_batch_keeps_order(self, test_config):
        service = self._service(test_config)
        requests = [
            PronunciationRequest(target_word="hello", transcription="hello"),
            PronunciationRequest(target_word="cat", transcription="bat"),
            PronunciationRequest(target_word="hello", transcription=""),
        ]

        results = await service.evaluate_pronunciation_batch(requests)

        assert [r.accuracy for r in results] == [100, 67, 0]

    @pytest.mark.asyncio
    async def test_batch_mixes_ai_and_fallback(self, test_config):
        self.ai.evaluate_pronunciation.side_effect = [
            _ai_pronunciation(90),
            ModelAPIError("down"),
        ]
        test_config.evaluation.max_concurrent_requests = 1
        service = self._service(test_config, self.ai)

        results = await service.evaluate_pronunciation_batch([
            PronunciationRequest(target_word="hello", transcription="hello"),
            PronunciationRequest(target_word="cat", transcription="bat"),
        ])

        assert [r.source for r in results] == ["ai", "fallback"]
        assert service.get_statistics()['pronunciation']['fallback_count'] == 1


class TestStoryOrchestration:
    """Test cases for story evaluation and validation."""

    def setup_method(self):
        self.ai = _mock_ai()

    @pytest.mark.asyncio
    async def test_ai_result_returned(self, test_config, story_request):
        service = EvaluationService(ai_evaluator=self.ai, config=test_config)

        evaluation = await service.evaluate_story(story_request)

        assert evaluation.source == "ai"
        self.ai.evaluate_story.assert_awaited_once_with(story_request)

    @pytest.mark.asyncio
    async def test_ai_failure_falls_back(self, test_config, story_request):
        self.ai.evaluate_story.side_effect = EvaluationError("No valid JSON found in response")
        service = EvaluationService(ai_evaluator=self.ai, config=test_config)

        evaluation = await service.evaluate_story(story_request)

        assert evaluation.source == "fallback"
        assert evaluation.final_score == 90

    @pytest.mark.asyncio
    async def test_slow_ai_falls_back_at_deadline(self, test_config, story_request):
        test_config.evaluation.ai_deadline = 0.05
        never_set = asyncio.Event()

        async def stalled(request):
            await never_set.wait()

        self.ai.evaluate_story = AsyncMock(side_effect=stalled)
        service = EvaluationService(ai_evaluator=self.ai, config=test_config)

        evaluation = await asyncio.wait_for(service.evaluate_story(story_request), timeout=5)

        assert evaluation.source == "fallback"
        assert evaluation.final_score == 90

    @pytest.mark.asyncio
    @pytest.mark.parametrize("overrides,error,field", [
        ({'story': "Too short"}, ValidationError, "story"),
        ({'story': "   padded   "}, ValidationError, "story"),
        ({'prompt': "  "}, ValidationError, "prompt"),
        ({'difficulty': "expert"}, ValidationError, "difficulty"),
        ({'min_words': 0}, ValidationError, "min_words"),
        ({'time_spent': -1}, ValidationError, "time_spent"),
        ({'max_time': 0}, ValidationError, "max_time"),
        ({'min_words': True}, ValidationError, "min_words"),
        ({'story': None}, InvalidArgument, "story"),
        ({'keywords': "forest"}, InvalidArgument, "keywords"),
        ({'keywords': ["forest", 3]}, InvalidArgument, "keywords"),
    ])
    async def test_validation(self, test_config, overrides, error, field):
        fields = dict(story="Once upon a time there was a dragon.", prompt="Dragons",
                      keywords=["dragon"], min_words=5)
        fields.update(overrides)
        service = EvaluationService(ai_evaluator=self.ai, config=test_config)

        with pytest.raises(error) as exc_info:
            await service.evaluate_story(StoryRequest(**fields))

        assert exc_info.value.field_name == field
        self.ai.evaluate_story.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_keywords_may_be_tuple(self, test_config):
        service = EvaluationService(config=test_config)
        request = StoryRequest(story="Once upon a time there was a dragon.", prompt="Dragons",
                               keywords=("dragon",), min_words=5)

        evaluation = await service.evaluate_story(request)

        assert evaluation.keywords_used == ["dragon"]


class TestStatistics:
    """Test cases for evaluation statistics."""

    @pytest.mark.asyncio
    async def test_statistics(self, test_config):
        test_config.evaluation.recent_scores_size = 2
        service = EvaluationService(config=test_config)

        for target, transcription in [("hello", "hello"), ("cat", "bat"), ("hello", "")]:
            await service.evaluate_pronunciation(target, transcription)

        stats = service.get_statistics()

        assert stats['pronunciation']['total_evaluations'] == 3
        assert stats['pronunciation']['average_score'] == pytest.approx(167 / 3)
        assert stats['pronunciation']['fallback_count'] == 3
        assert stats['pronunciation']['fallback_rate'] == 1.0
        assert stats['pronunciation']['recent_scores'] == [67, 0]
        assert stats['storytelling']['total_evaluations'] == 0
        assert stats['storytelling']['average_score'] == 0.0

    @pytest.mark.asyncio
    async def test_reset_statistics(self, test_config):
        service = EvaluationService(config=test_config)
        await service.evaluate_pronunciation("hello", "helo")

        service.reset_statistics()

        assert service.get_statistics()['pronunciation']['total_evaluations'] == 0

    @pytest.mark.asyncio
    async def test_failed_validation_not_recorded(self, test_config):
        service = EvaluationService(config=test_config)

        with pytest.raises(ValidationError):
            await service.evaluate_pronunciation("", "x")

        assert service.get_statistics()['pronunciation']['total_evaluations'] == 0


class TestServiceConstruction:
    """Test cases for building the service from configuration."""

    def test_offline(self, ai_config):
        service = EvaluationService.from_config(ai_config, offline=True)

        assert service.ai_evaluator is None
        assert isinstance(service.fallback_evaluator, FallbackEvaluator)

    def test_use_ai_disabled(self, ai_config):
        ai_config.llm.use_ai = False

        assert EvaluationService.from_config(ai_config).ai_evaluator is None

    def test_missing_api_key_degrades_to_fallback(self, test_config):
        test_config.llm.use_ai = True

        service = EvaluationService.from_config(test_config)

        assert service.ai_evaluator is None
        assert not service.ai_enabled

    def test_with_api_key(self, ai_config):
        service = EvaluationService.from_config(ai_config)

        assert isinstance(service.ai_evaluator, OpenAIEvaluator)
        assert service.ai_evaluator.api_key == "test-key"
        assert service.ai_enabled

    @pytest.mark.asyncio
    async def test_context_manager_closes_ai(self, test_config):
        ai = _mock_ai()

        async with EvaluationService(ai_evaluator=ai, config=test_config):
            pass

        ai.close.assert_awaited_once()
