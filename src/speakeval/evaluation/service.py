"""
Evaluation Service

Orchestrates learner evaluations: validates the request, asks the language
model evaluator first and falls back to deterministic scoring whenever the
model call fails, so a learner always receives a score.
"""

import asyncio
from collections import deque
from typing import Any, Deque, Dict, List, Optional

from ..core.config import AppConfig, get_config
from ..core.exceptions import (
    EvaluationError,
    InvalidArgument,
    ModelAPIError,
    ValidationError,
)
from ..models.base import AIEvaluator
from ..models.openai_client import OpenAIEvaluator
from ..models.schemas import (
    Difficulty,
    EvaluationSource,
    PronunciationEvaluation,
    PronunciationRequest,
    StoryEvaluation,
    StoryRequest,
)
from ..utils.async_helpers import gather_bounded
from ..utils.logging import get_logger, get_evaluation_logger
from .fallback import FallbackEvaluator

logger = get_logger(__name__)

PRONUNCIATION = "pronunciation"
STORYTELLING = "storytelling"

VALID_DIFFICULTIES = {d.value for d in Difficulty}

# Failures of the model path that trigger the deterministic fallback
FALLBACK_ERRORS = (ModelAPIError, EvaluationError, asyncio.TimeoutError)


class EvaluationService:
    """Runs pronunciation and story evaluations with an AI-first, fallback-second policy."""

    def __init__(self,
                 ai_evaluator: Optional[AIEvaluator] = None,
                 fallback_evaluator: Optional[FallbackEvaluator] = None,
                 config: Optional[AppConfig] = None):
        """
        Initialize the evaluation service.

        Args:
            ai_evaluator: LLM evaluator; None means every request is scored by the fallback
            fallback_evaluator: Deterministic evaluator
            config: Application configuration (global config if None)
        """
        self.config = config or get_config()
        self.ai_evaluator = ai_evaluator
        self.fallback_evaluator = fallback_evaluator or FallbackEvaluator()
        self.reset_statistics()

    @classmethod
    def from_config(cls, config: Optional[AppConfig] = None, offline: bool = False) -> "EvaluationService":
        """
        Build a service from configuration.

        The AI evaluator is skipped when ``offline`` is set, when
        ``llm.use_ai`` is false, or when no API key is configured.
        """
        config = config or get_config()
        ai_evaluator = None

        if not offline and config.llm.use_ai:
            try:
                ai_evaluator = OpenAIEvaluator(api_key=config.llm.api_key, app_config=config)
            except ModelAPIError as e:
                logger.warning(f"AI evaluator unavailable, using fallback scoring only: {e.message}")

        return cls(ai_evaluator=ai_evaluator, config=config)

    @property
    def ai_enabled(self) -> bool:
        return self.ai_evaluator is not None and self.ai_evaluator.is_available()

    async def evaluate_pronunciation(self, target_word: str, transcription: str,
                                     difficulty: str = Difficulty.MEDIUM.value) -> PronunciationEvaluation:
        """
        Evaluate a pronunciation attempt.

        Args:
            target_word: Word the learner was asked to say
            transcription: Speech-to-text output of the attempt (may be empty)
            difficulty: easy, medium or hard

        Returns:
            PronunciationEvaluation from the model, or from the fallback scorer

        Raises:
            InvalidArgument: If an input is not a string
            ValidationError: If the target word is blank or the difficulty is unknown
        """
        request = PronunciationRequest(
            target_word=target_word,
            transcription=transcription,
            difficulty=difficulty
        )
        return await self.evaluate_pronunciation_request(request)

    async def evaluate_pronunciation_request(self, request: PronunciationRequest) -> PronunciationEvaluation:
        request = self._prepare_pronunciation(request)
        eval_logger = get_evaluation_logger(PRONUNCIATION, request.target_word)

        evaluation = None
        if self.ai_enabled:
            try:
                evaluation = await self._within_deadline(self.ai_evaluator.evaluate_pronunciation(request))
            except FALLBACK_ERRORS as e:
                eval_logger.warning(f"AI pronunciation evaluation failed, using fallback: {str(e)}")

        if evaluation is None:
            evaluation = self.fallback_evaluator.evaluate_pronunciation(request)

        eval_logger.info(f"Pronunciation scored {evaluation.final_score} "
                         f"(grade {evaluation.grade}, source {evaluation.source})",
                         extra={'source': evaluation.source})
        self._record(PRONUNCIATION, evaluation.final_score, evaluation.source)
        return evaluation

    async def evaluate_story(self, request: StoryRequest) -> StoryEvaluation:
        """
        Evaluate a story.

        Raises:
            InvalidArgument: If the story, prompt or a keyword is not a string
            ValidationError: If a field is out of range
        """
        self._validate_story(request)
        eval_logger = get_evaluation_logger(STORYTELLING)

        evaluation = None
        if self.ai_enabled:
            try:
                evaluation = await self._within_deadline(self.ai_evaluator.evaluate_story(request))
            except FALLBACK_ERRORS as e:
                eval_logger.warning(f"AI story evaluation failed, using fallback: {str(e)}")

        if evaluation is None:
            evaluation = self.fallback_evaluator.evaluate_story(request)

        eval_logger.info(f"Story scored {evaluation.final_score} "
                         f"(grade {evaluation.grade}, source {evaluation.source})",
                         extra={'source': evaluation.source})
        self._record(STORYTELLING, evaluation.final_score, evaluation.source)
        return evaluation

    async def evaluate_pronunciation_batch(self, requests: List[PronunciationRequest]) -> List[PronunciationEvaluation]:
        """Evaluate many attempts concurrently; results keep the input order."""
        logger.info(f"Evaluating batch of {len(requests)} pronunciation attempts")

        results = await gather_bounded(
            requests,
            self.evaluate_pronunciation_request,
            max_concurrent=self.config.evaluation.max_concurrent_requests
        )

        fallback_count = sum(1 for r in results if r.source == EvaluationSource.FALLBACK.value)
        logger.info(f"Batch evaluation complete: {len(results) - fallback_count} AI, {fallback_count} fallback")
        return results

    async def _within_deadline(self, coro):
        """Await a model call, raising asyncio.TimeoutError once the AI deadline passes."""
        deadline = self.config.evaluation.ai_deadline
        return await asyncio.wait_for(coro, timeout=deadline if deadline and deadline > 0 else None)

    def _prepare_pronunciation(self, request: PronunciationRequest) -> PronunciationRequest:
        _require_str(request.target_word, "target_word")
        _require_str(request.transcription, "transcription")
        _require_str(request.difficulty, "difficulty")

        if not request.target_word.strip():
            raise ValidationError("Target word is required", field_name="target_word",
                                  invalid_value=request.target_word)
        self._validate_difficulty(request.difficulty)

        return PronunciationRequest(
            target_word=self._cap_length(request.target_word, "target_word"),
            transcription=self._cap_length(request.transcription, "transcription"),
            difficulty=request.difficulty
        )

    def _cap_length(self, text: str, field_name: str) -> str:
        limit = self.config.evaluation.max_input_length
        if limit and len(text) > limit:
            logger.warning(f"Truncating {field_name} from {len(text)} to {limit} characters")
            return text[:limit]
        return text

    def _validate_story(self, request: StoryRequest) -> None:
        _require_str(request.story, "story")
        _require_str(request.prompt, "prompt")
        _require_str(request.difficulty, "difficulty")

        if not isinstance(request.keywords, (list, tuple)):
            raise InvalidArgument("keywords must be a list of strings", field_name="keywords",
                                  invalid_value=request.keywords)
        for keyword in request.keywords:
            _require_str(keyword, "keywords")

        min_length = self.config.evaluation.story.min_story_length
        if len(request.story.strip()) < min_length:
            raise ValidationError(f"Story must be at least {min_length} characters long",
                                  field_name="story", invalid_value=request.story)
        if not request.prompt.strip():
            raise ValidationError("Story prompt is required", field_name="prompt",
                                  invalid_value=request.prompt)

        _require_int(request.min_words, "min_words", minimum=1)
        _require_int(request.time_spent, "time_spent", minimum=0)
        _require_int(request.max_time, "max_time", minimum=1)
        self._validate_difficulty(request.difficulty)

    @staticmethod
    def _validate_difficulty(difficulty: str) -> None:
        if difficulty not in VALID_DIFFICULTIES:
            raise ValidationError("Invalid difficulty level", field_name="difficulty",
                                  invalid_value=difficulty)

    def _record(self, evaluation_type: str, score: int, source: str) -> None:
        stats = self._stats[evaluation_type]
        stats['total_evaluations'] += 1
        stats['score_sum'] += score
        stats['recent_scores'].append(score)
        if source == EvaluationSource.FALLBACK.value:
            stats['fallback_count'] += 1

    def get_statistics(self) -> Dict[str, Dict[str, Any]]:
        """Per-type totals, average final score, fallback count and recent scores."""
        summary = {}
        for evaluation_type, stats in self._stats.items():
            total = stats['total_evaluations']
            summary[evaluation_type] = {
                'total_evaluations': total,
                'average_score': stats['score_sum'] / total if total else 0.0,
                'fallback_count': stats['fallback_count'],
                'fallback_rate': stats['fallback_count'] / total if total else 0.0,
                'recent_scores': list(stats['recent_scores']),
            }
        return summary

    def reset_statistics(self) -> None:
        size = self.config.evaluation.recent_scores_size
        self._stats: Dict[str, Dict[str, Any]] = {
            evaluation_type: {
                'total_evaluations': 0,
                'score_sum': 0,
                'fallback_count': 0,
                'recent_scores': deque(maxlen=size),
            }
            for evaluation_type in (PRONUNCIATION, STORYTELLING)
        }

    async def close(self) -> None:
        if self.ai_evaluator is not None:
            await self.ai_evaluator.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


def _require_str(value: Any, field_name: str) -> None:
    if not isinstance(value, str):
        raise InvalidArgument(f"{field_name} must be a string, got {type(value).__name__}",
                              field_name=field_name, invalid_value=value)


def _require_int(value: Any, field_name: str, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise ValidationError(f"{field_name} must be an integer >= {minimum}",
                              field_name=field_name, invalid_value=value)
