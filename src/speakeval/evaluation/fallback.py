"""
Fallback Evaluator

Deterministic evaluator used when the language model cannot score a
request. Pronunciation uses edit-distance similarity between the target
word and the transcription; stories use the length/keyword heuristic.
"""

from ..models.schemas import (
    EvaluationSource,
    PronunciationEvaluation,
    PronunciationRequest,
    StoryEvaluation,
    StoryRequest,
)
from ..models.response_parser import PRONUNCIATION_BREAKDOWN_WEIGHTS
from ..scoring.similarity import evaluate_fallback, score_to_grade, round_half_up
from ..scoring.story import heuristic_story_score, proportional_breakdown
from . import feedback

STORY_BREAKDOWN_WEIGHTS = {
    'creativity': 0.25,
    'grammar': 0.25,
    'vocabulary': 0.20,
    'coherence': 0.15,
}


class FallbackEvaluator:
    """Scores requests without any external service."""

    def evaluate_pronunciation(self, request: PronunciationRequest) -> PronunciationEvaluation:
        """
        Score a pronunciation attempt from its transcription alone.

        Raises:
            InvalidArgument: If the target word or transcription is not a string
        """
        graded = evaluate_fallback(request.target_word, request.transcription)
        accuracy = graded.accuracy_percent
        passed = accuracy >= feedback.PRONUNCIATION_STRENGTH_THRESHOLD

        return PronunciationEvaluation(
            accuracy=accuracy,
            final_score=accuracy,
            feedback=feedback.pronunciation_feedback(accuracy, graded.feedback_tier),
            grade=graded.grade,
            feedback_tier=graded.feedback_tier.value,
            score_breakdown=proportional_breakdown(accuracy, PRONUNCIATION_BREAKDOWN_WEIGHTS),
            improvements=[] if passed else list(feedback.PRONUNCIATION_IMPROVEMENTS),
            strengths=list(feedback.PRONUNCIATION_STRENGTHS) if passed else [],
            phonetic_analysis=feedback.PHONETIC_ANALYSIS_NOTE,
            source=EvaluationSource.FALLBACK.value
        )

    def evaluate_story(self, request: StoryRequest) -> StoryEvaluation:
        """Score a story from its word count and keyword coverage."""
        heuristic = heuristic_story_score(request.story, request.keywords, request.min_words)
        overall = heuristic.overall_score
        long_enough = heuristic.word_count >= request.min_words

        breakdown = proportional_breakdown(overall, STORY_BREAKDOWN_WEIGHTS)
        breakdown['keyword_usage'] = round_half_up(heuristic.keyword_score)

        return StoryEvaluation(
            overall_score=overall,
            final_score=overall,
            feedback=feedback.story_feedback(
                heuristic.word_count, len(heuristic.keywords_used),
                len(request.keywords), overall
            ),
            grade=score_to_grade(overall),
            word_count=heuristic.word_count,
            keywords_used=heuristic.keywords_used,
            score_breakdown=breakdown,
            strengths=list(feedback.STORY_STRENGTHS) if long_enough else [],
            improvements=[] if long_enough else list(feedback.STORY_IMPROVEMENTS),
            detailed_analysis=dict(feedback.STORY_DETAILED_ANALYSIS),
            word_count_bonus=0,
            time_management_bonus=0,
            source=EvaluationSource.FALLBACK.value
        )
