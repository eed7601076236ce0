"""
Response Parser

Turns raw language model output into validated pronunciation and
story evaluations.
"""

import json
import math
import re
from typing import Any, Dict, Optional, Sequence

from ..core.exceptions import EvaluationError
from ..scoring.similarity import score_to_grade, feedback_tier, round_half_up
from ..scoring.story import word_count_bonus, time_management_bonus, apply_difficulty
from .schemas import (
    EvaluationSource,
    PronunciationEvaluation,
    PronunciationRequest,
    StoryEvaluation,
    StoryRequest,
)

VALID_GRADES = {"A", "B", "C", "D", "F"}

PRONUNCIATION_BREAKDOWN_WEIGHTS = {
    'consonants': 0.3,
    'vowels': 0.3,
    'stress': 0.2,
    'fluency': 0.2,
}

DEFAULT_PRONUNCIATION_MULTIPLIERS = {'easy': 0.9, 'medium': 1.0, 'hard': 1.1}
DEFAULT_STORY_MULTIPLIERS = {'easy': 0.9, 'medium': 1.0, 'hard': 1.15}


class EvaluationResponseParser:
    """Parses model responses into evaluation records."""

    # Greedy so nested objects stay inside the match
    JSON_BLOCK_PATTERN = re.compile(r'\{[\s\S]*\}')

    def __init__(self,
                 pronunciation_multipliers: Optional[Dict[str, float]] = None,
                 story_multipliers: Optional[Dict[str, float]] = None):
        self.pronunciation_multipliers = pronunciation_multipliers or DEFAULT_PRONUNCIATION_MULTIPLIERS
        self.story_multipliers = story_multipliers or DEFAULT_STORY_MULTIPLIERS

    def extract_json(self, response_text: Optional[str], evaluation_type: str) -> Dict[str, Any]:
        """
        Extract the JSON object embedded in a model response.

        Raises:
            EvaluationError: If no JSON object can be found or decoded
        """
        if not response_text or not response_text.strip():
            raise EvaluationError(
                "Empty response from model",
                evaluation_type=evaluation_type,
                raw_response=response_text
            )

        match = self.JSON_BLOCK_PATTERN.search(response_text.strip())
        if not match:
            raise EvaluationError(
                "No valid JSON found in response",
                evaluation_type=evaluation_type,
                raw_response=response_text
            )

        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise EvaluationError(
                f"Failed to parse AI response as JSON: {str(e)}",
                evaluation_type=evaluation_type,
                raw_response=response_text
            ) from e

        if not isinstance(data, dict):
            raise EvaluationError(
                "AI response JSON is not an object",
                evaluation_type=evaluation_type,
                raw_response=response_text
            )

        return data

    def parse_pronunciation(self, response_text: str,
                            request: PronunciationRequest) -> PronunciationEvaluation:
        """
        Parse a pronunciation evaluation.

        The model's accuracy must be a non-zero number; it is clamped to
        [0, 100] and scaled by the difficulty multiplier for the final score.

        Raises:
            EvaluationError: If the response is unusable
        """
        data = self.extract_json(response_text, "pronunciation")

        accuracy = data.get('accuracy')
        if not _is_number(accuracy) or not accuracy:
            raise EvaluationError(
                "Invalid accuracy score from AI",
                evaluation_type="pronunciation",
                raw_response=response_text
            )

        accuracy = max(0, min(100, accuracy))
        multiplier = self.pronunciation_multipliers.get(request.difficulty, 1.0)
        final_score = apply_difficulty(accuracy, multiplier)

        breakdown = data.get('score_breakdown')
        if not isinstance(breakdown, dict) or not breakdown:
            breakdown = {
                name: round_half_up(accuracy * weight)
                for name, weight in PRONUNCIATION_BREAKDOWN_WEIGHTS.items()
            }

        return PronunciationEvaluation(
            accuracy=accuracy,
            final_score=final_score,
            feedback=data.get('feedback') or f"Pronunciation accuracy: {accuracy}%",
            grade=self._grade(data.get('grade'), accuracy),
            feedback_tier=feedback_tier(accuracy).value,
            score_breakdown=breakdown,
            improvements=_string_list(data.get('improvements')),
            strengths=_string_list(data.get('strengths')),
            phonetic_analysis=data.get('phonetic_analysis'),
            source=EvaluationSource.AI.value
        )

    def parse_story(self, response_text: str, request: StoryRequest,
                    word_count: int, keywords_used: Sequence[str]) -> StoryEvaluation:
        """
        Parse a story evaluation and apply length, time and difficulty adjustments.

        Raises:
            EvaluationError: If the response is unusable
        """
        data = self.extract_json(response_text, "storytelling")

        base_score = data.get('overall_score') or 0
        if not _is_number(base_score):
            raise EvaluationError(
                "Invalid overall score from AI",
                evaluation_type="storytelling",
                raw_response=response_text
            )
        base_score = max(0, min(100, base_score))

        length_bonus = word_count_bonus(word_count, request.min_words)
        time_bonus = time_management_bonus(request.time_spent, request.max_time)
        multiplier = self.story_multipliers.get(request.difficulty, 1.0)
        final_score = apply_difficulty(base_score + length_bonus + time_bonus, multiplier)

        breakdown = data.get('score_breakdown')
        analysis = data.get('detailed_analysis')

        return StoryEvaluation(
            overall_score=base_score,
            final_score=final_score,
            feedback=data.get('feedback') or f"Story score: {final_score}%",
            grade=self._grade(data.get('grade'), final_score),
            word_count=word_count,
            keywords_used=list(keywords_used),
            score_breakdown=breakdown if isinstance(breakdown, dict) else {},
            strengths=_string_list(data.get('strengths')),
            improvements=_string_list(data.get('improvements')),
            detailed_analysis=analysis if isinstance(analysis, dict) else {},
            word_count_bonus=length_bonus,
            time_management_bonus=time_bonus,
            source=EvaluationSource.AI.value
        )

    @staticmethod
    def _grade(model_grade: Any, score: float) -> str:
        if isinstance(model_grade, str) and model_grade.strip().upper() in VALID_GRADES:
            return model_grade.strip().upper()
        return score_to_grade(score)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _string_list(value: Any) -> list:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value]
