"""
Similarity Scoring

Deterministic edit-distance scoring used to grade a pronunciation attempt
from its speech-to-text transcription when the LLM evaluator is unavailable.
Every function here is pure: no I/O, no shared state.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..core.exceptions import InvalidArgument


class FeedbackTier(str, Enum):
    """Coarse feedback bucket used to pick a narrative template."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Inclusive lower bounds, checked top-down
GRADE_THRESHOLDS = (
    (90, "A"),
    (80, "B"),
    (70, "C"),
    (60, "D"),
)

TIER_THRESHOLDS = (
    (80, FeedbackTier.HIGH),
    (60, FeedbackTier.MEDIUM),
)


@dataclass(frozen=True)
class ComparisonInput:
    """A single reference/candidate pair, e.g. target word and transcription."""
    reference: str
    candidate: str

    def __post_init__(self):
        _require_str(self.reference, "reference")
        _require_str(self.candidate, "candidate")


@dataclass(frozen=True)
class SimilarityResult:
    """Raw comparison of two strings."""
    distance: int
    ratio: float
    accuracy_percent: int


@dataclass(frozen=True)
class GradedScore:
    """Bounded percentage score with its letter grade and feedback tier."""
    accuracy_percent: int
    grade: str
    feedback_tier: FeedbackTier

    def to_dict(self):
        return {
            'accuracy_percent': self.accuracy_percent,
            'grade': self.grade,
            'feedback_tier': self.feedback_tier.value,
        }


def _require_str(value: Any, field_name: str) -> None:
    if not isinstance(value, str):
        raise InvalidArgument(
            f"{field_name} must be a string, got {type(value).__name__}",
            field_name=field_name,
            invalid_value=value
        )


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def compute_edit_distance(a: str, b: str) -> int:
    """
    Levenshtein distance between ``a`` and ``b``.

    Case-sensitive and compared code point by code point; callers decide
    on normalization. Only two rows of the (len(b)+1) x (len(a)+1) table
    are kept.

    Args:
        a: First string (columns)
        b: Second string (rows)

    Returns:
        Minimum number of single-character insertions, deletions and
        substitutions turning one string into the other

    Raises:
        InvalidArgument: If either argument is not a string
    """
    _require_str(a, "a")
    _require_str(b, "b")

    if a == b:
        return 0

    # Row 0: distance from the empty prefix of b to each prefix of a
    previous = list(range(len(a) + 1))

    for i in range(1, len(b) + 1):
        current = [i] + [0] * len(a)
        b_char = b[i - 1]
        for j in range(1, len(a) + 1):
            if b_char == a[j - 1]:
                current[j] = previous[j - 1]
            else:
                current[j] = 1 + min(
                    previous[j - 1],  # substitute
                    current[j - 1],   # delete from a
                    previous[j],      # insert into a
                )
        previous = current

    return previous[len(a)]


def compute_similarity_ratio(reference: str, candidate: str) -> float:
    """
    Case-insensitive similarity in [0, 1].

    ``(len(longer) - distance) / len(longer)`` over the lowercased inputs.
    Two empty strings are a perfect match (1.0).
    """
    return compare(reference, candidate).ratio


def compare(reference: str, candidate: str) -> SimilarityResult:
    """
    Compare two strings and return distance, ratio and rounded percent.

    Raises:
        InvalidArgument: If either argument is not a string
    """
    _require_str(reference, "reference")
    _require_str(candidate, "candidate")

    first = reference.lower()
    second = candidate.lower()

    if len(first) >= len(second):
        longer, shorter = first, second
    else:
        longer, shorter = second, first

    if len(longer) == 0:
        return SimilarityResult(distance=0, ratio=1.0, accuracy_percent=100)

    distance = compute_edit_distance(longer, shorter)
    ratio = (len(longer) - distance) / len(longer)

    return SimilarityResult(
        distance=distance,
        ratio=ratio,
        accuracy_percent=_to_percent(ratio)
    )


def _to_percent(ratio: float) -> int:
    return min(100, max(0, round_half_up(ratio * 100)))


def score_to_grade(accuracy_percent: int) -> str:
    """Map a clamped 0-100 score to a letter grade (A/B/C/D/F)."""
    for lower_bound, grade in GRADE_THRESHOLDS:
        if accuracy_percent >= lower_bound:
            return grade
    return "F"


def feedback_tier(accuracy_percent: int) -> FeedbackTier:
    """Map a clamped 0-100 score to high (>=80), medium (>=60) or low."""
    for lower_bound, tier in TIER_THRESHOLDS:
        if accuracy_percent >= lower_bound:
            return tier
    return FeedbackTier.LOW


def evaluate_fallback(reference: str, candidate: str) -> GradedScore:
    """
    Grade ``candidate`` against ``reference`` without any external service.

    Args:
        reference: Target word or canonical text
        candidate: Transcribed speech

    Returns:
        GradedScore with accuracy percent, grade and feedback tier

    Raises:
        InvalidArgument: If either argument is not a string
    """
    accuracy = compare(reference, candidate).accuracy_percent

    return GradedScore(
        accuracy_percent=accuracy,
        grade=score_to_grade(accuracy),
        feedback_tier=feedback_tier(accuracy)
    )


def evaluate_input(comparison: ComparisonInput) -> GradedScore:
    """Grade a ComparisonInput."""
    return evaluate_fallback(comparison.reference, comparison.candidate)
