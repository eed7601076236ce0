"""
Scoring Module

Deterministic edit-distance similarity scoring for pronunciation attempts,
plus the length/keyword heuristics used for stories.
"""

from .similarity import (
    ComparisonInput,
    SimilarityResult,
    GradedScore,
    FeedbackTier,
    compute_edit_distance,
    compute_similarity_ratio,
    compare,
    score_to_grade,
    feedback_tier,
    evaluate_fallback,
    evaluate_input,
    round_half_up,
)
from .story import (
    StoryHeuristicScore,
    count_words,
    find_keywords_used,
    word_count_bonus,
    time_management_bonus,
    apply_difficulty,
    heuristic_story_score,
    proportional_breakdown,
)

__all__ = [
    "ComparisonInput",
    "SimilarityResult",
    "GradedScore",
    "FeedbackTier",
    "compute_edit_distance",
    "compute_similarity_ratio",
    "compare",
    "score_to_grade",
    "feedback_tier",
    "evaluate_fallback",
    "evaluate_input",
    "round_half_up",
    "StoryHeuristicScore",
    "count_words",
    "find_keywords_used",
    "word_count_bonus",
    "time_management_bonus",
    "apply_difficulty",
    "heuristic_story_score",
    "proportional_breakdown",
]
