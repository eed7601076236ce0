"""
Story Heuristics

Word counting, keyword coverage and bonus arithmetic for storytelling
evaluation. The fallback score here is a length/keyword heuristic and is
unrelated to the edit-distance scorer in ``similarity``.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Sequence

from .similarity import round_half_up

LENGTH_WEIGHT = 40
KEYWORD_WEIGHT = 30
COMPLETION_SCORE = 30

MAX_WORD_COUNT_BONUS = 10
MAX_TIME_BONUS = 5


@dataclass(frozen=True)
class StoryHeuristicScore:
    """Components of the heuristic story score."""
    word_count: int
    keywords_used: List[str]
    length_score: float
    keyword_score: float
    overall_score: int


def count_words(story: str) -> int:
    """Number of whitespace-separated tokens; a blank story has 0 words."""
    return len(story.split())


def find_keywords_used(story: str, keywords: Sequence[str]) -> List[str]:
    """Keywords that appear anywhere in the story, case-insensitively, in input order."""
    lowered = story.lower()
    return [keyword for keyword in keywords if keyword.lower() in lowered]


def word_count_bonus(word_count: int, min_words: int) -> int:
    if word_count < min_words:
        return 0
    return min(MAX_WORD_COUNT_BONUS, math.floor((word_count / min_words - 1) * 5))


def time_management_bonus(time_spent: int, max_time: int) -> int:
    if time_spent <= 0 or time_spent >= max_time:
        return 0
    return min(MAX_TIME_BONUS, math.floor((max_time - time_spent) / max_time * 5))


def apply_difficulty(score: float, multiplier: float) -> int:
    """Scale a score by a difficulty multiplier, rounded half-up and capped at 100."""
    return min(100, max(0, round_half_up(score * multiplier)))


def heuristic_story_score(story: str, keywords: Sequence[str], min_words: int) -> StoryHeuristicScore:
    """
    Score a story from its length and keyword coverage alone.

    Length contributes up to 40 points, keyword coverage up to 30 and
    completing the story a flat 30. A story with no required keywords gets
    full keyword credit.
    """
    words = count_words(story)
    used = find_keywords_used(story, keywords)

    length_score = min(float(LENGTH_WEIGHT), (words / min_words) * LENGTH_WEIGHT)
    if keywords:
        keyword_score = (len(used) / len(keywords)) * KEYWORD_WEIGHT
    else:
        keyword_score = float(KEYWORD_WEIGHT)

    overall = round_half_up(length_score + keyword_score + COMPLETION_SCORE)

    return StoryHeuristicScore(
        word_count=words,
        keywords_used=used,
        length_score=length_score,
        keyword_score=keyword_score,
        overall_score=overall
    )


def proportional_breakdown(score: float, weights: Dict[str, float]) -> Dict[str, int]:
    """Split a score into named parts by weight, each rounded half-up."""
    return {name: round_half_up(score * weight) for name, weight in weights.items()}
