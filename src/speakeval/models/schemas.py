"""
Evaluation Schemas

Request and result records shared by the LLM evaluator, the deterministic
fallback and the evaluation service.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class EvaluationSource(str, Enum):
    """Which path produced an evaluation."""
    AI = "ai"
    FALLBACK = "fallback"


@dataclass
class PronunciationRequest:
    """A learner's attempt at saying a target word."""
    target_word: str
    transcription: str
    difficulty: str = Difficulty.MEDIUM.value


@dataclass
class StoryRequest:
    """A learner's story written for a prompt."""
    story: str
    prompt: str
    keywords: List[str] = field(default_factory=list)
    min_words: int = 50
    difficulty: str = Difficulty.MEDIUM.value
    time_spent: int = 0
    max_time: int = 300


@dataclass
class PronunciationEvaluation:
    """Scored pronunciation attempt."""
    accuracy: float
    final_score: int
    feedback: str
    grade: str
    feedback_tier: str
    score_breakdown: Dict[str, int]
    improvements: List[str] = field(default_factory=list)
    strengths: List[str] = field(default_factory=list)
    phonetic_analysis: Optional[str] = None
    source: str = EvaluationSource.AI.value
    evaluation_type: str = "pronunciation"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class StoryEvaluation:
    """Scored story."""
    overall_score: float
    final_score: int
    feedback: str
    grade: str
    word_count: int
    keywords_used: List[str]
    score_breakdown: Dict[str, Any]
    strengths: List[str] = field(default_factory=list)
    improvements: List[str] = field(default_factory=list)
    detailed_analysis: Dict[str, str] = field(default_factory=dict)
    word_count_bonus: int = 0
    time_management_bonus: int = 0
    source: str = EvaluationSource.AI.value
    evaluation_type: str = "storytelling"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
