"""
speakeval

Pronunciation and storytelling evaluation for English learners: scores are
produced by a language model when one is configured and by deterministic
edit-distance and length/keyword heuristics otherwise.
"""

__version__ = "1.0.0"

from .core.config import get_config
from .core.exceptions import SpeakEvalException, InvalidArgument
from .evaluation.service import EvaluationService
from .scoring.similarity import compare, evaluate_fallback

__all__ = [
    "__version__",
    "get_config",
    "SpeakEvalException",
    "InvalidArgument",
    "EvaluationService",
    "compare",
    "evaluate_fallback",
]
