"""
Evaluation Module

AI-first learner evaluation with deterministic fallback scoring.
"""

from .fallback import FallbackEvaluator
from .service import EvaluationService

__all__ = [
    "FallbackEvaluator",
    "EvaluationService",
]
