"""
Models Module

Language model evaluator interface, the OpenAI-compatible client,
prompt building and response parsing.
"""

from .base import AIEvaluator, ModelConfig, ModelResponse
from .openai_client import OpenAIEvaluator
from .prompts import PromptBuilder
from .response_parser import EvaluationResponseParser
from .schemas import (
    Difficulty,
    EvaluationSource,
    PronunciationRequest,
    PronunciationEvaluation,
    StoryRequest,
    StoryEvaluation,
)

__all__ = [
    "AIEvaluator",
    "ModelConfig",
    "ModelResponse",
    "OpenAIEvaluator",
    "PromptBuilder",
    "EvaluationResponseParser",
    "Difficulty",
    "EvaluationSource",
    "PronunciationRequest",
    "PronunciationEvaluation",
    "StoryRequest",
    "StoryEvaluation",
]
