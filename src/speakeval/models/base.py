"""
Base Evaluator Interface

Abstract base class for LLM-backed evaluators, with the standardized
raw model response and model configuration they share.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, List
from dataclasses import dataclass
from datetime import datetime
import time

from .schemas import (
    PronunciationRequest,
    PronunciationEvaluation,
    StoryRequest,
    StoryEvaluation,
)


@dataclass
class ModelResponse:
    """Standardized response from a language model."""
    model_id: str
    prompt: str
    response: str
    latency_ms: float
    tokens_used: int
    timestamp: datetime
    metadata: Dict[str, Any]

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now()
        if self.metadata is None:
            self.metadata = {}


@dataclass
class ModelConfig:
    """Configuration for a language model."""
    model_name: str
    max_tokens: int = 600
    temperature: float = 0.2
    top_p: Optional[float] = None
    stop_sequences: Optional[List[str]] = None
    timeout_seconds: int = 30


class AIEvaluator(ABC):
    """
    Evaluates learner input with a hosted language model.

    Implementations either return a result or raise ``ModelAPIError`` /
    ``EvaluationError``; they never fall back on their own.
    """

    def __init__(self, config: ModelConfig):
        self.config = config
        self._total_requests = 0
        self._total_tokens = 0

    @abstractmethod
    async def evaluate_pronunciation(self, request: PronunciationRequest) -> PronunciationEvaluation:
        """
        Score a pronunciation attempt.

        Raises:
            ModelAPIError: If the API request fails
            EvaluationError: If the model output cannot be used
        """
        pass

    @abstractmethod
    async def evaluate_story(self, request: StoryRequest) -> StoryEvaluation:
        """
        Score a story.

        Raises:
            ModelAPIError: If the API request fails
            EvaluationError: If the model output cannot be used
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the evaluator can be called at all (e.g. has credentials)."""
        pass

    async def close(self) -> None:
        """Release any held resources."""
        return None

    def update_usage_stats(self, response: ModelResponse) -> None:
        self._total_requests += 1
        if response.tokens_used:
            self._total_tokens += response.tokens_used

    def get_usage_stats(self) -> Dict[str, Any]:
        return {
            'total_requests': self._total_requests,
            'total_tokens': self._total_tokens,
            'average_tokens_per_request': self._total_tokens / max(1, self._total_requests)
        }

    async def health_check(self) -> Dict[str, Any]:
        """
        Perform a health check by scoring a trivial pronunciation attempt.

        Returns:
            Dictionary with health check results
        """
        start_time = time.time()

        try:
            await self.evaluate_pronunciation(
                PronunciationRequest(target_word="hello", transcription="hello")
            )
            return {
                'status': 'healthy',
                'response_time_ms': (time.time() - start_time) * 1000,
                'model_name': self.config.model_name,
                'timestamp': datetime.now().isoformat()
            }
        except Exception as e:
            return {
                'status': 'unhealthy',
                'error': str(e),
                'model_name': self.config.model_name,
                'timestamp': datetime.now().isoformat()
            }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model={self.config.model_name})"
