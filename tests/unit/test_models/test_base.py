"""
Tests for Base Evaluator Classes
"""

import pytest
from datetime import datetime

from speakeval.core.exceptions import ModelAPIError
from speakeval.models.base import AIEvaluator, ModelConfig, ModelResponse
from speakeval.models.schemas import PronunciationEvaluation


class TestModelResponse:
    """Test cases for ModelResponse class."""

    def test_model_response_creation(self):
        """Test creating a ModelResponse."""
        timestamp = datetime.now()
        metadata = {"tokens_input": 100, "tokens_output": 50}

        response = ModelResponse(
            model_id="gpt-3.5-turbo",
            prompt="Evaluate",
            response='{"accuracy": 90}',
            latency_ms=250.5,
            tokens_used=150,
            timestamp=timestamp,
            metadata=metadata
        )

        assert response.model_id == "gpt-3.5-turbo"
        assert response.tokens_used == 150
        assert response.timestamp == timestamp
        assert response.metadata == metadata

    def test_model_response_post_init_defaults(self):
        """Test that __post_init__ fills timestamp and metadata."""
        response = ModelResponse(
            model_id="test/model",
            prompt="test",
            response="test",
            latency_ms=100.0,
            tokens_used=50,
            timestamp=None,
            metadata=None
        )

        assert isinstance(response.timestamp, datetime)
        assert response.metadata == {}


class TestModelConfig:
    """Test cases for ModelConfig class."""

    def test_defaults(self):
        config = ModelConfig(model_name="gpt-3.5-turbo")

        assert config.max_tokens == 600
        assert config.temperature == 0.2
        assert config.top_p is None
        assert config.stop_sequences is None
        assert config.timeout_seconds == 30


class StubEvaluator(AIEvaluator):
    """Minimal evaluator for exercising the base class."""

    def __init__(self, config, error=None):
        super().__init__(config)
        self.error = error

    async def evaluate_pronunciation(self, request):
        if self.error:
            raise self.error
        return PronunciationEvaluation(
            accuracy=100, final_score=100, feedback="Perfect", grade="A",
            feedback_tier="high", score_breakdown={}
        )

    async def evaluate_story(self, request):
        raise NotImplementedError

    def is_available(self):
        return True


class TestAIEvaluator:
    """Test cases for the AIEvaluator base class."""

    def setup_method(self):
        self.config = ModelConfig(model_name="test-model")

    def test_cannot_instantiate_abstract(self):
        with pytest.raises(TypeError):
            AIEvaluator(self.config)

    def test_usage_stats(self):
        evaluator = StubEvaluator(self.config)
        for tokens in (100, 50, 0):
            evaluator.update_usage_stats(ModelResponse(
                model_id="test-model", prompt="p", response="r", latency_ms=1.0,
                tokens_used=tokens, timestamp=None, metadata=None
            ))

        stats = evaluator.get_usage_stats()

        assert stats['total_requests'] == 3
        assert stats['total_tokens'] == 150
        assert stats['average_tokens_per_request'] == pytest.approx(50)

    def test_usage_stats_empty(self):
        assert StubEvaluator(self.config).get_usage_stats()['average_tokens_per_request'] == 0

    @pytest.mark.asyncio
    async def test_health_check_healthy(self):
        result = await StubEvaluator(self.config).health_check()

        assert result['status'] == 'healthy'
        assert result['model_name'] == "test-model"
        assert result['response_time_ms'] >= 0

    @pytest.mark.asyncio
    async def test_health_check_unhealthy(self):
        evaluator = StubEvaluator(self.config, error=ModelAPIError("API request failed with status 500"))

        result = await evaluator.health_check()

        assert result['status'] == 'unhealthy'
        assert "status 500" in result['error']

    @pytest.mark.asyncio
    async def test_close_is_noop(self):
        assert await StubEvaluator(self.config).close() is None

    def test_repr(self):
        assert repr(StubEvaluator(self.config)) == "StubEvaluator(model=test-model)"
