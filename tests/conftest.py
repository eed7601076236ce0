"""
Pytest Configuration

Global test configuration, fixtures, and utilities for the speakeval
test suite.
"""

import pytest
import tempfile
from pathlib import Path
from typing import Any, Dict

# Add src to Python path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from speakeval.core.config import AppConfig, LoggingConfig, set_config
from speakeval.models.schemas import PronunciationRequest, StoryRequest

ENV_OVERRIDES = (
    'OPENAI_API_KEY',
    'OPENAI_BASE_URL',
    'OPENAI_MODEL',
    'SPEAKEVAL_USE_AI',
    'LOG_LEVEL',
    'DEBUG',
    'ENVIRONMENT',
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep host environment variables and the config singleton out of tests."""
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def temp_dir():
    """Provide a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def test_config(temp_dir):
    """Provide a fallback-only test configuration that logs into temp_dir."""
    config = AppConfig.from_dict({})
    config.environment = "test"
    config.debug = True
    config.llm.use_ai = False
    config.logging = LoggingConfig(level="DEBUG", file=str(temp_dir / "test.log"))
    return config


@pytest.fixture
def ai_config(temp_dir):
    """Provide a test configuration with an API key for the AI evaluator."""
    config = AppConfig.from_dict({'llm': {'api_key': 'test-key'}})
    config.environment = "test"
    config.logging = LoggingConfig(level="DEBUG", file=str(temp_dir / "test.log"))
    return config


@pytest.fixture
def pronunciation_request():
    return PronunciationRequest(target_word="hello", transcription="helo", difficulty="medium")


@pytest.fixture
def story_request():
    story = ("Once upon a time a brave girl walked into the dark forest. "
             "She found a small dragon sleeping under an old tree and decided "
             "to help it find its family before the sun went down.")
    return StoryRequest(
        story=story,
        prompt="Write about an unexpected friendship",
        keywords=["forest", "dragon", "castle"],
        min_words=20,
        difficulty="medium",
        time_spent=120,
        max_time=300
    )


class TestDataFactory:
    """Factory for creating model response payloads used across tests."""

    @staticmethod
    def pronunciation_payload(**overrides) -> Dict[str, Any]:
        payload = {
            "accuracy": 85,
            "feedback": "Clear vowel sounds, slightly soft final consonant.",
            "grade": "B",
            "improvements": ["Stress the first syllable"],
            "strengths": ["Good vowel quality"],
            "phonetic_analysis": "/həˈloʊ/ matched closely",
            "score_breakdown": {"consonants": 25, "vowels": 27, "stress": 16, "fluency": 17},
        }
        payload.update(overrides)
        return payload

    @staticmethod
    def story_payload(**overrides) -> Dict[str, Any]:
        payload = {
            "overall_score": 78,
            "feedback": "A warm story with a clear beginning.",
            "grade": "C",
            "strengths": ["Vivid setting"],
            "improvements": ["Add an ending"],
            "score_breakdown": {"creativity": 20, "grammar": 19, "vocabulary": 15,
                                "coherence": 12, "keyword_usage": 12},
            "detailed_analysis": {"plot_development": "Simple but clear"},
        }
        payload.update(overrides)
        return payload

    @staticmethod
    def chat_completion(content: str) -> Dict[str, Any]:
        return {
            "choices": [
                {"message": {"content": content}, "finish_reason": "stop"}
            ],
            "usage": {"prompt_tokens": 120, "completion_tokens": 80},
            "model": "gpt-3.5-turbo",
        }


@pytest.fixture
def test_data_factory():
    """Provide test data factory."""
    return TestDataFactory
