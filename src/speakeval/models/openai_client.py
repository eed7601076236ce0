"""
OpenAI Evaluator

Async client for an OpenAI-compatible chat completions API that scores
pronunciation attempts and stories, with retry logic and usage tracking.
"""

import os
import json
from typing import Dict, List, Any, Optional
import aiohttp
import time
from datetime import datetime

from .base import AIEvaluator, ModelResponse, ModelConfig
from .prompts import PromptBuilder
from .response_parser import EvaluationResponseParser
from .schemas import PronunciationRequest, PronunciationEvaluation, StoryRequest, StoryEvaluation
from ..core.config import AppConfig, get_config
from ..core.exceptions import ModelAPIError, RateLimitError
from ..scoring.story import count_words, find_keywords_used
from ..utils.logging import get_logger
from ..utils.async_helpers import retry_with_backoff

logger = get_logger(__name__)

# Wait used when a 429 response carries no usable Retry-After header
DEFAULT_RETRY_AFTER = 5


class OpenAIEvaluator(AIEvaluator):
    """LLM-backed evaluator for pronunciation attempts and stories."""

    def __init__(self, api_key: Optional[str] = None, config: Optional[ModelConfig] = None,
                 base_url: Optional[str] = None, app_config: Optional[AppConfig] = None):
        """
        Initialize the evaluator.

        Args:
            api_key: API key (from config or OPENAI_API_KEY if not provided)
            config: Model configuration
            base_url: API base URL (from config if not provided)
            app_config: Application configuration (global config if None)
        """
        self.app_config = app_config or get_config()

        if config is None:
            config = ModelConfig(
                model_name=self.app_config.llm.model,
                timeout_seconds=self.app_config.llm.timeout
            )

        super().__init__(config)

        self.api_key = api_key or self.app_config.llm.api_key or os.getenv('OPENAI_API_KEY')
        if not self.api_key:
            raise ModelAPIError(
                "OpenAI API key not provided. Set OPENAI_API_KEY environment variable.",
                model_name=config.model_name
            )

        self.base_url = (base_url or self.app_config.llm.base_url).rstrip('/')
        self.session: Optional[aiohttp.ClientSession] = None

        evaluation_config = self.app_config.evaluation
        self.pronunciation_settings = evaluation_config.pronunciation
        self.story_settings = evaluation_config.story
        self.prompt_builder = PromptBuilder()
        self.parser = EvaluationResponseParser(
            pronunciation_multipliers=self.pronunciation_settings.difficulty_multipliers,
            story_multipliers=self.story_settings.difficulty_multipliers
        )

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure aiohttp session exists."""
        if self.session is None or self.session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
            self.session = aiohttp.ClientSession(timeout=timeout)
        return self.session

    async def evaluate_pronunciation(self, request: PronunciationRequest) -> PronunciationEvaluation:
        logger.info(f"Evaluating pronunciation: '{request.target_word}' vs '{request.transcription}'")

        messages = self.prompt_builder.pronunciation_messages(request)
        response = await self.complete(
            messages,
            temperature=self.pronunciation_settings.temperature,
            max_tokens=self.pronunciation_settings.max_tokens
        )

        evaluation = self.parser.parse_pronunciation(response.response, request)
        logger.debug(f"Pronunciation evaluation completed: accuracy={evaluation.accuracy}, "
                     f"final_score={evaluation.final_score}")
        return evaluation

    async def evaluate_story(self, request: StoryRequest) -> StoryEvaluation:
        word_count = count_words(request.story)
        keywords_used = find_keywords_used(request.story, request.keywords)
        logger.info(f"Evaluating story: {word_count} words, "
                    f"{len(keywords_used)}/{len(request.keywords)} keywords")

        messages = self.prompt_builder.story_messages(request, word_count, keywords_used)
        response = await self.complete(
            messages,
            temperature=self.story_settings.temperature,
            max_tokens=self.story_settings.max_tokens
        )

        return self.parser.parse_story(response.response, request, word_count, keywords_used)

    async def complete(self, messages: List[Dict[str, str]], **kwargs) -> ModelResponse:
        """
        Send chat messages to the completions endpoint.

        Args:
            messages: Chat messages (role/content dicts)
            **kwargs: Overrides for max_tokens and temperature

        Returns:
            ModelResponse with generated text and metadata

        Raises:
            ModelAPIError: If API request fails
            RateLimitError: If rate limits are exceeded
        """
        try:
            session = await self._ensure_session()

            headers = {
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            }

            payload = {
                "model": self.config.model_name,
                "messages": messages,
                "max_tokens": kwargs.get('max_tokens', self.config.max_tokens),
                "temperature": kwargs.get('temperature', self.config.temperature),
            }

            if self.config.top_p is not None:
                payload["top_p"] = self.config.top_p
            if self.config.stop_sequences:
                payload["stop"] = self.config.stop_sequences

            start_time = time.time()
            response_data = await self._make_request_with_retry(session, headers, payload)
            response_time_ms = (time.time() - start_time) * 1000

            choices = response_data.get('choices') if isinstance(response_data, dict) else None
            if not choices:
                raise ModelAPIError(
                    "Invalid response format: no choices in response",
                    model_name=self.config.model_name,
                    response_body=str(response_data)
                )

            response_text = (choices[0].get('message') or {}).get('content') or ""

            usage = response_data.get('usage') or {}
            tokens_input = usage.get('prompt_tokens', 0)
            tokens_output = usage.get('completion_tokens', 0)

            model_response = ModelResponse(
                model_id=self.config.model_name,
                prompt=messages[-1]['content'] if messages else "",
                response=response_text,
                latency_ms=response_time_ms,
                tokens_used=tokens_input + tokens_output,
                timestamp=datetime.now(),
                metadata={
                    'tokens_input': tokens_input,
                    'tokens_output': tokens_output,
                    'model': response_data.get('model'),
                    'finish_reason': choices[0].get('finish_reason')
                }
            )

            self.update_usage_stats(model_response)

            logger.debug(f"Completion finished in {response_time_ms:.0f}ms, "
                         f"tokens: {model_response.tokens_used}")

            return model_response

        except ModelAPIError:
            raise
        except Exception as e:
            raise ModelAPIError(
                f"OpenAI query failed: {str(e)}",
                model_name=self.config.model_name
            ) from e

    @retry_with_backoff(max_retries=3, base_delay=1.0, max_delay=10.0)
    async def _make_request_with_retry(self, session: aiohttp.ClientSession,
                                       headers: Dict[str, str], payload: Dict[str, Any]) -> Dict[str, Any]:
        """Make HTTP request with retry logic."""
        try:
            async with session.post(f"{self.base_url}/chat/completions",
                                    headers=headers, json=payload) as response:
                response_text = await response.text()

                if response.status == 429:
                    retry_after = response.headers.get('Retry-After')
                    retry_after_seconds = int(retry_after) if retry_after and retry_after.isdigit() else DEFAULT_RETRY_AFTER

                    raise RateLimitError(
                        f"Rate limit exceeded, retry after {retry_after_seconds} seconds",
                        retry_after=retry_after_seconds,
                        model_name=self.config.model_name,
                        status_code=response.status
                    )

                elif response.status != 200:
                    raise ModelAPIError(
                        f"API request failed with status {response.status}",
                        model_name=self.config.model_name,
                        status_code=response.status,
                        response_body=response_text
                    )

                try:
                    return json.loads(response_text)
                except json.JSONDecodeError as e:
                    raise ModelAPIError(
                        f"Invalid JSON response: {str(e)}",
                        model_name=self.config.model_name,
                        response_body=response_text
                    ) from e

        except aiohttp.ClientError as e:
            raise ModelAPIError(
                f"HTTP client error: {str(e)}",
                model_name=self.config.model_name
            ) from e

    def is_available(self) -> bool:
        return bool(self.api_key)

    async def close(self) -> None:
        """Close the HTTP session."""
        if self.session and not self.session.closed:
            await self.session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
