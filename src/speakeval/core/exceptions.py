"""
Custom Exception Classes

Application-specific exception classes for error handling across
the scoring core, the LLM evaluator and the evaluation service.
"""

from typing import Optional, Any, Dict


class SpeakEvalException(Exception):
    """Base exception class for all speakeval errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ConfigurationError(SpeakEvalException):
    """Raised when there's an issue with configuration setup or validation."""
    pass


class ValidationError(SpeakEvalException):
    """Raised when request data fails validation."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 invalid_value: Optional[Any] = None, **kwargs):
        super().__init__(message, kwargs)
        self.field_name = field_name
        self.invalid_value = invalid_value


class InvalidArgument(ValidationError, TypeError):
    """Raised when a scorer input is not a string (None included)."""
    pass


class ModelAPIError(SpeakEvalException):
    """Raised when API calls to the language model provider fail."""

    def __init__(self, message: str, model_name: Optional[str] = None,
                 status_code: Optional[int] = None,
                 response_body: Optional[str] = None, **kwargs):
        super().__init__(message, kwargs)
        self.model_name = model_name
        self.status_code = status_code
        self.response_body = response_body


class RateLimitError(ModelAPIError):
    """Raised when API rate limits are exceeded."""

    def __init__(self, message: str, retry_after: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class EvaluationError(SpeakEvalException):
    """Raised when a model evaluation cannot be turned into a score."""

    def __init__(self, message: str, evaluation_type: Optional[str] = None,
                 raw_response: Optional[str] = None, **kwargs):
        super().__init__(message, kwargs)
        self.evaluation_type = evaluation_type
        self.raw_response = raw_response
