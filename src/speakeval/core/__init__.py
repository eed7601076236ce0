"""
Core Module

Foundational components used across the application including configuration
management and custom exceptions.
"""

from .config import get_config, set_config, reload_config, AppConfig
from .exceptions import (
    SpeakEvalException,
    ConfigurationError,
    ValidationError,
    InvalidArgument,
    ModelAPIError,
    RateLimitError,
    EvaluationError,
)

__all__ = [
    "get_config",
    "set_config",
    "reload_config",
    "AppConfig",
    "SpeakEvalException",
    "ConfigurationError",
    "ValidationError",
    "InvalidArgument",
    "ModelAPIError",
    "RateLimitError",
    "EvaluationError",
]
