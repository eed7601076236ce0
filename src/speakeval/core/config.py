"""
Configuration Management

Centralized configuration management with YAML file support
and environment variable overrides.
"""

import os
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass, field, asdict
import yaml
from dotenv import load_dotenv

from .exceptions import ConfigurationError

# Load .env file if it exists
load_dotenv()

SECTIONS = ('llm', 'evaluation', 'logging')
EVALUATION_SECTIONS = ('pronunciation', 'story')


@dataclass
class LLMConfig:
    """Hosted language model settings."""
    base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-3.5-turbo"
    api_key: Optional[str] = None
    timeout: int = 30
    use_ai: bool = True


@dataclass
class PronunciationConfig:
    """Pronunciation evaluation defaults."""
    temperature: float = 0.2
    max_tokens: int = 600
    difficulty_multipliers: Dict[str, float] = field(default_factory=lambda: {
        "easy": 0.9,
        "medium": 1.0,
        "hard": 1.1
    })


@dataclass
class StoryConfig:
    """Story evaluation defaults."""
    temperature: float = 0.4
    max_tokens: int = 1200
    min_words: int = 50
    max_time: int = 300
    min_story_length: int = 10
    difficulty_multipliers: Dict[str, float] = field(default_factory=lambda: {
        "easy": 0.9,
        "medium": 1.0,
        "hard": 1.15
    })


@dataclass
class EvaluationConfig:
    """Evaluation service configuration."""
    max_input_length: int = 500
    ai_deadline: float = 45.0  # Seconds before the fallback takes over
    max_concurrent_requests: int = 5
    recent_scores_size: int = 10
    pronunciation: PronunciationConfig = field(default_factory=PronunciationConfig)
    story: StoryConfig = field(default_factory=StoryConfig)


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    console_level: str = "WARNING"  # Separate level for console output
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str = "logs/speakeval.log"
    max_size: str = "10MB"
    backup_count: int = 5
    structured: bool = False  # JSON records instead of plain text


@dataclass
class AppConfig:
    """Main application configuration."""
    name: str = "speakeval"
    version: str = "1.0.0"
    environment: str = "production"
    debug: bool = False

    llm: LLMConfig = field(default_factory=LLMConfig)
    evaluation: EvaluationConfig = field(default_factory=EvaluationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, config_path: Path) -> "AppConfig":
        """Load configuration from YAML file."""
        with open(config_path, 'r') as f:
            config_data = yaml.safe_load(f) or {}

        if not isinstance(config_data, dict):
            raise ConfigurationError(
                f"Configuration file must contain a mapping: {config_path}"
            )

        # Handle nested app configuration structure
        config_data = _normalize_sections(config_data, ('app',))
        if 'app' in config_data:
            app_config = config_data.pop('app')
            config_data.update(app_config)

        return cls.from_dict(config_data)

    @classmethod
    def from_dict(cls, config_data: Dict[str, Any]) -> "AppConfig":
        """Build configuration from a plain dictionary, applying env overrides."""
        config_data = cls._apply_env_overrides(_normalize_sections(dict(config_data), SECTIONS))

        try:
            if 'llm' in config_data:
                llm_data = config_data['llm']
                if 'use_ai' in llm_data:
                    llm_data['use_ai'] = _to_bool(llm_data['use_ai'])
                config_data['llm'] = LLMConfig(**llm_data)

            if 'evaluation' in config_data:
                evaluation_data = _normalize_sections(config_data['evaluation'], EVALUATION_SECTIONS,
                                                      prefix='evaluation.')
                if 'pronunciation' in evaluation_data:
                    evaluation_data['pronunciation'] = PronunciationConfig(**evaluation_data['pronunciation'])
                if 'story' in evaluation_data:
                    evaluation_data['story'] = StoryConfig(**evaluation_data['story'])
                config_data['evaluation'] = EvaluationConfig(**evaluation_data)

            if 'logging' in config_data:
                logging_data = config_data['logging']
                if 'structured' in logging_data:
                    logging_data['structured'] = _to_bool(logging_data['structured'])
                config_data['logging'] = LoggingConfig(**logging_data)

            if 'debug' in config_data:
                config_data['debug'] = _to_bool(config_data['debug'])

            return cls(**config_data)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {str(e)}") from e

    @staticmethod
    def _apply_env_overrides(config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration."""
        env_mappings = {
            'OPENAI_API_KEY': ['llm', 'api_key'],
            'OPENAI_BASE_URL': ['llm', 'base_url'],
            'OPENAI_MODEL': ['llm', 'model'],
            'SPEAKEVAL_USE_AI': ['llm', 'use_ai'],
            'LOG_LEVEL': ['logging', 'level'],
            'DEBUG': ['debug'],
            'ENVIRONMENT': ['environment'],
        }

        for env_var, config_path in env_mappings.items():
            env_value = os.getenv(env_var)
            if env_value:
                current = config_data
                for key in config_path[:-1]:
                    current = current.setdefault(key, {})
                current[config_path[-1]] = env_value

        return config_data

    def to_dict(self, redact_secrets: bool = True) -> Dict[str, Any]:
        """Convert configuration to a dictionary."""
        data = asdict(self)
        if redact_secrets and data['llm'].get('api_key'):
            data['llm']['api_key'] = '***'
        return data


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


def _normalize_sections(data: Dict[str, Any], sections, prefix: str = '') -> Dict[str, Any]:
    """Copy mapping sections, treating empty ones as absent and rejecting non-mappings."""
    data = dict(data)
    for key in sections:
        if key not in data:
            continue
        if data[key] is None:
            del data[key]
        elif isinstance(data[key], dict):
            data[key] = dict(data[key])
        else:
            raise ConfigurationError(
                f"Configuration section '{prefix}{key}' must be a mapping, "
                f"got {type(data[key]).__name__}"
            )
    return data


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config(config_path: Optional[Path] = None) -> AppConfig:
    """Get the application configuration instance."""
    global _config

    if _config is None:
        if config_path is None:
            # Default configuration path
            config_path = Path("config/default.yaml")

        if config_path.exists():
            _config = AppConfig.from_yaml(config_path)
        else:
            # Use default configuration if file doesn't exist
            _config = AppConfig.from_dict({})

    return _config


def set_config(config: Optional[AppConfig]) -> None:
    """Set the global configuration instance (useful for testing)."""
    global _config
    _config = config


def reload_config(config_path: Optional[Path] = None) -> AppConfig:
    """Reload configuration from file."""
    global _config
    _config = None
    return get_config(config_path)
