"""
Logging Configuration

Root logger setup for speakeval: a console handler for the CLI, a rotating
log file, and optional one-line JSON records that carry the evaluation
context (evaluation type, target word, scoring source).
"""

import json
import logging
import logging.handlers
import re
import sys
import time
from datetime import datetime, timezone
from pathlib import Path

from ..core.config import get_config
from ..core.exceptions import ConfigurationError

FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(funcName)s:%(lineno)d - %(message)s'

# Record attributes copied into JSON output when an adapter or caller sets them
CONTEXT_FIELDS = ('evaluation_type', 'target_word', 'source', 'model_name')

QUIET_LOGGERS = ('aiohttp', 'asyncio', 'urllib3')

_SIZE_PATTERN = re.compile(r'^(\d+(?:\.\d+)?)\s*([KMG]?B)$')
_SIZE_UNITS = {'B': 1, 'KB': 1024, 'MB': 1024 ** 2, 'GB': 1024 ** 3}


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with evaluation context when present."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'location': f"{record.module}:{record.funcName}:{record.lineno}",
        }
        entry.update({name: getattr(record, name) for name in CONTEXT_FIELDS if hasattr(record, name)})

        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False)


class EvaluationLoggerAdapter(logging.LoggerAdapter):
    """Attaches the evaluation being scored to every record it emits."""

    def process(self, msg: str, kwargs: dict) -> tuple:
        kwargs['extra'] = {**kwargs.get('extra', {}), **self.extra}
        return msg, kwargs


def setup_logging(config=None, enable_json: bool = False) -> None:
    """
    Configure the root logger from ``config.logging``.

    The console handler uses ``console_level`` so CLI output stays quiet,
    while the rotating file records everything down to ``level``.

    Args:
        config: Application configuration (global config if None)
        enable_json: Emit JSON records; also enabled by ``logging.structured``

    Raises:
        ConfigurationError: If a level name or the file size limit is invalid
    """
    config = config or get_config()
    settings = config.logging

    file_level = _level(settings.level)
    console_level = _level(settings.console_level)
    max_bytes = _parse_size(settings.max_size)

    log_file = Path(settings.file)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    file_handler = logging.handlers.RotatingFileHandler(
        filename=log_file,
        maxBytes=max_bytes,
        backupCount=settings.backup_count,
        encoding='utf-8'
    )
    file_handler.setLevel(file_level)

    if enable_json or settings.structured:
        console_handler.setFormatter(JSONFormatter())
        file_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(logging.Formatter(settings.format))
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(min(file_level, console_level))
    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"Logging to {log_file} at {settings.level} (console {settings.console_level})"
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def get_evaluation_logger(evaluation_type: str, target_word: str = None) -> EvaluationLoggerAdapter:
    """Logger for one evaluation; ``target_word`` is only set for pronunciation attempts."""
    extra = {'evaluation_type': evaluation_type}
    if target_word:
        extra['target_word'] = target_word
    return EvaluationLoggerAdapter(get_logger('speakeval.evaluation'), extra)


def _level(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    if not isinstance(level, int):
        raise ConfigurationError(f"Unknown log level: {name}")
    return level


def _parse_size(size: str) -> int:
    """Convert a size such as '10MB' or '512 KB' to bytes."""
    match = _SIZE_PATTERN.match(str(size).strip().upper())
    if not match:
        raise ConfigurationError(f"Invalid log file size: {size!r} (expected e.g. '10MB')")
    number, unit = match.groups()
    return int(float(number) * _SIZE_UNITS[unit])


class PerformanceTimer:
    """Logs how long a block took; the elapsed seconds stay on ``duration``."""

    def __init__(self, operation: str, logger: logging.Logger = None):
        self.operation = operation
        self.logger = logger or get_logger(__name__)
        self.duration = 0.0
        self._started = None

    def __enter__(self):
        self._started = time.perf_counter()
        self.logger.debug(f"Started {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.perf_counter() - self._started

        if exc_type is None:
            self.logger.info(f"Completed {self.operation} in {self.duration:.3f}s")
        else:
            self.logger.error(f"Failed {self.operation} after {self.duration:.3f}s: {exc_val}")
