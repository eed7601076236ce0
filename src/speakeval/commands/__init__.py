"""
Commands Package

Click commands registered on the speakeval CLI group.
"""

from .scoring import score
from .evaluate import pronounce, story
from .health import health
from .config import show as config_show

__all__ = ['score', 'pronounce', 'story', 'health', 'config_show']
