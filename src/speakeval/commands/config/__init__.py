"""
Config Commands Package

This package contains configuration-related CLI commands:
- settings.py - Configuration display
"""

from .settings import show

__all__ = [
    'show'
]
