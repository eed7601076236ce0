"""
CLI Module

Rich output helpers shared by the command modules.
"""

from .formatting import (
    console,
    format_comparison_table,
    format_breakdown_table,
    format_pronunciation_table,
    format_story_table,
    display_feedback,
    display_error,
    display_success,
    display_warning,
    print_json,
)

__all__ = [
    'console',
    'format_comparison_table',
    'format_breakdown_table',
    'format_pronunciation_table',
    'format_story_table',
    'display_feedback',
    'display_error',
    'display_success',
    'display_warning',
    'print_json',
]
