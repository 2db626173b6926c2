"""
Shared utility functions.

This package contains utility code used across multiple
pipeline stages.
"""

from .logging import JsonlFormatter, log_event, scrub_text, setup_llm_logger, setup_logging

__all__ = [
    "setup_logging",
    "setup_llm_logger",
    "log_event",
    "scrub_text",
    "JsonlFormatter",
]
