# utils/__init__.py
"""General utility functions for the card news generator."""

from .logging import setup_logging_cardnews
from .placeholder import create_placeholder_image, render_placeholder
from .similarity import batch_cosine_similarity, sample_without_replacement

__all__ = [
    "batch_cosine_similarity",
    "create_placeholder_image",
    "render_placeholder",
    "sample_without_replacement",
    "setup_logging_cardnews",
]
