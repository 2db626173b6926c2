"""Backing article store client."""

from .client import ArticleStore

__all__ = ["ArticleStore"]
