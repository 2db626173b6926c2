"""
Article Updater - reference-augmented rewriting of stored articles.

This package picks original articles from a backing store, finds two
substantive external references for each, rewrites the article with an
LLM provider cascade and publishes the result as the article's single
"updated" counterpart.

Main entry point is the CLI via the `article-updater` command.

Example:
    $ article-updater --mode update-five
"""

__all__ = ["__version__", "ArticleRecord", "Pipeline", "base_identity"]
__version__ = "0.1.0"

from .core.types import ArticleRecord
from .core.urls import base_identity
from .runner import Pipeline
