"""
Core data types, URL identity and lineage rules.

This package contains the data model shared by every pipeline stage.
"""

from .errors import (
    ArticleUpdaterError,
    FetchFailure,
    InsufficientReferences,
    ParseFailure,
    RewriteFailure,
    StoreFailure,
)
from .types import ArticleRecord, ExtractedContent, Reference, SearchDecision
from .urls import UrlClassifier, base_identity

__all__ = [
    "ArticleRecord",
    "ExtractedContent",
    "Reference",
    "SearchDecision",
    "UrlClassifier",
    "base_identity",
    "ArticleUpdaterError",
    "FetchFailure",
    "ParseFailure",
    "InsufficientReferences",
    "RewriteFailure",
    "StoreFailure",
]
