"""
Reference page fetching and extraction.

This package handles HTTP fetching and content extraction
for external reference articles.
"""

from .extractor import ContentExtractor, extract_content, sanitize_html
from .fetcher import FetchResult, build_http_client, fetch_url

__all__ = [
    "ContentExtractor",
    "extract_content",
    "sanitize_html",
    "FetchResult",
    "build_http_client",
    "fetch_url",
]
