"""
Reference candidate discovery.

This package contains the search providers, the response-shape
validator and the cascade that orders them.
"""

from .orchestrator import SearchOrchestrator, SearchOutcome
from .providers import (
    BingProvider,
    DuckDuckGoProvider,
    ProviderResult,
    SearchProvider,
    SearxProvider,
    SeedProvider,
)
from .seeds import topic_seeds
from .validator import classify_response, validate_payload, validate_response

__all__ = [
    "SearchOrchestrator",
    "SearchOutcome",
    "SearchProvider",
    "ProviderResult",
    "SearxProvider",
    "DuckDuckGoProvider",
    "BingProvider",
    "SeedProvider",
    "topic_seeds",
    "classify_response",
    "validate_payload",
    "validate_response",
]
