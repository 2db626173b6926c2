"""Reference selection and rewriting stages."""

from .reference_selector import ReferenceSelector
from .rewriter import RewriteEngine, RewriteResult, simple_rewrite, with_citations

__all__ = [
    "ReferenceSelector",
    "RewriteEngine",
    "RewriteResult",
    "simple_rewrite",
    "with_citations",
]
