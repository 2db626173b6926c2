"""Prompt loading and rendering helpers for rewrite providers."""

from __future__ import annotations

from functools import lru_cache
import json
from pathlib import Path

from ..core.types import ArticleRecord, Reference


_PROMPT_DIR = Path(__file__).resolve().parent.parent / "prompts"


@lru_cache(maxsize=None)
def _load_template(name: str) -> str:
    path = _PROMPT_DIR / f"{name}.md"
    return path.read_text(encoding="utf-8").strip()


def build_rewrite_system_prompt() -> str:
    return _load_template("rewrite_system")


def build_rewrite_user_prompt(
    original: ArticleRecord,
    references: list[Reference],
    max_chars: int,
) -> str:
    """Serialize the original article and up to two references as JSON."""
    payload = {
        "original_title": original.title,
        "original_content": original.body()[:max_chars],
        "reference_1": references[0].text[:max_chars] if len(references) > 0 else "",
        "reference_2": references[1].text[:max_chars] if len(references) > 1 else "",
    }
    return json.dumps(payload, ensure_ascii=False)
