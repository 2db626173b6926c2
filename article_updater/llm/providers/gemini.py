"""Google Gemini provider for article rewrites."""

from __future__ import annotations

from typing import Any

import httpx

from ...core.types import ArticleRecord
from ..tracing import record_span_error, set_span_output, start_span
from .base import RewriteProvider


class GeminiProvider(RewriteProvider):
    """Gemini-backed rewrite provider using the ``generateContent`` endpoint."""

    async def rewrite(self, original: ArticleRecord, system: str, user: str) -> str:
        payload = {
            "systemInstruction": {"parts": [{"text": system}]},
            "contents": [{"role": "user", "parts": [{"text": user}]}],
            "generationConfig": {"temperature": self.cfg.temperature},
        }
        with start_span(
            "gemini.rewrite",
            kind="llm",
            input_value=user,
            attributes={
                "llm.model": self.cfg.model,
                "llm.provider": "gemini",
                "article.id": original.id,
                "article.title": original.title,
            },
        ) as span:
            try:
                data = await self._post(payload)
            except (httpx.HTTPError, ValueError) as exc:
                record_span_error(span, exc)
                self._log_llm_response(original, "provider_error", str(exc), user)
                return ""
            content = _extract_text(data)
            set_span_output(span, content)
            self._log_llm_response(original, "ok" if content else "empty", content, user)
            return content.strip()

    async def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.cfg.base_url.rstrip('/')}/v1beta/models/{self.cfg.model}:generateContent"
        params = {"key": self.api_key}
        async with httpx.AsyncClient(timeout=self.timeout, trust_env=self.cfg.trust_env) as client:
            resp = await client.post(url, params=params, json=payload)
            resp.raise_for_status()
            return resp.json()


def _extract_text(data: dict[str, Any]) -> str:
    """Join the non-thought text parts of the first candidate.

    Falls back to every text part when the model returned only thoughts.
    """
    try:
        parts = data["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        return ""
    texts = [p.get("text", "") for p in parts if isinstance(p, dict) and not p.get("thought")]
    if not any(texts):
        texts = [p.get("text", "") for p in parts if isinstance(p, dict)]
    return "".join(texts)
