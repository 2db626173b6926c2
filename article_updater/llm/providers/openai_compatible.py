"""OpenAI-compatible chat completions provider (OpenAI, Groq and similar)."""

from __future__ import annotations

from typing import Any

import httpx

from ...core.types import ArticleRecord
from ..tracing import record_span_error, set_span_output, start_span
from .base import RewriteProvider


class OpenAICompatibleProvider(RewriteProvider):
    """Provider speaking the ``/chat/completions`` protocol."""

    async def rewrite(self, original: ArticleRecord, system: str, user: str) -> str:
        payload = {
            "model": self.cfg.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": self.cfg.temperature,
        }
        with start_span(
            f"{self.label}.rewrite",
            kind="llm",
            input_value=user,
            attributes={
                "llm.model": self.cfg.model,
                "llm.provider": self.label,
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
        url = f"{self.cfg.base_url.rstrip('/')}/chat/completions"
        headers = {"Authorization": f"Bearer {self.api_key}"}
        async with httpx.AsyncClient(timeout=self.timeout, trust_env=self.cfg.trust_env) as client:
            resp = await client.post(url, json=payload, headers=headers)
            resp.raise_for_status()
            return resp.json()


def _extract_text(data: dict[str, Any]) -> str:
    try:
        return data["choices"][0]["message"]["content"] or ""
    except (KeyError, IndexError, TypeError):
        return ""
