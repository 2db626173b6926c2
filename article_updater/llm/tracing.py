"""
Optional Langfuse tracing for pipeline runs.

Spans wrap the whole run, each processed article and each provider call.
When tracing is disabled or unconfigured every helper is a no-op, and a
failing tracer never interrupts the pipeline.
"""

from __future__ import annotations

from contextlib import contextmanager
import json
import os
from typing import Any, Iterator

from ..config import LangfuseConfig
from ..utils.logging import scrub_text

_TRACER = None
_CFG: LangfuseConfig | None = None


def setup_langfuse(cfg: LangfuseConfig) -> None:
    """Create the Langfuse client when tracing is enabled and both keys are set."""
    global _TRACER, _CFG  # noqa: PLW0603
    _CFG = cfg
    _TRACER = None
    public_key = cfg.public_key or os.getenv("LANGFUSE_PUBLIC_KEY")
    secret_key = cfg.secret_key or os.getenv("LANGFUSE_SECRET_KEY")
    if not cfg.enabled or not public_key or not secret_key:
        return

    try:
        from langfuse import Langfuse  # type: ignore
    except Exception:  # noqa: BLE001
        return

    _TRACER = Langfuse(
        public_key=public_key,
        secret_key=secret_key,
        base_url=cfg.base_url or os.getenv("LANGFUSE_BASE_URL"),
        environment=cfg.environment or os.getenv("LANGFUSE_ENVIRONMENT"),
        release=cfg.release or os.getenv("LANGFUSE_RELEASE"),
        timeout=cfg.timeout_seconds,
    )


@contextmanager
def start_span(
    name: str,
    kind: str,
    input_value: Any | None = None,
    attributes: dict[str, Any] | None = None,
) -> Iterator[Any | None]:
    """Yield a Langfuse span, or None when tracing is off."""
    if _TRACER is None:
        yield None
        return

    metadata = {k: v if isinstance(v, (str, int, float, bool)) else str(v)
                for k, v in (attributes or {}).items() if v is not None}
    metadata.setdefault("span.kind", kind)
    try:
        cm = _TRACER.start_as_current_span(name=name, input=_payload(input_value), metadata=metadata)
        span = cm.__enter__()
    except Exception:  # noqa: BLE001
        yield None
        return

    try:
        yield span
    finally:
        try:
            cm.__exit__(None, None, None)
        except Exception:  # noqa: BLE001
            pass


def set_span_output(span: Any | None, output_value: Any) -> None:
    if span is not None and output_value is not None:
        _safe_update(span, output=_payload(output_value))


def record_span_error(span: Any | None, exc: Exception) -> None:
    if span is not None:
        _safe_update(span, level="ERROR", status_message=str(exc))


def flush() -> None:
    """Send pending traces before the process exits."""
    if _TRACER is None:
        return
    try:
        _TRACER.flush()
    except Exception:  # noqa: BLE001
        return


def _payload(value: Any) -> str | None:
    if value is None:
        return None
    text = value if isinstance(value, str) else json.dumps(value, ensure_ascii=True, default=str)
    if _CFG is None:
        return text
    return scrub_text(text, _CFG.redaction, _CFG.max_text_chars)


def _safe_update(span: Any, **kwargs: Any) -> None:
    try:
        span.update(**kwargs)
    except Exception:  # noqa: BLE001
        return
