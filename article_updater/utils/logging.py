"""
Logging setup for pipeline runs.

Console output goes through Rich on stderr, keeping stdout for the JSON
results printed by the CLI. File logs and the optional LLM interaction
log are written as JSON lines, one event per line, with the structured
fields passed to ``log_event`` inlined into each record.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
import re
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

from ..config import LoggingConfig


LOGGER_NAME = "article_updater"

_URL_RE = re.compile(r"https?://\S+")
# Attributes every LogRecord carries; anything else came in through ``extra``
_RECORD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message"}


def setup_logging(cfg: LoggingConfig, log_dir: Path | None = None) -> logging.Logger:
    logger = _reset_logger(LOGGER_NAME, cfg.level)

    if cfg.console:
        console_handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_time=False,
        )
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(console_handler)

    if cfg.file:
        formatter = JsonlFormatter() if cfg.format == "jsonl" else logging.Formatter(
            "%(asctime)s %(levelname)s %(message)s"
        )
        _add_file_handler(logger, log_dir or Path(cfg.directory), cfg.filename, formatter)
    return logger


def setup_llm_logger(cfg: LoggingConfig, log_dir: Path | None = None) -> logging.Logger | None:
    """Return the dedicated rewrite-response logger, or None when disabled."""
    if not cfg.llm_log_enabled:
        return None
    logger = _reset_logger(f"{LOGGER_NAME}.llm", cfg.level)
    _add_file_handler(logger, log_dir or Path(cfg.directory), cfg.llm_log_file, JsonlFormatter())
    return logger


def log_event(logger: logging.Logger | None, message: str, **fields: Any) -> None:
    if logger is None:
        return
    logger.info(message, extra=fields)


def scrub_text(text: str, mode: str, max_chars: int = 20000) -> str:
    """Apply a redaction mode to prompt/response text and cap its length.

    Modes: ``none`` keeps text, ``redact_content`` drops it entirely and
    ``redact_urls_authors`` masks URLs.
    """
    if mode == "redact_content":
        return ""
    if mode == "redact_urls_authors":
        text = _URL_RE.sub("[REDACTED_URL]", text)
    if len(text) > max_chars:
        return text[:max_chars] + "...(truncated)"
    return text


class JsonlFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update({k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS})
        return json.dumps(payload, ensure_ascii=True, default=str)


def _reset_logger(name: str, level: str) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.handlers = []
    logger.propagate = False
    return logger


def _add_file_handler(
    logger: logging.Logger, directory: Path, filename: str, formatter: logging.Formatter
) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(directory / filename, encoding="utf-8")
    handler.setFormatter(formatter)
    logger.addHandler(handler)
