"""
Command-line interface for the Article Updater.

Uses Typer to select a work mode and override logging settings. Results
are printed to stdout as JSON; logs and errors go to stderr. Supports
loading .env files for API key and endpoint configuration.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import typer

from .config import load_config
from .core.errors import ArticleUpdaterError
from .llm.tracing import flush
from .runner import MODES, run_pipeline

try:
    from dotenv import load_dotenv
except Exception:  # noqa: BLE001
    load_dotenv = None

app = typer.Typer(add_completion=False)


@app.command()
def run(
    mode: str = typer.Option(
        "latest", "--mode", "-m", help=f"Work mode: {', '.join(MODES)}."
    ),
    limit: int = typer.Option(5, "--limit", help="Articles to publish in 'all' mode."),
    article_id: int | None = typer.Option(None, "--id", help="Article id for 'one' mode."),
    skip: int = typer.Option(
        0, "--skip", help="Offset into the oldest originals for 'one' mode."
    ),
    config: Path | None = typer.Option(Path("config.yaml"), "--config", "-c"),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_format: str | None = typer.Option(
        None, "--log-format", help="Log file format: jsonl or plain."
    ),
    log_file: bool | None = typer.Option(
        None, "--log-file/--no-log-file", help="Enable or disable file logging."
    ),
):
    """Rewrite stored articles with external references.

    Args:
        mode: latest, all, update-five, dedupe or one
        limit: Number of articles to publish in 'all' mode
        article_id: Explicit article id for 'one' mode
        skip: Offset into the oldest-originals queue for 'one' mode
        config: Optional path to YAML config file
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Log file format (jsonl, plain)
        log_file: Enable/disable file logging
    """
    if load_dotenv is not None:
        load_dotenv()

    cfg = load_config(str(config) if config else None)

    if log_level:
        cfg.logging.level = log_level
    if log_format:
        cfg.logging.format = log_format
    if log_file is not None:
        cfg.logging.file = log_file

    try:
        result = asyncio.run(
            run_pipeline(mode, cfg, limit=limit, article_id=article_id, skip=max(0, skip))
        )
    except ArticleUpdaterError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    finally:
        flush()

    if isinstance(result, list):
        for item in result:
            typer.echo(json.dumps(item, ensure_ascii=False))
    else:
        typer.echo(json.dumps(result, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    app()
