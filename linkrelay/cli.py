from __future__ import annotations

from pathlib import Path
from typing import List

import typer

from .version import __version__
from .connection import SessionLoggedOut
from .fetchers.base import DEFAULT_TIMEOUT, MAX_CONTENT_SIZE
from .fetchers.manager import DEFAULT_ORDER
from .relay.classify import MAX_TEXT_CHARS
from .relay.messages import ErrorMessage
from .transport.bridge import DEFAULT_BRIDGE_URL
from .utils.logging import setup_logger
from .pipeline import RunConfig, fetch_once, run


app = typer.Typer(add_completion=False, help="Relay the content behind links posted in WhatsApp chats.")


def _load_dotenv() -> None:
    # Load environment variables from .env if present (best-effort)
    try:
        from dotenv import load_dotenv  # type: ignore

        load_dotenv()
    except Exception:
        pass


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", help="Print version and exit", callback=_version_callback, is_eager=True
    ),
):
    _load_dotenv()


@app.command()
def serve(
    bridge_url: str = typer.Option(DEFAULT_BRIDGE_URL, "--bridge-url", envvar="LINKRELAY_BRIDGE_URL", help="WhatsApp bridge REST API"),
    host: str = typer.Option("127.0.0.1", "--host", envvar="LINKRELAY_HOST", help="Webhook listen address"),
    port: int = typer.Option(9090, "--port", envvar="LINKRELAY_PORT", help="Webhook listen port"),
    scratch_dir: Path = typer.Option(Path("temp"), "--scratch-dir", envvar="LINKRELAY_SCRATCH_DIR", help="Directory for downloaded media"),
    session_dir: Path = typer.Option(Path("session"), "--session-dir", envvar="LINKRELAY_SESSION_DIR", help="Bridge session directory (informational)"),
    timeout: float = typer.Option(DEFAULT_TIMEOUT, "--timeout", envvar="LINKRELAY_TIMEOUT", help="Per-strategy timeout seconds"),
    max_bytes: int = typer.Option(MAX_CONTENT_SIZE, "--max-bytes", envvar="LINKRELAY_MAX_BYTES", help="Largest resource to relay"),
    max_text_chars: int = typer.Option(MAX_TEXT_CHARS, "--max-text-chars", envvar="LINKRELAY_MAX_TEXT_CHARS", help="Truncate text replies after this many characters"),
    strategy: List[str] = typer.Option(None, "--strategy", envvar="LINKRELAY_STRATEGIES", help="Fetch strategy, in order (repeatable)", show_default=False),
    cleanup_interval: float = typer.Option(3600.0, "--cleanup-interval", envvar="LINKRELAY_CLEANUP_INTERVAL", help="Seconds between scratch sweeps"),
    cleanup_max_age: float = typer.Option(7200.0, "--cleanup-max-age", envvar="LINKRELAY_CLEANUP_MAX_AGE", help="Delete scratch files older than this many seconds"),
    reconnect_delay: float = typer.Option(5.0, "--reconnect-delay", envvar="LINKRELAY_RECONNECT_DELAY", help="Seconds between bridge connection attempts"),
    health_interval: float = typer.Option(30.0, "--health-interval", envvar="LINKRELAY_HEALTH_INTERVAL", help="Seconds between bridge health checks"),
    log_level: str = typer.Option("INFO", "--log-level", envvar="LINKRELAY_LOG_LEVEL", help="Logging level"),
):
    """Listen for chat events from the bridge and relay the first link of each message."""
    setup_logger(log_level)
    cfg = RunConfig(
        bridge_url=bridge_url,
        host=host,
        port=port,
        scratch_dir=scratch_dir,
        session_dir=session_dir,
        timeout=timeout,
        max_bytes=max_bytes,
        max_text_chars=max_text_chars,
        strategies=list(strategy or DEFAULT_ORDER),
        cleanup_interval=cleanup_interval,
        cleanup_max_age=cleanup_max_age,
        reconnect_delay=reconnect_delay,
        health_interval=health_interval,
        log_level=log_level,
    )
    try:
        run(cfg)
    except SessionLoggedOut as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)


@app.command()
def fetch(
    link: str = typer.Argument(..., help="Link to fetch, with or without a scheme"),
    scratch_dir: Path = typer.Option(Path("temp"), "--scratch-dir", envvar="LINKRELAY_SCRATCH_DIR", help="Directory for downloaded media"),
    timeout: float = typer.Option(DEFAULT_TIMEOUT, "--timeout", envvar="LINKRELAY_TIMEOUT", help="Per-strategy timeout seconds"),
    strategy: List[str] = typer.Option(None, "--strategy", envvar="LINKRELAY_STRATEGIES", help="Fetch strategy, in order (repeatable)", show_default=False),
    log_level: str = typer.Option("INFO", "--log-level", envvar="LINKRELAY_LOG_LEVEL", help="Logging level"),
):
    """Relay a single link to the terminal instead of a chat."""
    setup_logger(log_level)
    cfg = RunConfig(scratch_dir=scratch_dir, timeout=timeout, strategies=list(strategy or DEFAULT_ORDER), log_level=log_level)
    outcome = fetch_once(cfg, link)
    if outcome is None or isinstance(outcome, ErrorMessage):
        raise typer.Exit(code=1)


def entrypoint():
    app()

if __name__ == "__main__":
    entrypoint()
