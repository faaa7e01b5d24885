from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .cleanup import CLEANUP_INTERVAL, MAX_FILE_AGE, TempReaper, sweep
from .connection import ConnectionWatchdog, SessionLoggedOut, wait_until_connected
from .fetchers.base import DEFAULT_TIMEOUT, MAX_CONTENT_SIZE
from .fetchers.manager import DEFAULT_ORDER, Fetcher, build_strategies
from .listener import MessageListener
from .relay.classify import MAX_TEXT_CHARS
from .relay.handler import LinkRelay, MessageSender
from .relay.messages import RelayOutcome
from .scratch import ScratchDirectory
from .transport.bridge import DEFAULT_BRIDGE_URL, BridgeClient
from .transport.console import ConsoleClient
from .transport.webhook import make_server
from .utils.logging import get_logger
from .utils.size import format_size


@dataclass
class RunConfig:
    bridge_url: str = DEFAULT_BRIDGE_URL
    host: str = "127.0.0.1"
    port: int = 9090
    scratch_dir: Path = Path("temp")
    session_dir: Path = Path("session")  # owned by the bridge, logged only
    timeout: float = DEFAULT_TIMEOUT
    max_bytes: int = MAX_CONTENT_SIZE
    max_text_chars: int = MAX_TEXT_CHARS
    strategies: List[str] = field(default_factory=lambda: list(DEFAULT_ORDER))
    cleanup_interval: float = CLEANUP_INTERVAL
    cleanup_max_age: float = MAX_FILE_AGE
    reconnect_delay: float = 5.0
    health_interval: float = 30.0
    log_level: str = "INFO"


def build_relay(cfg: RunConfig, sender: MessageSender) -> LinkRelay:
    fetcher = Fetcher(build_strategies(cfg.strategies), timeout=cfg.timeout, max_bytes=cfg.max_bytes)
    scratch = ScratchDirectory(cfg.scratch_dir)
    scratch.ensure()
    return LinkRelay(sender, fetcher, scratch, max_bytes=cfg.max_bytes, max_text_chars=cfg.max_text_chars)


def fetch_once(cfg: RunConfig, link: str, client: Optional[ConsoleClient] = None) -> Optional[RelayOutcome]:
    client = client or ConsoleClient()
    relay = build_relay(cfg, client)
    return relay.relay(link, "console")


def run(cfg: RunConfig) -> None:
    logger = get_logger()
    logger.info(f"Bridge API: {cfg.bridge_url}")
    logger.info(f"Scratch directory: {cfg.scratch_dir} (session state in {cfg.session_dir})")
    logger.info(f"Fetch strategies: {', '.join(cfg.strategies)}; size cap {format_size(cfg.max_bytes)}")

    with BridgeClient(cfg.bridge_url) as bridge:
        wait_until_connected(bridge, retry_delay=cfg.reconnect_delay)

        relay = build_relay(cfg, bridge)
        listener = MessageListener(relay, receipts=bridge)
        server = make_server(listener, (cfg.host, cfg.port))

        sweep(cfg.scratch_dir, cfg.cleanup_max_age)
        reaper = TempReaper(cfg.scratch_dir, interval=cfg.cleanup_interval, max_age=cfg.cleanup_max_age)
        watchdog = ConnectionWatchdog(bridge, on_logged_out=server.shutdown, interval=cfg.health_interval)
        reaper.start()
        watchdog.start()
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            logger.info("Shutting down")
        finally:
            watchdog.stop(timeout=1.0)
            reaper.stop(timeout=1.0)
            server.server_close()

    if watchdog.logged_out:
        raise SessionLoggedOut("WhatsApp session is logged out; re-link the bridge")
