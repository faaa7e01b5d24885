"""Bridge connectivity: wait for the session to come up and watch it afterwards."""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Dict, Optional, Protocol

from .transport.bridge import BridgeError
from .utils.logging import get_logger


logger = get_logger(__name__)

CONNECTED = "connected"
LOGGED_OUT = "logged_out"


class SessionLoggedOut(RuntimeError):
    pass


class HealthSource(Protocol):
    def health(self) -> Dict[str, Any]:
        ...


def check_connection(bridge: HealthSource) -> str:
    """Return the bridge's session status, raising SessionLoggedOut when logged out."""
    status = str(bridge.health().get("status", "")).lower()
    if status == LOGGED_OUT:
        raise SessionLoggedOut("WhatsApp session is logged out; re-link the bridge")
    return status


def wait_until_connected(
    bridge: HealthSource,
    retry_delay: float = 5.0,
    max_attempts: Optional[int] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    attempt = 0
    while True:
        attempt += 1
        try:
            status = check_connection(bridge)
        except BridgeError as e:
            status = None
            logger.warning(f"Bridge unreachable: {e}")
        if status == CONNECTED:
            logger.info("Connection opened successfully!")
            return
        if status is not None:
            logger.info(f"Bridge status is '{status}', waiting")
        if max_attempts is not None and attempt >= max_attempts:
            raise BridgeError(f"Bridge not connected after {attempt} attempts")
        sleep(retry_delay)


class ConnectionWatchdog:
    """Re-checks the bridge periodically and calls ``on_logged_out`` once logged out."""

    def __init__(self, bridge: HealthSource, on_logged_out: Callable[[], None], interval: float = 30.0) -> None:
        self.bridge = bridge
        self.on_logged_out = on_logged_out
        self.interval = interval
        self.logged_out = False
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        self._thread = threading.Thread(target=self._run, name="linkrelay-watchdog", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)

    def tick(self) -> bool:
        """One health check. Returns False once the session is logged out."""
        try:
            status = check_connection(self.bridge)
        except SessionLoggedOut as e:
            logger.error(str(e))
            self.logged_out = True
            self.on_logged_out()
            return False
        except BridgeError as e:
            logger.warning(f"Connection closed, will retry: {e}")
            return True
        if status != CONNECTED:
            logger.info(f"Bridge status is '{status}', reconnecting")
        return True

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            if not self.tick():
                return
