"""Inbound webhook: the bridge POSTs chat events here."""

from __future__ import annotations

import json
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Tuple, Type

from ..listener import MessageListener
from ..utils.logging import get_logger


logger = get_logger(__name__)

WEBHOOK_PATH = "/webhook"


def make_handler(listener: MessageListener) -> Type[BaseHTTPRequestHandler]:
    class WebhookHandler(BaseHTTPRequestHandler):
        def _reply(self, status: int, body: bytes = b"") -> None:
            self.send_response(status)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            if body:
                self.wfile.write(body)

        def do_POST(self):
            if self.path.split("?", 1)[0] != WEBHOOK_PATH:
                self._reply(404)
                return

            try:
                content_length = int(self.headers.get("Content-Length", 0) or 0)
            except ValueError:
                content_length = -1
            if content_length < 0:
                self._reply(400, b"Invalid Content-Length")
                return
            body = self.rfile.read(content_length)
            try:
                event = json.loads(body)
            except (json.JSONDecodeError, UnicodeDecodeError):
                self._reply(400, b"Invalid JSON")
                return
            if not isinstance(event, dict):
                self._reply(400, b"Expected a JSON object")
                return

            try:
                listener.handle_event(event)
            except Exception:
                logger.exception("Error handling webhook event")
                self._reply(500, b"Error")
                return
            self._reply(200, b"OK")

        def log_message(self, format, *args):
            logger.debug("webhook: " + format % args)

    return WebhookHandler


def make_server(listener: MessageListener, address: Tuple[str, int]) -> HTTPServer:
    server = HTTPServer(address, make_handler(listener))
    host, port = server.server_address[:2]
    logger.info(f"Webhook server listening on http://{host}:{port}{WEBHOOK_PATH}")
    return server
