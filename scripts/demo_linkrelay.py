from __future__ import annotations

import argparse
from pathlib import Path

from linkrelay.listener import MessageListener
from linkrelay.pipeline import RunConfig, build_relay
from linkrelay.transport.console import ConsoleClient
from linkrelay.utils.logging import setup_logger


def main():
    p = argparse.ArgumentParser(description="Demo runner for linkrelay")
    p.add_argument("--text", action="append", help="Chat message text to feed the listener (repeatable)")
    p.add_argument("--strategy", action="append", help="Fetch strategy, in order (repeatable)")
    p.add_argument("--outdir", default="demo_outputs", help="Scratch directory for media")
    p.add_argument("--log-level", default="INFO", help="Log level")
    args = p.parse_args()

    setup_logger(args.log_level)
    texts = args.text or ["check https://example.com/ out", "api: https://httpbin.org/json"]
    cfg = RunConfig(scratch_dir=Path(args.outdir))
    if args.strategy:
        cfg.strategies = args.strategy

    client = ConsoleClient()
    listener = MessageListener(build_relay(cfg, client), receipts=client)
    for i, text in enumerate(texts):
        print(f"[demo] message: {text}")
        event = {
            "type": "notify",
            "messages": [{"key": {"remoteJid": "demo@s.whatsapp.net", "fromMe": False, "id": f"demo-{i}"}, "message": {"conversation": text}}],
        }
        if not listener.handle_event(event):
            print("[demo] no link found")


if __name__ == "__main__":
    main()
