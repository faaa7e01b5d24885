from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ..relay.messages import ErrorMessage, RelayOutcome, TextMessage


class ConsoleClient:
    """Prints relayed messages instead of sending them to a chat."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()
        self.sent: List[Tuple[str, RelayOutcome]] = []

    def send(self, chat_id: str, message: RelayOutcome) -> None:
        self.sent.append((chat_id, message))
        if isinstance(message, (TextMessage, ErrorMessage)):
            style = "red" if isinstance(message, ErrorMessage) else "green"
            self.console.print(Panel(Text(message.text), title=f"{message.kind} → {chat_id}", border_style=style))
            return
        fields = {k: str(v) for k, v in vars(message).items()}
        body = "\n".join(f"{k}: {v}" for k, v in fields.items())
        self.console.print(Panel(Text(body), title=f"{message.kind} → {chat_id}", border_style="cyan"))

    def mark_read(self, chat_id: str, message_ids: Iterable[str]) -> None:
        pass
