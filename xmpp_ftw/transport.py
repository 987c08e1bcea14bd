"""
Socket transport contract.

XMPP-FTW does not own a network socket towards its client application.
The embedder hands a Session anything implementing SocketTransport:
named inbound events with (data, callback) handlers and named outbound
notifications.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Tuple


logger = logging.getLogger('xmpp-ftw.transport')

Handler = Callable[[Any, Optional[Callable]], Any]


class SocketTransport(ABC):
    """Bidirectional message socket as seen by a Session."""

    @abstractmethod
    def on(self, event: str, handler: Handler) -> None:
        """Subscribe `handler(data, callback)` to an inbound event."""

    @abstractmethod
    def remove_all_listeners(self, event: str) -> None:
        """Drop every handler subscribed to `event`."""

    @abstractmethod
    def send(self, event: str, payload: Any) -> None:
        """Deliver an outbound notification to the client application."""

    @abstractmethod
    def end(self) -> None:
        """Close the socket."""


class LocalSocket(SocketTransport):
    """
    In-process socket.

    Inbound events are delivered with receive(); outbound notifications are
    recorded in `sent` and forwarded to `on_send` when one is given.
    """

    def __init__(self, on_send: Optional[Callable[[str, Any], None]] = None):
        self.on_send = on_send
        self.handlers: Dict[str, List[Handler]] = {}
        self.sent: List[Tuple[str, Any]] = []
        self.ended = False

    def on(self, event: str, handler: Handler) -> None:
        self.handlers.setdefault(event, []).append(handler)

    def remove_all_listeners(self, event: str) -> None:
        self.handlers.pop(event, None)

    def send(self, event: str, payload: Any) -> None:
        if self.ended:
            logger.debug(f"Dropping '{event}' on ended socket")
            return
        self.sent.append((event, payload))
        if self.on_send:
            self.on_send(event, payload)

    def end(self) -> None:
        self.ended = True

    def receive(self, event: str, data: Any = None,
                callback: Optional[Callable] = None) -> bool:
        """
        Deliver an inbound event to its handlers.

        Returns:
            bool: True if at least one handler was subscribed
        """
        handlers = list(self.handlers.get(event, []))
        if not handlers:
            logger.debug(f"No handler for inbound event '{event}'")
            return False
        for handler in handlers:
            handler(data, callback)
        return True

    def sent_events(self, event: str) -> List[Any]:
        """Payloads sent so far for one event name."""
        return [payload for name, payload in self.sent if name == event]
