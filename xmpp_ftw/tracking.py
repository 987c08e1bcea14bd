"""
Correlation of outgoing stanza ids with their replies.

A component that sends a stanza expecting a reply registers a one-shot
callback under the stanza id. The first inbound stanza carrying that id is
delivered to the callback instead of the listener chain.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple


TrackedCallback = Callable[[Any], Any]


def stanza_id(stanza) -> Optional[str]:
    """Read the id attribute of a slixmpp stanza (or anything dict-like)."""
    try:
        value = stanza['id']
    except (KeyError, TypeError):
        return None
    return str(value) if value else None


class CorrelationTable:
    """
    Pending request id -> callback.

    Entries older than `timeout` seconds are evicted without being called.
    Eviction happens lazily on track_id()/catch_tracked() and on expire().
    """

    def __init__(self, timeout: Optional[float] = 300.0,
                 logger: Optional[logging.Logger] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.timeout = timeout
        self.logger = logger or logging.getLogger('xmpp-ftw.tracking')
        self._clock = clock
        # {id: (callback, registered_at)}
        self._entries: Dict[str, Tuple[TrackedCallback, float]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, identifier) -> bool:
        return str(identifier) in self._entries

    def track_id(self, identifier: str, callback: TrackedCallback) -> None:
        """
        Register `callback` for the reply with `identifier`.

        A second registration for the same id replaces the first.
        """
        self.expire()
        key = str(identifier)
        if key in self._entries:
            self.logger.debug(f"Replacing tracked callback for id {key}")
        self._entries[key] = (callback, self._clock())

    def catch_tracked(self, stanza) -> bool:
        """
        Deliver `stanza` to its tracked callback, if any.

        Returns:
            bool: True if the stanza was consumed by a tracked callback
        """
        self.expire()
        key = stanza_id(stanza)
        if key is None:
            return False
        entry = self._entries.pop(key, None)
        if entry is None:
            return False
        callback, _ = entry
        callback(stanza)
        return True

    def expire(self) -> int:
        """
        Evict entries older than the timeout.

        Returns:
            int: Number of evicted entries
        """
        if self.timeout is None or not self._entries:
            return 0
        deadline = self._clock() - self.timeout
        stale = [key for key, (_, registered_at) in self._entries.items() if registered_at <= deadline]
        for key in stale:
            del self._entries[key]
            self.logger.warning(f"No reply for tracked id {key} after {self.timeout}s, dropping callback")
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
