"""
Listener contract shared by every feature module (roster, presence, chat).

A listener serves a set of socket events once its Session is online and
claims inbound stanzas through handles()/handle(). Returning False from
handle() lets later listeners in the chain see the same stanza.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from slixmpp.jid import JID, InvalidJID

from ..errors import ClientError, XmppFtwError


def jid_to_dict(value) -> Optional[Dict[str, str]]:
    """Split a JID into the {domain, local?, resource?} payload form."""
    if value is None or str(value) == '':
        return None
    try:
        jid = JID(str(value))
    except InvalidJID:
        return {'domain': str(value)}
    data = {'domain': jid.domain}
    if jid.user:
        data['local'] = jid.user
    if jid.resource:
        data['resource'] = jid.resource
    return data


class Listener:
    """
    Base class for feature listeners.

    Subclasses map socket event names to method names in `events`. Each
    method is called as method(data, callback).
    """

    name = 'listener'
    events: Dict[str, str] = {}

    def __init__(self):
        self.manager = None
        self.socket = None
        self.logger = logging.getLogger(f'xmpp-ftw.{self.name}')
        self._registered: List[str] = []

    @property
    def client(self):
        return self.manager.client if self.manager else None

    def init(self, manager, ignore_events: bool = False) -> None:
        """
        Attach to a Session that has just come online.

        Args:
            manager: Owning Session (lookup only)
            ignore_events: Skip socket event registration
        """
        self.manager = manager
        self.socket = manager.socket
        if not ignore_events:
            self.register_events()

    def register_events(self) -> None:
        # Re-initialization after a re-login must not double-subscribe
        self.unregister_events()
        for event, method_name in self.events.items():
            self.socket.on(event, self._socket_handler(event, getattr(self, method_name)))
            self._registered.append(event)

    def unregister_events(self) -> None:
        if self.socket is None:
            return
        for event in self._registered:
            self.socket.remove_all_listeners(event)
        self._registered = []

    def _socket_handler(self, event: str, method: Callable) -> Callable:
        def handler(data, callback=None):
            try:
                return method(data or {}, callback)
            except ClientError as e:
                return self.client_error(e.description, data, callback)
            except XmppFtwError as e:
                self.logger.warning(f"'{event}' failed: {e}")
                return self._reply_error(e.to_payload(), callback)
            except Exception as e:
                self.logger.exception(f"Unexpected failure handling '{event}': {e}")
                return self._reply_error({
                    'type': 'cancel',
                    'condition': 'unknown',
                    'description': str(e),
                    'request': data,
                }, callback)
        return handler

    def handles(self, stanza) -> bool:
        return False

    def handle(self, stanza) -> bool:
        return False

    # ============================================================================
    # Helpers for subclasses
    # ============================================================================

    def emit(self, event: str, payload: Any) -> None:
        self.socket.send(event, payload)

    def send(self, stanza) -> None:
        self.manager.send(stanza)

    def client_error(self, message: str, original: Any, callback: Optional[Callable] = None):
        """
        Report a bad socket request.

        The error goes to the request callback when there is one, otherwise it
        is emitted as `xmpp.error.client`.
        """
        error = {
            'type': 'modify',
            'condition': 'client-error',
            'description': message,
            'request': original,
        }
        return self._reply_error(error, callback, event='xmpp.error.client')

    def _reply_error(self, error: Dict[str, Any], callback: Optional[Callable],
                     event: str = 'xmpp.error'):
        if callable(callback):
            return callback(error, None)
        self.emit(event, error)

    def parse_error(self, stanza) -> Dict[str, Any]:
        """Extract {type, condition, description?} from a stanza's <error/>."""
        error = stanza.get_plugin('error', check=True)
        if error is None:
            return {'type': 'cancel', 'condition': 'unknown'}
        parsed = {
            'type': error['type'] or 'cancel',
            'condition': error['condition'] or 'unknown',
        }
        if error['text']:
            parsed['description'] = error['text']
        return parsed
