"""
XMPP-FTW Session - bridges a message socket to one slixmpp connection.

Three event sources meet here:
- socket commands: xmpp.login, xmpp.login.anonymous, xmpp.logout
- slixmpp lifecycle events: session_start (online), failed_auth,
  connection_failed, stream_error (errors), disconnected
- inbound stanzas, dispatched to the correlation table first and then to
  the listener chain (first listener whose handle() returns True wins)

Lifecycle:
    DISCONNECTED --login--> CONNECTING --session_start--> ONLINE
    CONNECTING/ONLINE --error/logout--> DISCONNECTED

Every login starts with a logout, so a Session owns at most one client.
Events from a client that has since been replaced are ignored.
"""

import inspect
import json
import logging
import socket as socket_module
import uuid
from enum import Enum
from functools import partial
from typing import Any, Callable, Dict, Iterable, List, Optional

from slixmpp import ClientXMPP
from slixmpp.jid import JID, InvalidJID
from slixmpp.xmlstream import ElementBase
from slixmpp.xmlstream.handler import Callback
from slixmpp.xmlstream.matcher.base import MatcherBase

from .config import Settings
from .credentials import Credentials, normalize_anonymous_login, normalize_login
from .errors import ProtocolError, RegistrationCancelled, ValidationError, XmppFtwError
from .listeners import Listener, default_listeners
from .tracking import CorrelationTable
from .transport import SocketTransport


REGISTRATION_ERROR_MESSAGE = 'Registration error'

# Keys holding a reference back to a containing object; serialized as its id
BACK_REFERENCE_KEYS = frozenset({'parent'})

STANZA_NAMES = frozenset({'message', 'presence', 'iq'})

# Stanza extensions the listeners read and write. Receipts are answered by the
# socket client (xmpp.chat.receipt), not automatically.
STANZA_PLUGINS = (
    ('xep_0071', None),
    ('xep_0085', None),
    ('xep_0184', {'auto_ack': False}),
    ('xep_0203', None),
    ('xep_0308', None),
)


class SessionState(str, Enum):
    """Connection lifecycle state."""
    DISCONNECTED = 'disconnected'
    CONNECTING = 'connecting'
    ONLINE = 'online'


class MatchClientStanza(MatcherBase):
    """Matches every message, presence and iq stanza."""

    def match(self, xml) -> bool:
        return getattr(xml, 'name', None) in STANZA_NAMES


def _noop(*args, **kwargs):
    return None


def _reference_id(value) -> Any:
    if value is None:
        return None
    if callable(value) and not isinstance(value, ElementBase):
        # weakref.ref
        try:
            value = value()
        except TypeError:
            return None
        if value is None:
            return None
    for getter in (lambda v: v['id'], lambda v: getattr(v, 'id')):
        try:
            identifier = getter(value)
        except (KeyError, TypeError, AttributeError):
            continue
        if isinstance(identifier, (str, int)):
            return identifier
    return None


def _to_serializable(value, seen: frozenset = frozenset()):
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if id(value) in seen:
        return None
    seen = seen | {id(value)}

    if isinstance(value, ElementBase):
        return str(value)
    if isinstance(value, BaseException):
        fields = {'name': type(value).__name__, 'message': str(value)}
        fields.update(vars(value))
        value = fields
    if isinstance(value, dict):
        result = {}
        for key, item in value.items():
            key = str(key)
            if key.startswith('_'):
                continue
            if key in BACK_REFERENCE_KEYS:
                result[key] = _reference_id(item)
            else:
                result[key] = _to_serializable(item, seen)
        return result
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_to_serializable(item, seen) for item in value]
    return str(value)


def serialize_error(error) -> str:
    """
    JSON description of a protocol error for the socket.

    Back-reference fields (`parent`) are replaced by the referenced object's
    id so cyclic structures serialize.
    """
    return json.dumps(_to_serializable(error), default=str)


def _error_message(error) -> str:
    message = getattr(error, 'message', None)
    if isinstance(message, str):
        return message
    return str(error)


def _connect_client(client, host: Optional[str], port: int):
    """Connect with host override across slixmpp API variants."""
    connect_method = getattr(client, 'connect', None)
    if not callable(connect_method):
        raise RuntimeError('Invalid slixmpp client: missing connect()')

    host_value = str(host or '').strip()
    if not host_value:
        return connect_method()

    param_names = set(inspect.signature(connect_method).parameters.keys())
    if 'host' in param_names and 'port' in param_names:
        return connect_method(host=host_value, port=int(port))
    return connect_method((host_value, int(port)))


class Session:
    """
    One socket connection bridged to (at most) one XMPP connection.

    Listeners see this object as their `manager`: they use client/send() to
    talk to the server, track_id() for replies, get_jid_type() for our own
    address and logger for diagnostics.
    """

    def __init__(
        self,
        socket: SocketTransport,
        listeners: Optional[Iterable[Listener]] = None,
        settings: Optional[Settings] = None,
        logger: Optional[logging.Logger] = None,
        client_factory: Callable[..., ClientXMPP] = ClientXMPP,
    ):
        """
        Args:
            socket: Transport towards the client application
            listeners: Ordered listener chain (default: roster, presence, chat)
            settings: Shared settings (default: Settings())
            logger: Session logger (default: the `xmpp-ftw.session` logger)
            client_factory: Builds the protocol client from (jid, password, **kwargs)
        """
        self.socket = socket
        self.settings = settings or Settings()
        self.logger = logger or logging.getLogger('xmpp-ftw.session')
        self.listeners: List[Listener] = list(listeners) if listeners is not None else default_listeners()
        self.tracking = CorrelationTable(timeout=self.settings.tracking_timeout, logger=self.logger)

        self.client: Optional[ClientXMPP] = None
        self.credentials: Optional[Credentials] = None
        self.state = SessionState.DISCONNECTED
        self.jid: Optional[str] = None
        self.full_jid: Optional[JID] = None
        self.domain: Optional[str] = None

        self._client_factory = client_factory
        self.register_socket_events()

    # ============================================================================
    # Listener chain
    # ============================================================================

    def add_listener(self, listener: Listener) -> None:
        """Put `listener` at the front of the chain."""
        if self.state is SessionState.ONLINE:
            listener.init(self)
        self.listeners.insert(0, listener)

    def clear_listeners(self) -> None:
        """Unregister every listener's events and empty the chain."""
        for listener in self.listeners:
            listener.unregister_events()
        self.listeners = []

    def _initialise_listeners(self) -> None:
        for listener in self.listeners:
            listener.init(self)

    # ============================================================================
    # Socket events
    # ============================================================================

    def register_socket_events(self) -> None:
        self.socket.on('xmpp.login', self._on_socket_login)
        self.socket.on('xmpp.login.anonymous', self._on_socket_anonymous_login)
        self.socket.on('xmpp.logout', self._on_socket_logout)

    def unregister_socket_events(self) -> None:
        for event in ('xmpp.login', 'xmpp.login.anonymous', 'xmpp.logout'):
            self.socket.remove_all_listeners(event)

    def _on_socket_login(self, data, callback=None):
        self.login(data)

    def _on_socket_anonymous_login(self, data, callback=None):
        self.anonymous_login(data)

    def _on_socket_logout(self, data=None, callback=None):
        self.logout(callback)

    # ============================================================================
    # Lifecycle
    # ============================================================================

    def login(self, data: Dict[str, Any]) -> None:
        """
        Password login. Any current connection is dropped first.

        Missing fields are reported and nothing is connected.
        """
        self.logout(_noop)
        try:
            credentials = normalize_login(data, self.settings.default_host, self.logger)
        except ValidationError as e:
            self.logger.warning(f"Login rejected: {e.description}")
            self.socket.send('xmpp.error', e.to_payload())
            return
        self._connect(credentials, data)

    def anonymous_login(self, data: Dict[str, Any]) -> None:
        """
        Anonymous login. Any current connection is dropped first.

        Without a jid nothing else happens.
        """
        self.logout(_noop)
        credentials = normalize_anonymous_login(data, self.logger)
        if credentials is None:
            return
        self._connect(credentials, data)

    def logout(self, callback: Optional[Callable] = None) -> None:
        """
        Drop the current XMPP connection.

        With a callback the socket stays open (a re-login follows) and the
        callback receives (None, True). Without one the socket is ended too.
        """
        if self.client is None:
            return
        client = self.client
        self.logger.info(f"Logging out {self.jid}")
        self._reset_connection()
        self.tracking.clear()
        self._disconnect_client(client)

        if callback is not None:
            callback(None, True)
            return
        self.socket.end()

    def close(self) -> None:
        """The owning socket has gone away."""
        self.logout()
        self.clear_listeners()
        self.unregister_socket_events()

    def _reset_connection(self) -> None:
        self.client = None
        self.credentials = None
        self.state = SessionState.DISCONNECTED
        self.jid = None
        self.full_jid = None
        self.domain = None

    def _connect(self, credentials: Credentials, request: Optional[Dict[str, Any]] = None) -> None:
        kwargs = {}
        sasl_mech = credentials.preferred_sasl_mechanism or self.settings.sasl_mech
        if sasl_mech:
            kwargs['sasl_mech'] = sasl_mech
        try:
            client = self._client_factory(credentials.client_jid, credentials.password or '', **kwargs)
        except InvalidJID as e:
            self.error(ValidationError(f'Invalid jid: {e}', request))
            return
        except Exception as e:
            self.error(e)
            return

        self.client = client
        self.credentials = credentials
        self.jid = credentials.jid
        self.domain = credentials.domain
        self.full_jid = None
        self.state = SessionState.CONNECTING

        port = credentials.port or self.settings.default_port
        try:
            self._configure_transport(client)
            self.register_xmpp_events(client)
            _connect_client(client, credentials.host, port)
        except Exception as e:
            self._reset_connection()
            self._disconnect_client(client)
            self.error(e)

    def _configure_transport(self, client) -> None:
        """Keep the connection alive and load the stanza extensions listeners rely on."""
        interval = self.settings.keepalive_interval
        client.whitespace_keepalive = True
        client.whitespace_keepalive_interval = interval
        client.register_plugin('xep_0199', {'keepalive': True, 'interval': interval})
        for plugin, config in STANZA_PLUGINS:
            client.register_plugin(plugin, config)
        client.add_event_handler('connected', partial(self._on_transport_connected, client))

    def _on_transport_connected(self, client, event=None) -> None:
        if client is not self.client:
            return
        transport = getattr(client, 'transport', None)
        sock = transport.get_extra_info('socket') if transport is not None else None
        if sock is None:
            return
        try:
            sock.setsockopt(socket_module.SOL_SOCKET, socket_module.SO_KEEPALIVE, 1)
        except OSError as e:
            self.logger.debug(f"Could not enable TCP keep-alive: {e}")

    def register_xmpp_events(self, client) -> None:
        client.add_event_handler('session_start', partial(self._on_online, client))
        for event in ('failed_auth', 'connection_failed', 'stream_error'):
            client.add_event_handler(event, partial(self._on_client_error, client))
        client.add_event_handler('disconnected', partial(self._on_disconnected, client))
        client.register_handler(Callback(
            'xmpp-ftw stanza dispatch',
            MatchClientStanza(None),
            partial(self._on_stanza, client),
        ))

    def _disconnect_client(self, client) -> None:
        try:
            client.disconnect()
        except Exception as e:
            self.logger.debug(f"XMPP disconnect() failed: {e}")

    # ============================================================================
    # Client events
    # ============================================================================

    def _on_online(self, client, event=None) -> None:
        if client is not self.client:
            return
        bound = client.boundjid
        self.jid = f"{bound.user}@{bound.domain}/{bound.resource}"
        self.full_jid = JID(self.jid)
        self.domain = self.full_jid.domain
        self.state = SessionState.ONLINE
        self.online()

    def online(self) -> None:
        self.logger.info(f"Connected as {self.jid}")
        self._initialise_listeners()
        self.socket.send('xmpp.connection', {'status': 'online', 'jid': self.jid})

    def _on_client_error(self, client, error) -> None:
        if client is not self.client:
            return
        self.error(error)

    def _on_disconnected(self, client, event=None) -> None:
        if client is not self.client:
            return
        if self.state is not SessionState.DISCONNECTED:
            self.logger.info(f"Disconnected from XMPP server ({self.jid})")
        self.state = SessionState.DISCONNECTED

    def error(self, error) -> None:
        """Report a protocol-level error to the socket."""
        self.logger.error(f"XMPP error: {error}")
        self.state = SessionState.DISCONNECTED
        self.socket.send('xmpp.error', self.error_payload(error))

    @staticmethod
    def error_payload(error) -> Dict[str, Any]:
        if isinstance(error, RegistrationCancelled) or _error_message(error) == REGISTRATION_ERROR_MESSAGE:
            return {
                'type': 'auth',
                'condition': 'cancel',
                'description': _error_message(error),
            }
        if isinstance(error, XmppFtwError):
            return error.to_payload()
        return {
            'type': 'cancel',
            'condition': 'unknown',
            'description': serialize_error(error),
        }

    # ============================================================================
    # Stanza dispatch
    # ============================================================================

    def _on_stanza(self, client, stanza) -> None:
        if client is not self.client:
            return
        self.handle_stanza(stanza)

    def handle_stanza(self, stanza) -> None:
        """
        Route an inbound stanza.

        A tracked reply goes only to its callback. Otherwise each listener
        whose handles() is True gets handle(); True from handle() stops the walk.
        """
        self.logger.debug(f"Stanza received: {stanza}")
        try:
            if self.catch_tracked(stanza):
                return
            handled = False
            for listener in list(self.listeners):
                if listener.handles(stanza) is not True:
                    continue
                handled = True
                if listener.handle(stanza) is True:
                    break
            if not handled:
                self.logger.info(f"No listeners for: {stanza}")
        except Exception as e:
            self.logger.exception(f"Failed to dispatch stanza: {e}")

    def track_id(self, identifier: str, callback: Callable[[Any], Any]) -> None:
        self.tracking.track_id(identifier, callback)

    def catch_tracked(self, stanza) -> bool:
        return self.tracking.catch_tracked(stanza)

    # ============================================================================
    # Listener-facing helpers
    # ============================================================================

    def send(self, stanza) -> None:
        if self.client is None:
            raise ProtocolError('Not connected')
        self.client.send(stanza)

    def new_id(self) -> str:
        if self.client is not None:
            return str(self.client.new_id())
        return uuid.uuid4().hex

    def get_jid_type(self, jid_type: str) -> Optional[str]:
        """Our address as 'full' (user@domain/resource), 'bare' or 'domain'."""
        if self.full_jid is None:
            return None
        jid = self.full_jid
        if jid_type == 'full':
            return f"{jid.user}@{jid.domain}/{jid.resource}"
        if jid_type == 'bare':
            return f"{jid.user}@{jid.domain}"
        if jid_type == 'domain':
            return jid.domain
        return None

    def set_logger(self, logger: logging.Logger) -> logging.Logger:
        self.logger = logger
        self.tracking.logger = logger
        return logger
