"""
XMPP-FTW - XMPP for the web

Bridges a bidirectional message socket (named events in, named
notifications out) to an XMPP session driven by slixmpp.

Modules:
- session.py      Session: login/logout lifecycle, stanza dispatch
- credentials.py  Login payload normalization (password and anonymous)
- tracking.py     Stanza id -> reply callback correlation
- listeners/      Listener contract and the roster/presence/chat listeners
- utils/          XEP stanza builders (0071, 0085, 0184, 0203, 0308)
- transport.py    Socket contract and the in-process LocalSocket
- config.py       YAML/env settings
- logger.py       Optional logging setup for embedders
"""

import logging

from .config import Settings, load_settings
from .credentials import Credentials, normalize_anonymous_login, normalize_login
from .errors import ClientError, ProtocolError, RegistrationCancelled, ValidationError, XmppFtwError
from .listeners import Chat, Listener, Presence, Roster, default_listeners
from .logger import setup_logging
from .session import Session, SessionState
from .tracking import CorrelationTable
from .transport import LocalSocket, SocketTransport
from .version import SUPPORTED_XEPS, VERSION

# Library loggers stay silent unless the embedder configures logging
logging.getLogger('xmpp-ftw').addHandler(logging.NullHandler())

__version__ = VERSION
__all__ = [
    "Session",
    "SessionState",
    "Settings",
    "load_settings",
    "setup_logging",
    "Credentials",
    "normalize_login",
    "normalize_anonymous_login",
    "CorrelationTable",
    "Listener",
    "Chat",
    "Presence",
    "Roster",
    "default_listeners",
    "SocketTransport",
    "LocalSocket",
    "XmppFtwError",
    "ValidationError",
    "ProtocolError",
    "RegistrationCancelled",
    "ClientError",
    "SUPPORTED_XEPS",
]
