"""Feature listeners plugged into a Session's listener chain."""

from .base import Listener, jid_to_dict
from .chat import Chat
from .presence import Presence
from .roster import Roster


def default_listeners():
    """Fresh default chain. Earlier listeners see stanzas first."""
    return [Roster(), Presence(), Chat()]


__all__ = ['Listener', 'Chat', 'Presence', 'Roster', 'default_listeners', 'jid_to_dict']
