"""XEP-0085: Chat State Notifications."""

from typing import Any, Dict, Optional

from slixmpp.plugins.xep_0085 import ChatState
from slixmpp.plugins.xep_0085 import stanza as chat_states
from slixmpp.stanza import Message
from slixmpp.xmlstream import register_stanza_plugin

from ..errors import ClientError


for _state in (chat_states.Active, chat_states.Composing, chat_states.Gone,
               chat_states.Inactive, chat_states.Paused):
    register_stanza_plugin(Message, _state)

STATES = ('active', 'composing', 'paused', 'inactive', 'gone')


def build(request: Dict[str, Any], stanza) -> Optional[str]:
    """Add request['state'] to `stanza`, if present. Returns the state used."""
    state = request.get('state')
    if not state:
        return None
    if state not in ChatState.states:
        raise ClientError(f"Invalid chat state: {state}. Must be one of {list(STATES)}", request)
    stanza['chat_state'] = state
    return state


def parse(stanza) -> Optional[str]:
    return stanza['chat_state'] or None
