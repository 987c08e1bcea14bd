"""
Presence listener.

Socket events:
    xmpp.presence               {to?, show?, status?, priority?}
    xmpp.presence.subscribe     {to}
    xmpp.presence.subscribed    {to}
    xmpp.presence.unsubscribe   {to}
    xmpp.presence.unsubscribed  {to}
    xmpp.presence.get           {to}   (probe)
    xmpp.presence.offline

Emits xmpp.presence, xmpp.presence.<subscription type> and xmpp.presence.error.
"""

from slixmpp.stanza import Presence as PresenceStanza

from ..errors import ClientError
from ..utils import xep_0203
from .base import Listener, jid_to_dict


SHOW_VALUES = ('chat', 'away', 'dnd', 'xa')
SUBSCRIPTION_TYPES = ('subscribe', 'subscribed', 'unsubscribe', 'unsubscribed')


class Presence(Listener):
    """Publishes our presence and reports contacts' presence."""

    name = 'presence'
    events = {
        'xmpp.presence': 'send_presence',
        'xmpp.presence.subscribe': 'subscribe',
        'xmpp.presence.subscribed': 'subscribed',
        'xmpp.presence.unsubscribe': 'unsubscribe',
        'xmpp.presence.unsubscribed': 'unsubscribed',
        'xmpp.presence.get': 'get',
        'xmpp.presence.offline': 'offline',
    }

    def send_presence(self, data, callback=None):
        presence = PresenceStanza()
        if data.get('to'):
            presence['to'] = data['to']
        show = data.get('show')
        if show and show != 'online':
            if show not in SHOW_VALUES:
                raise ClientError(f"Invalid show value: {show}", data)
            presence['show'] = show
        if data.get('status'):
            presence['status'] = data['status']
        if data.get('priority') is not None:
            try:
                presence['priority'] = int(data['priority'])
            except (TypeError, ValueError):
                raise ClientError('Priority must be an integer', data)
        self.send(presence)
        if callable(callback):
            callback(None, True)

    def _send_typed(self, presence_type: str, data, callback=None):
        if not data.get('to'):
            raise ClientError('Missing "to" key', data)
        presence = PresenceStanza()
        presence['to'] = data['to']
        presence['type'] = presence_type
        self.send(presence)
        self.logger.debug(f"Sent presence '{presence_type}' to {data['to']}")
        if callable(callback):
            callback(None, True)

    def subscribe(self, data, callback=None):
        self._send_typed('subscribe', data, callback)

    def subscribed(self, data, callback=None):
        self._send_typed('subscribed', data, callback)

    def unsubscribe(self, data, callback=None):
        self._send_typed('unsubscribe', data, callback)

    def unsubscribed(self, data, callback=None):
        self._send_typed('unsubscribed', data, callback)

    def get(self, data, callback=None):
        self._send_typed('probe', data, callback)

    def offline(self, data, callback=None):
        presence = PresenceStanza()
        presence['type'] = 'unavailable'
        self.send(presence)
        if callable(callback):
            callback(None, True)

    def handles(self, stanza) -> bool:
        return stanza.name == 'presence'

    def handle(self, stanza) -> bool:
        sender = jid_to_dict(stanza['from'])
        presence_type = stanza['type']

        if presence_type in SUBSCRIPTION_TYPES:
            self.emit(f'xmpp.presence.{presence_type}', {'from': sender})
            return True
        if presence_type == 'error':
            self.emit('xmpp.presence.error', {'from': sender, 'error': self.parse_error(stanza)})
            return True
        if presence_type == 'probe':
            self.logger.debug(f"Ignoring presence probe from {stanza['from']}")
            return True

        if presence_type == 'unavailable':
            show = 'offline'
        else:
            show = stanza['show'] or 'online'
        payload = {'from': sender, 'show': show, 'priority': stanza['priority']}
        if stanza['status']:
            payload['status'] = stanza['status']
        delay = xep_0203.parse(stanza)
        if delay:
            payload['delay'] = delay

        self.emit('xmpp.presence', payload)
        return True
