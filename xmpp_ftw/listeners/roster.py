"""
Roster listener (jabber:iq:roster).

Socket events:
    xmpp.roster.get     callback(error, items)
    xmpp.roster.add     {jid, name?, groups?}     callback(error, True)
    xmpp.roster.edit    {jid, name?, groups?}     callback(error, True)
    xmpp.roster.remove  {jid}                     callback(error, True)

Replies are matched through the Session correlation table. Roster pushes
from the server are emitted as xmpp.roster.push; acknowledging them is
left to the protocol client.
"""

from typing import Any, Callable, Dict, List, Optional

from slixmpp.stanza import Iq

from ..errors import ClientError
from .base import Listener, jid_to_dict


def item_to_dict(jid, item: Dict[str, Any]) -> Dict[str, Any]:
    """Payload form of one entry of iq['roster']['items']."""
    data = {
        'jid': jid_to_dict(jid),
        'subscription': item.get('subscription') or 'none',
        'groups': [group for group in item.get('groups') or [] if group],
    }
    if item.get('name'):
        data['name'] = item['name']
    if item.get('ask'):
        data['ask'] = item['ask']
    return data


def roster_items(stanza) -> List[Dict[str, Any]]:
    roster = stanza.get_plugin('roster', check=True)
    if roster is None:
        return []
    return [item_to_dict(jid, item) for jid, item in roster['items'].items()]


class Roster(Listener):
    """Contact list management."""

    name = 'roster'
    events = {
        'xmpp.roster.get': 'get_roster',
        'xmpp.roster.add': 'add',
        'xmpp.roster.edit': 'edit',
        'xmpp.roster.remove': 'remove',
    }

    def _make_iq(self, iq_type: str) -> Iq:
        iq = Iq()
        iq['type'] = iq_type
        iq['id'] = self.manager.new_id()
        iq.enable('roster')
        return iq

    @staticmethod
    def _require_callback(data, callback):
        if not callable(callback):
            raise ClientError('Missing callback', data)

    def get_roster(self, data, callback=None):
        self._require_callback(data, callback)
        iq = self._make_iq('get')
        self.manager.track_id(iq['id'], lambda reply: self._handle_roster_result(reply, callback))
        self.send(iq)

    def _handle_roster_result(self, reply, callback: Callable):
        if reply['type'] == 'error':
            return callback(self.parse_error(reply), None)
        callback(None, roster_items(reply))

    def add(self, data, callback=None):
        self._set_item(data, callback)

    def edit(self, data, callback=None):
        self._set_item(data, callback)

    def remove(self, data, callback=None):
        self._set_item(data, callback, subscription='remove')

    def _set_item(self, data, callback, subscription: Optional[str] = None):
        self._require_callback(data, callback)
        if not data.get('jid'):
            raise ClientError('Missing "jid" key', data)

        item: Dict[str, Any] = {}
        if subscription:
            item['subscription'] = subscription
        else:
            if data.get('name'):
                item['name'] = str(data['name'])
            item['groups'] = [str(group) for group in data.get('groups') or []]

        iq = self._make_iq('set')
        iq['roster']['items'] = {str(data['jid']): item}

        self.manager.track_id(iq['id'], lambda reply: self._handle_set_result(reply, callback))
        self.send(iq)

    def _handle_set_result(self, reply, callback: Callable):
        if reply['type'] == 'error':
            return callback(self.parse_error(reply), None)
        callback(None, True)

    def handles(self, stanza) -> bool:
        return (
            stanza.name == 'iq'
            and stanza['type'] == 'set'
            and stanza.get_plugin('roster', check=True) is not None
        )

    def handle(self, stanza) -> bool:
        for push in roster_items(stanza):
            self.emit('xmpp.roster.push', push)
        return True
