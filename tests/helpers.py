"""Helpers for driving a Session with a fake slixmpp client."""

import itertools
from unittest.mock import MagicMock

from slixmpp.jid import JID


class ClientFactory:
    """Stands in for slixmpp.ClientXMPP; records every client it builds."""

    def __init__(self):
        self.clients = []
        self.calls = []

    def __call__(self, jid, password, **kwargs):
        client = MagicMock(name=f'client-{len(self.clients)}')
        client.new_id.side_effect = (f'id-{n}' for n in itertools.count(1))
        self.clients.append(client)
        self.calls.append((jid, password, kwargs))
        return client


def event_handlers(client, name):
    return [call.args[1] for call in client.add_event_handler.call_args_list if call.args[0] == name]


def fire(client, name, data=None):
    """Fire a slixmpp event on a fake client."""
    handlers = event_handlers(client, name)
    assert handlers, f"no handler registered for {name}"
    for handler in handlers:
        handler(data)


def deliver(client, stanza):
    """Push an inbound stanza through the registered dispatch handler."""
    handler = client.register_handler.call_args.args[0]
    if handler.match(stanza):
        handler.run(stanza)


def go_online(session, socket, factory, jid='bob@example.com/laptop'):
    socket.receive('xmpp.login', {'jid': jid.split('/')[0], 'password': 'x'})
    client = factory.clients[-1]
    client.boundjid = JID(jid)
    fire(client, 'session_start')
    return client


def sent_stanzas(client):
    return [call.args[0] for call in client.send.call_args_list]
