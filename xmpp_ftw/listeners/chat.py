"""
One-to-one chat listener.

Socket events:
    xmpp.chat.message  {to, content?, format?, state?, receipt?, replace?}
    xmpp.chat.receipt  {to, id}

Emits xmpp.chat.message, xmpp.chat.receipt and xmpp.chat.error.
"""

from slixmpp.stanza import Message

from ..errors import ClientError
from ..utils import xep_0071, xep_0085, xep_0184, xep_0203, xep_0308
from .base import Listener, jid_to_dict


CHAT_TYPES = ('chat', 'normal', 'error')


class Chat(Listener):
    """Sends and receives chat messages, chat states and receipts."""

    name = 'chat'
    events = {
        'xmpp.chat.message': 'send_message',
        'xmpp.chat.receipt': 'send_receipt',
    }

    def send_message(self, data, callback=None):
        if not data.get('to'):
            raise ClientError('Missing "to" key', data)
        if not data.get('content') and not data.get('state'):
            raise ClientError('Message content not provided', data)

        msg = Message()
        msg['to'] = data['to']
        msg['type'] = 'chat'
        msg['id'] = self.manager.new_id()

        if data.get('content'):
            xep_0071.build(data, msg)
        xep_0085.build(data, msg)
        xep_0308.build(data, msg)
        if data.get('receipt'):
            xep_0184.request_receipt(msg)

        self.send(msg)
        self.logger.debug(f"Sent chat message {msg['id']} to {data['to']}")
        if callable(callback):
            callback(None, {'id': msg['id']})

    def send_receipt(self, data, callback=None):
        if not data.get('to'):
            raise ClientError('Missing "to" key', data)
        if not data.get('id'):
            raise ClientError('Missing "id" key', data)
        self.send(xep_0184.build_receipt(data['to'], data['id']))
        if callable(callback):
            callback(None, True)

    def handles(self, stanza) -> bool:
        if stanza.name != 'message':
            return False
        message_type = stanza['type']
        if message_type not in CHAT_TYPES:
            return False
        if message_type == 'error':
            return True
        return bool(
            stanza['body']
            or xep_0085.parse(stanza)
            or xep_0184.receipt_for(stanza)
        )

    def handle(self, stanza) -> bool:
        sender = jid_to_dict(stanza['from'])

        if stanza['type'] == 'error':
            self.emit('xmpp.chat.error', {
                'from': sender,
                'id': stanza['id'] or None,
                'error': self.parse_error(stanza),
            })
            return True

        receipt_id = xep_0184.receipt_for(stanza)
        if receipt_id is not None:
            self.emit('xmpp.chat.receipt', {'from': sender, 'id': receipt_id})
            return True

        payload = {'from': sender}
        if stanza['id']:
            payload['id'] = stanza['id']
        content, message_format = xep_0071.parse(stanza)
        if content is not None:
            payload['content'] = content
            payload['format'] = message_format
        state = xep_0085.parse(stanza)
        if state:
            payload['state'] = state
        delay = xep_0203.parse(stanza)
        if delay:
            payload['delay'] = delay
        replace = xep_0308.parse(stanza)
        if replace:
            payload['replace'] = replace
        if xep_0184.receipt_requested(stanza):
            payload['receipt'] = True

        self.emit('xmpp.chat.message', payload)
        return True
