"""
XEP-0184: Message Delivery Receipts

request_receipt() marks an outgoing message; build_receipt() answers one.
"""

from typing import Optional

from slixmpp.plugins.xep_0184 import Received, Request
from slixmpp.stanza import Message
from slixmpp.xmlstream import register_stanza_plugin


register_stanza_plugin(Message, Request)
register_stanza_plugin(Message, Received)


def request_receipt(stanza) -> None:
    stanza['request_receipt'] = True


def receipt_requested(stanza) -> bool:
    return bool(stanza['request_receipt'])


def build_receipt(to: str, message_id: str) -> Message:
    """Build the <received/> acknowledgement for message `message_id`."""
    receipt = Message()
    receipt['to'] = to
    receipt['receipt'] = str(message_id)
    return receipt


def receipt_for(stanza) -> Optional[str]:
    """Id of the message a <received/> stanza acknowledges, if it is one."""
    return stanza['receipt'] or None
