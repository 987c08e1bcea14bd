"""XEP-0203: Delayed Delivery."""

import logging
from typing import Any, Dict, Optional

from slixmpp.plugins import xep_0082
from slixmpp.plugins.xep_0203 import Delay
from slixmpp.stanza import Message, Presence
from slixmpp.xmlstream import register_stanza_plugin


register_stanza_plugin(Message, Delay)
register_stanza_plugin(Presence, Delay)

logger = logging.getLogger('xmpp-ftw.xep-0203')


def parse(stanza) -> Optional[Dict[str, Any]]:
    """
    Read a <delay/> element.

    Returns:
        {'when': stamp, 'from'?: jid, 'reason'?: text} or None
    """
    delay = stanza.get_plugin('delay', check=True)
    if delay is None:
        return None
    try:
        stamp = delay['stamp']
    except ValueError as e:
        logger.debug(f"Ignoring unparseable delay stamp from {stanza['from']}: {e}")
        return None
    if stamp is None:
        return None

    data = {'when': xep_0082.format_datetime(stamp)}
    if delay['from'] is not None:
        data['from'] = str(delay['from'])
    if delay['text']:
        data['reason'] = delay['text']
    return data
