"""XEP-0308: Last Message Correction."""

from typing import Any, Dict, Optional

from slixmpp.plugins.xep_0308 import Replace
from slixmpp.stanza import Message
from slixmpp.xmlstream import register_stanza_plugin


register_stanza_plugin(Message, Replace)


def build(request: Dict[str, Any], stanza) -> Optional[str]:
    """Mark `stanza` as replacing message request['replace'], if given."""
    replace = request.get('replace')
    if not replace:
        return None
    stanza['replace']['id'] = str(replace)
    return str(replace)


def parse(stanza) -> Optional[str]:
    replace = stanza.get_plugin('replace', check=True)
    if replace is None:
        return None
    return replace['id'] or None
