"""
XEP-0071: XHTML-IM

Builds and reads rich-text message bodies. A request with format 'xhtml'
carries XHTML markup in `content`; the plain <body/> gets the text content
of the same markup.
"""

from typing import Any, Dict, Optional, Tuple

from slixmpp.plugins.xep_0071 import XHTML_IM
from slixmpp.plugins.xep_0071.stanza import XHTML_NS
from slixmpp.stanza import Message
from slixmpp.xmlstream import ET, register_stanza_plugin

from ..errors import ClientError


register_stanza_plugin(Message, XHTML_IM)

XHTML = 'xhtml'
PLAIN = 'plain'


def build(request: Dict[str, Any], stanza) -> str:
    """
    Add the message content to `stanza`.

    Args:
        request: Socket payload with `content` and optional `format`
        stanza: Outgoing message stanza

    Returns:
        str: The format actually used ('xhtml' or 'plain')

    Raises:
        ClientError: If content is missing or the XHTML does not parse
    """
    content = request.get('content')
    if not content:
        raise ClientError('Message content not provided', request)

    if request.get('format') != XHTML:
        stanza['body'] = str(content)
        return PLAIN

    try:
        stanza['html']['body'] = str(content)
    except ET.ParseError:
        del stanza['html']
        raise ClientError('Can not parse XHTML message', request)
    rich_body = stanza['html'].xml.find(f'{{{XHTML_NS}}}body')
    stanza['body'] = ''.join(rich_body.itertext())
    return XHTML


def parse(stanza) -> Tuple[Optional[str], str]:
    """
    Read the message content.

    Returns:
        (content, format): XHTML markup when an XHTML-IM body is present,
        otherwise the plain body
    """
    html = stanza.get_plugin('html', check=True)
    if html is not None and html['body']:
        return html['body'], XHTML
    return (stanza['body'] or None), PLAIN
