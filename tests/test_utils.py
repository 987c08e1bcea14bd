"""Tests for the XEP stanza builders."""

import pytest
from slixmpp.stanza import Message, Presence
from slixmpp.xmlstream import ET

from xmpp_ftw.errors import ClientError
from xmpp_ftw.utils import xep_0071, xep_0085, xep_0184, xep_0203, xep_0308


def _message(children=''):
    return Message(xml=ET.fromstring(
        f'<message xmlns="jabber:client" from="alice@example.com/home" id="m-1">{children}</message>'))


def test_xhtml_requires_content():
    with pytest.raises(ClientError) as excinfo:
        xep_0071.build({'format': 'xhtml'}, Message())
    assert excinfo.value.description == 'Message content not provided'


def test_unknown_format_falls_back_to_plain():
    msg = Message()
    assert xep_0071.build({'content': '<b>x</b>', 'format': 'markdown'}, msg) == xep_0071.PLAIN
    assert msg['body'] == '<b>x</b>'
    assert msg.get_plugin('html', check=True) is None


def test_xhtml_mixed_content():
    msg = Message()
    assert xep_0071.build({'content': 'Hello <i>you</i>!', 'format': 'xhtml'}, msg) == xep_0071.XHTML
    assert msg['body'] == 'Hello you!'
    content, message_format = xep_0071.parse(msg)
    assert message_format == xep_0071.XHTML
    assert content == 'Hello <i>you</i>!'


def test_malformed_xhtml_leaves_no_html_payload():
    msg = Message()
    with pytest.raises(ClientError) as excinfo:
        xep_0071.build({'content': '<p>unclosed', 'format': 'xhtml'}, msg)
    assert excinfo.value.description == 'Can not parse XHTML message'
    assert msg.xml.find('{http://jabber.org/protocol/xhtml-im}html') is None


def test_plain_body_parse():
    assert xep_0071.parse(_message('<body>hi</body>')) == ('hi', xep_0071.PLAIN)
    assert xep_0071.parse(_message()) == (None, xep_0071.PLAIN)


def test_chat_state_parse_none():
    assert xep_0085.parse(Message()) is None
    assert xep_0085.build({}, Message()) is None


def test_chat_state_from_wire():
    msg = _message('<composing xmlns="http://jabber.org/protocol/chatstates"/>')
    assert xep_0085.parse(msg) == 'composing'


def test_invalid_chat_state():
    with pytest.raises(ClientError):
        xep_0085.build({'state': 'dancing'}, Message())


def test_receipt_request():
    msg = Message()
    assert xep_0184.receipt_requested(msg) is False
    xep_0184.request_receipt(msg)
    assert xep_0184.receipt_requested(msg) is True
    assert msg.xml.find('{urn:xmpp:receipts}request') is not None


def test_build_receipt():
    receipt = xep_0184.build_receipt('alice@example.com', 'm-1')
    assert str(receipt['to']) == 'alice@example.com'
    assert receipt.xml.find('{urn:xmpp:receipts}received').get('id') == 'm-1'
    assert xep_0184.receipt_for(receipt) == 'm-1'


def test_receipt_for_plain_message():
    assert xep_0184.receipt_for(_message('<body>hi</body>')) is None


def test_delay_with_reason():
    msg = _message(
        '<delay xmlns="urn:xmpp:delay" stamp="2024-01-01T00:00:00Z" from="example.com">'
        'Offline storage</delay>')
    assert xep_0203.parse(msg) == {
        'when': '2024-01-01T00:00:00Z', 'from': 'example.com', 'reason': 'Offline storage'}


def test_delay_on_presence():
    presence = Presence(xml=ET.fromstring(
        '<presence xmlns="jabber:client" from="alice@example.com/home">'
        '<delay xmlns="urn:xmpp:delay" stamp="2024-01-01T10:00:00Z"/></presence>'))
    assert xep_0203.parse(presence) == {'when': '2024-01-01T10:00:00Z'}


def test_delay_absent_or_unparseable():
    assert xep_0203.parse(_message('<body>hi</body>')) is None
    assert xep_0203.parse(_message('<delay xmlns="urn:xmpp:delay" stamp="yesterday"/>')) is None


def test_correction_round_trip():
    msg = Message()
    assert xep_0308.build({'replace': 'm-2'}, msg) == 'm-2'
    assert xep_0308.parse(msg) == 'm-2'
    assert msg.xml.find('{urn:xmpp:message-correct:0}replace').get('id') == 'm-2'
    assert xep_0308.parse(Message()) is None


def test_correction_from_wire():
    msg = _message('<body>fixed</body><replace xmlns="urn:xmpp:message-correct:0" id="m-0"/>')
    assert xep_0308.parse(msg) == 'm-0'
