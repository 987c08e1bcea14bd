"""
Error taxonomy for XMPP-FTW.

Every failure is caught at the Session boundary and turned into a socket
notification, so each error knows how to describe itself as a payload.
"""

from typing import Any, Dict, Optional


class XmppFtwError(Exception):
    """Base class for errors reported to the socket."""

    error_type = 'cancel'
    condition = 'unknown'

    def __init__(self, description: str, request: Optional[Dict[str, Any]] = None):
        self.description = str(description or '').strip() or 'Unknown error'
        self.request = request
        super().__init__(self.description)

    def to_payload(self) -> Dict[str, Any]:
        """Build the `xmpp.error` payload for this error."""
        payload = {
            'type': self.error_type,
            'condition': self.condition,
            'description': self.description,
        }
        if self.request is not None:
            payload['request'] = self.request
        return payload


class ValidationError(XmppFtwError):
    """Required login fields are missing. No connection is attempted."""

    error_type = 'auth'
    condition = 'client-error'


class ProtocolError(XmppFtwError):
    """Error reported by the XMPP client (stream, auth or connection)."""


class RegistrationCancelled(ProtocolError):
    """The server cancelled an account registration."""

    error_type = 'auth'
    condition = 'cancel'

    def __init__(self, description: str = 'Registration error',
                 request: Optional[Dict[str, Any]] = None):
        super().__init__(description, request)


class ClientError(XmppFtwError):
    """A socket request a listener cannot act on (missing or bad fields)."""

    error_type = 'modify'
    condition = 'client-error'
