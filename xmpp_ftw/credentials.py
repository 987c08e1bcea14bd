"""
Login payload normalization.

Turns the `xmpp.login` / `xmpp.login.anonymous` socket payloads into the
fully qualified Credentials a slixmpp client is created from.

Password mode:   alice + host example.com  ->  alice@example.com
                 bob@example.com/laptop    ->  bob@example.com/laptop
Anonymous mode:  user@example.com/home     ->  @example.com/home (ANONYMOUS)
"""

import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from .errors import ValidationError


ANONYMOUS_MECHANISM = 'ANONYMOUS'

_default_logger = logging.getLogger('xmpp-ftw.credentials')


@dataclass
class Credentials:
    """Normalized login data handed to the protocol client."""

    jid: str                                  # local@domain[/resource] or @domain[/resource]
    password: Optional[str] = None
    resource: Optional[str] = None
    host: Optional[str] = None                # Explicit server to connect to
    port: Optional[int] = None
    preferred_sasl_mechanism: Optional[str] = None  # Only set for anonymous logins

    @property
    def bare(self) -> str:
        return self.jid.split('/', 1)[0]

    @property
    def domain(self) -> str:
        return self.bare.split('@', 1)[-1]

    @property
    def is_anonymous(self) -> bool:
        return self.preferred_sasl_mechanism == ANONYMOUS_MECHANISM

    @property
    def client_jid(self) -> str:
        """
        JID string slixmpp accepts.

        slixmpp rejects an empty localpart, so anonymous identities are passed
        as domain[/resource] and the server assigns the localpart.
        """
        if self.jid.startswith('@'):
            return self.jid[1:]
        return self.jid

    def to_dict(self) -> Dict[str, Any]:
        """Credentials as a dict, omitting unset fields."""
        return {key: value for key, value in asdict(self).items() if value is not None}


def _split_resource(jid: str):
    if '/' not in jid:
        return jid, None
    bare, resource = jid.split('/', 1)
    return bare, resource or None


def _parse_port(value: Any) -> Optional[int]:
    if value in (None, ''):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def normalize_login(request: Dict[str, Any], default_host: Optional[str] = None,
                    logger: Optional[logging.Logger] = None) -> Credentials:
    """
    Normalize a password login request.

    Args:
        request: Socket payload {jid, password, host?, resource?, port?}
        default_host: Domain used when neither the jid nor the request has one
        logger: Logger for the connection attempt notice

    Returns:
        Credentials with a fully qualified jid

    Raises:
        ValidationError: If jid or password is missing, or no domain is known
    """
    log = logger or _default_logger
    request = request or {}
    jid = request.get('jid')
    password = request.get('password')
    log.info(f"Attempting to connect to {jid}")

    if not jid or not password:
        raise ValidationError('Missing jid and/or password', request)

    bare, resource = _split_resource(str(jid))
    if not resource:
        resource = request.get('resource') or None

    host = request.get('host') or None
    if '@' not in bare:
        domain = host or default_host
        if not domain:
            raise ValidationError('Missing host for jid without domain', request)
        bare = f"{bare}@{domain}"

    full = f"{bare}/{resource}" if resource else bare
    return Credentials(
        jid=full,
        password=str(password),
        resource=resource,
        host=host,
        port=_parse_port(request.get('port')),
    )


def normalize_anonymous_login(request: Dict[str, Any],
                              logger: Optional[logging.Logger] = None) -> Optional[Credentials]:
    """
    Normalize an anonymous login request.

    Anonymous identities are domain-only: any localpart is dropped.

    Args:
        request: Socket payload {jid, host?, resource?, port?}
        logger: Logger for the connection attempt notice

    Returns:
        Credentials, or None when no jid was supplied
    """
    request = request or {}
    jid = request.get('jid')
    if not jid:
        return None
    (logger or _default_logger).info(f"Attempting anonymous connection {jid}")

    domain = str(jid)
    if '@' in domain:
        domain = domain.split('@', 1)[1]
    domain, resource = _split_resource(domain)
    if not resource:
        resource = request.get('resource') or None

    identity = f"@{domain}"
    if resource:
        identity += f"/{resource}"

    return Credentials(
        jid=identity,
        resource=resource,
        host=request.get('host') or None,
        port=_parse_port(request.get('port')),
        preferred_sasl_mechanism=ANONYMOUS_MECHANISM,
    )
