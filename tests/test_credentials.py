"""Tests for login payload normalization."""

import pytest

from xmpp_ftw.credentials import ANONYMOUS_MECHANISM, normalize_anonymous_login, normalize_login
from xmpp_ftw.errors import ValidationError


# ---------------------------------------------------------------------------
# Password mode
# ---------------------------------------------------------------------------


class TestNormalizeLogin:
    def test_full_jid_is_kept(self):
        credentials = normalize_login({'jid': 'bob@example.com', 'password': 'x'})
        assert credentials.to_dict() == {'jid': 'bob@example.com', 'password': 'x'}
        assert credentials.domain == 'example.com'

    def test_host_is_appended_to_local_part(self):
        credentials = normalize_login({'jid': 'alice', 'password': 'x', 'host': 'example.com'})
        assert credentials.jid == 'alice@example.com'
        assert credentials.host == 'example.com'

    def test_default_host_used_without_request_host(self):
        credentials = normalize_login({'jid': 'alice', 'password': 'x'}, default_host='example.org')
        assert credentials.jid == 'alice@example.org'
        assert credentials.host is None

    def test_resource_suffix_is_reappended(self):
        credentials = normalize_login({'jid': 'bob@example.com/laptop', 'password': 'x'})
        assert credentials.jid == 'bob@example.com/laptop'
        assert credentials.resource == 'laptop'
        assert credentials.domain == 'example.com'

    def test_resource_suffix_on_local_part(self):
        credentials = normalize_login({'jid': 'alice/home', 'password': 'x', 'host': 'example.com'})
        assert credentials.jid == 'alice@example.com/home'

    def test_resource_field_used_when_jid_has_none(self):
        credentials = normalize_login({'jid': 'bob@example.com', 'password': 'x', 'resource': 'desk'})
        assert credentials.jid == 'bob@example.com/desk'

    def test_port_is_parsed(self):
        credentials = normalize_login({'jid': 'bob@example.com', 'password': 'x', 'port': '5223'})
        assert credentials.port == 5223

    @pytest.mark.parametrize('request_data', [
        {'password': 'x'},
        {'jid': 'bob@example.com'},
        {'jid': '', 'password': 'x'},
        {},
    ])
    def test_missing_fields(self, request_data):
        with pytest.raises(ValidationError) as excinfo:
            normalize_login(request_data)
        payload = excinfo.value.to_payload()
        assert payload['type'] == 'auth'
        assert payload['condition'] == 'client-error'
        assert payload['description'] == 'Missing jid and/or password'
        assert payload['request'] == request_data

    def test_no_domain_anywhere(self):
        with pytest.raises(ValidationError):
            normalize_login({'jid': 'alice', 'password': 'x'})


# ---------------------------------------------------------------------------
# Anonymous mode
# ---------------------------------------------------------------------------


class TestNormalizeAnonymousLogin:
    def test_local_part_is_stripped_and_resource_kept(self):
        credentials = normalize_anonymous_login({'jid': 'user@example.com/home'})
        assert credentials.jid == '@example.com/home'
        assert credentials.preferred_sasl_mechanism == ANONYMOUS_MECHANISM == 'ANONYMOUS'
        assert credentials.resource == 'home'
        assert credentials.domain == 'example.com'

    def test_domain_only(self):
        credentials = normalize_anonymous_login({'jid': 'example.com', 'host': 'xmpp.example.com'})
        assert credentials.jid == '@example.com'
        assert credentials.host == 'xmpp.example.com'
        assert credentials.password is None

    def test_client_jid_drops_empty_local_part(self):
        credentials = normalize_anonymous_login({'jid': 'example.com', 'resource': 'web'})
        assert credentials.jid == '@example.com/web'
        assert credentials.client_jid == 'example.com/web'
        assert credentials.is_anonymous

    def test_missing_jid_returns_none(self):
        assert normalize_anonymous_login({}) is None
        assert normalize_anonymous_login({'host': 'example.com'}) is None
