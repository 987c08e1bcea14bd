"""Shared fixtures: an in-process socket and a fake slixmpp client factory."""

import pytest

from xmpp_ftw import LocalSocket, Session, Settings

from helpers import ClientFactory


@pytest.fixture
def socket():
    return LocalSocket()


@pytest.fixture
def factory():
    return ClientFactory()


@pytest.fixture
def settings():
    return Settings(default_host='example.com', tracking_timeout=None)


@pytest.fixture
def session(socket, factory, settings):
    return Session(socket, settings=settings, client_factory=factory)
