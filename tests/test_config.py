"""Tests for settings loading and logging setup."""

import logging

import pytest

import xmpp_ftw

from xmpp_ftw.config import DEFAULT_KEEPALIVE_INTERVAL, Settings, load_settings
from xmpp_ftw.logger import LIBRARY_FACILITY, setup_logging


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ('XMPP_FTW_DEFAULT_HOST', 'XMPP_FTW_KEEPALIVE_INTERVAL', 'XMPP_FTW_TRACKING_TIMEOUT'):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def restore_library_logger():
    library_logger = logging.getLogger(LIBRARY_FACILITY)
    handlers = list(library_logger.handlers)
    level = library_logger.level
    yield library_logger
    for handler in list(library_logger.handlers):
        if handler not in handlers:
            library_logger.removeHandler(handler)
            handler.close()
    library_logger.setLevel(level)


def test_defaults_without_file():
    settings = load_settings()
    assert settings.default_host is None
    assert settings.keepalive_interval == DEFAULT_KEEPALIVE_INTERVAL
    assert settings.default_port == 5222


def test_yaml_file(tmp_path):
    config_file = tmp_path / 'config.yaml'
    config_file.write_text(
        'xmpp_ftw:\n'
        '  default_host: example.com\n'
        '  tracking_timeout: 60\n'
        '  unknown_key: 1\n'
        '  logging:\n'
        '    level: DEBUG\n'
    )

    settings = load_settings(config_file)
    assert settings.default_host == 'example.com'
    assert settings.tracking_timeout == 60
    assert settings.logging == {'level': 'DEBUG'}
    assert settings.config_dir == tmp_path.absolute()


def test_environment_overrides(tmp_path, monkeypatch):
    config_file = tmp_path / 'config.yaml'
    config_file.write_text('xmpp_ftw:\n  default_host: example.com\n')
    monkeypatch.setenv('XMPP_FTW_DEFAULT_HOST', 'example.org')
    monkeypatch.setenv('XMPP_FTW_KEEPALIVE_INTERVAL', '30')
    monkeypatch.setenv('XMPP_FTW_TRACKING_TIMEOUT', 'soon')

    settings = load_settings(config_file)
    assert settings.default_host == 'example.org'
    assert settings.keepalive_interval == 30.0
    assert settings.tracking_timeout == 300.0


def test_missing_file():
    with pytest.raises(FileNotFoundError):
        load_settings('/nonexistent/xmpp-ftw.yaml')


def test_setup_logging_with_file(tmp_path, restore_library_logger):
    settings = Settings(config_dir=tmp_path, logging={
        'level': 'DEBUG',
        'console': {'enabled': False},
        'file': {'enabled': True, 'path': 'logs/xmpp-ftw.log'},
    })

    library_logger = setup_logging(settings)
    assert library_logger is restore_library_logger
    assert library_logger.level == logging.DEBUG
    assert (tmp_path / 'logs' / 'xmpp-ftw.log').exists()
    assert any(isinstance(h, logging.NullHandler) for h in library_logger.handlers)
    assert 'XMPP-FTW' in (tmp_path / 'logs' / 'xmpp-ftw.log').read_text()


def test_setup_logging_is_exported():
    assert xmpp_ftw.setup_logging is setup_logging
    assert 'setup_logging' in xmpp_ftw.__all__
