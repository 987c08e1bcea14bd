"""
Settings for XMPP-FTW sessions.

Settings come from an optional YAML file with an `xmpp_ftw:` root and can be
overridden by XMPP_FTW_* environment variables.

Example config.yaml:

    xmpp_ftw:
      default_host: example.com
      keepalive_interval: 10
      tracking_timeout: 300
      logging:
        level: DEBUG
        console:
          enabled: true
        file:
          enabled: true
          path: logs/xmpp-ftw.log
        xml:
          enabled: false
"""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml


logger = logging.getLogger('xmpp-ftw.config')

DEFAULT_PORT = 5222
DEFAULT_KEEPALIVE_INTERVAL = 10.0
DEFAULT_TRACKING_TIMEOUT = 300.0


@dataclass
class Settings:
    """Per-process settings shared by every Session."""

    default_host: Optional[str] = None      # Domain appended to bare local parts
    default_port: int = DEFAULT_PORT
    keepalive_interval: float = DEFAULT_KEEPALIVE_INTERVAL  # Seconds between keep-alives
    tracking_timeout: Optional[float] = DEFAULT_TRACKING_TIMEOUT  # None disables expiry
    sasl_mech: Optional[str] = None         # Password mode mechanism, None = negotiate
    config_dir: Path = field(default_factory=Path.cwd)
    logging: Dict[str, Any] = field(default_factory=dict)


_ENV_OVERRIDES = {
    'XMPP_FTW_DEFAULT_HOST': ('default_host', str),
    'XMPP_FTW_KEEPALIVE_INTERVAL': ('keepalive_interval', float),
    'XMPP_FTW_TRACKING_TIMEOUT': ('tracking_timeout', float),
}


def load_settings(config_path: Optional[Union[str, Path]] = None) -> Settings:
    """
    Load settings from YAML and the environment.

    Args:
        config_path: Optional YAML file; missing sections fall back to defaults

    Returns:
        Settings instance

    Raises:
        FileNotFoundError: If config_path is given but does not exist
    """
    values: Dict[str, Any] = {}

    if config_path is not None:
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_file, 'r') as f:
            raw = yaml.safe_load(f) or {}

        section = raw.get('xmpp_ftw', {}) or {}
        known = {f.name for f in fields(Settings)}
        for key, value in section.items():
            if key in known:
                values[key] = value
            else:
                logger.warning(f"Ignoring unknown setting: {key}")
        values['config_dir'] = config_file.parent.absolute()

    for env_name, (key, cast) in _ENV_OVERRIDES.items():
        raw_value = os.getenv(env_name)
        if raw_value is None or raw_value == '':
            continue
        try:
            values[key] = cast(raw_value)
        except ValueError:
            logger.warning(f"Invalid value for {env_name}: {raw_value!r}")

    settings = Settings(**values)
    settings.logging = settings.logging or {}
    return settings
