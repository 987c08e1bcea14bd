"""
Logging setup for XMPP-FTW.

The library itself only creates loggers under the `xmpp-ftw` facility.
setup_logging() is for embedders that want console, rotating file and
XML protocol logs configured from the `logging` settings section.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .config import Settings
from .version import APP_NAME, VERSION


# Log format
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Maximum log file size before rotation (10 MB)
MAX_LOG_SIZE = 10 * 1024 * 1024

# Number of backup files to keep
BACKUP_COUNT = 5

LIBRARY_FACILITY = 'xmpp-ftw'
XML_FACILITY = 'slixmpp.xmlstream.xmlstream'


def _resolve(path_value: str, config_dir: Path) -> Path:
    path = Path(path_value)
    if not path.is_absolute():
        path = config_dir / path
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def setup_logging(settings: Settings) -> logging.Logger:
    """
    Configure the `xmpp-ftw` facility from settings.logging.

    Args:
        settings: Loaded settings

    Returns:
        The library root logger
    """
    logging_config = settings.logging or {}
    level_str = logging_config.get('level', 'INFO')
    level = getattr(logging, str(level_str).upper(), logging.INFO)

    library_logger = logging.getLogger(LIBRARY_FACILITY)
    library_logger.setLevel(level)
    # Keep the NullHandler installed by the package
    for handler in list(library_logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            library_logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)

    # Console handler
    console_config = logging_config.get('console', {}) or {}
    if console_config.get('enabled', True):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        library_logger.addHandler(console_handler)

    # File handler (rotating)
    file_config = logging_config.get('file', {}) or {}
    log_path: Optional[Path] = None
    if file_config.get('enabled', False):
        log_path = _resolve(file_config.get('path', 'logs/xmpp-ftw.log'), settings.config_dir)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=MAX_LOG_SIZE,
            backupCount=BACKUP_COUNT,
            encoding='utf-8'
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        library_logger.addHandler(file_handler)

    # XML/Protocol logging
    xml_config = logging_config.get('xml', {}) or {}
    if xml_config.get('enabled', False):
        xml_log_path = _resolve(xml_config.get('path', 'logs/xmpp-protocol.log'), settings.config_dir)
        xml_logger = logging.getLogger(XML_FACILITY)
        xml_logger.setLevel(logging.DEBUG)
        xml_handler = RotatingFileHandler(
            xml_log_path,
            maxBytes=MAX_LOG_SIZE,
            backupCount=BACKUP_COUNT,
            encoding='utf-8'
        )
        xml_handler.setLevel(logging.DEBUG)
        xml_handler.setFormatter(logging.Formatter('%(asctime)s - %(message)s'))
        xml_logger.addHandler(xml_handler)

    library_logger.info(f"{APP_NAME} {VERSION} logging configured (level: {logging.getLevelName(level)}, file: {log_path or 'disabled'})")
    return library_logger
