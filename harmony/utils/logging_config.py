"""
Logging setup for the Harmony progress engine.

Called once from create_app() before any extension is initialized so that
service modules using logging.getLogger(__name__) inherit the same handler.
"""
import logging
import os
import sys

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'

_configured = False


def setup_logging(level: str = None) -> None:
    """
    Configure the root logger to write to stdout.

    Args:
        level: Log level name. Defaults to the LOG_LEVEL environment variable, then INFO.
    """
    global _configured

    level_name = (level or os.getenv('LOG_LEVEL', 'INFO')).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    root.setLevel(log_level)

    if not _configured:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        _configured = True

    # SQLAlchemy engine logging is noisy at INFO
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
