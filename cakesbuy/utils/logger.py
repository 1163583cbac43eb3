"""Application logging setup."""

import logging

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def configure_logging(app):
    """Attach one stream handler to the package logger."""
    logger = logging.getLogger('cakesbuy')
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))
    return logger


def get_logger(name=None):
    return logging.getLogger(name or 'cakesbuy')
