"""Logging utilities for archivepy modules."""

import logging
from typing import Set, Union

ROOT_LOGGER = 'archivepy'

_handed_out: Set[str] = set()


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Get a logger in the archivepy namespace.

    'upload.part' and 'archivepy.upload.part' name the same logger.
    Loggers propagate to the root logger, so a plain basicConfig() in the
    application is enough. While the root logger has no handlers a new
    logger starts at WARNING; once set_level() ran, new loggers inherit
    the package level and loggers already handed out keep theirs.

    Args:
        name: Logger name, with or without the 'archivepy.' prefix

    Returns:
        Configured logger instance
    """
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + '.'):
        name = f'{ROOT_LOGGER}.{name}'

    logger = logging.getLogger(name)
    logger.propagate = True

    if name not in _handed_out:
        _handed_out.add(name)
        # basicConfig() not called yet and set_level() not used either
        if not logging.getLogger().handlers and not logging.getLogger(ROOT_LOGGER).level:
            logger.setLevel(logging.WARNING)

    return logger


def set_level(level: Union[int, str]) -> None:
    """Apply level to the package logger and every module logger handed out."""
    logging.getLogger(ROOT_LOGGER).setLevel(level)
    for name in _handed_out:
        logging.getLogger(name).setLevel(level)
