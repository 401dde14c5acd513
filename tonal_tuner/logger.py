"""Logger access for Tonal Tuner, rooted under the package logger."""
import logging
from typing import Dict

PACKAGE_LOGGER = "tonal_tuner"

_logger_cache: Dict[str, logging.Logger] = {}


def get_logger(name: str) -> logging.Logger:
    """
    Get the logger for a module, placing it under the ``tonal_tuner`` hierarchy.

    Modules run as scripts report ``__main__`` as their name; those loggers are
    nested under the package logger so the handler and levels installed by
    ``setup_logging`` still apply to them.

    Args:
        name: The module's ``__name__`` (e.g., 'tonal_tuner.detection.pitch_estimator')

    Returns:
        The cached logger instance
    """
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    if name not in _logger_cache:
        _logger_cache[name] = logging.getLogger(name)
    return _logger_cache[name]
