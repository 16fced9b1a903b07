"""
Logging configuration for GitLab CLI.
"""

import logging

LOGGER_NAME = 'gitlab_cli'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """
    Setup logging configuration.

    Args:
        verbose: Log debug messages
        quiet: Only log warnings and errors; wins over verbose

    Returns:
        The configured 'gitlab_cli' logger. Loggers of the package's
        components are its children.
    """
    logger = logging.getLogger(LOGGER_NAME)

    if quiet:
        log_level = logging.WARNING
    elif verbose:
        log_level = logging.DEBUG
    else:
        log_level = logging.INFO
    logger.setLevel(log_level)

    if not logger.handlers:
        # Create console handler, filtering is left to the logger's level
        handler = logging.StreamHandler()

        formatter = logging.Formatter(LOG_FORMAT)
        handler.setFormatter(formatter)

        logger.addHandler(handler)

    return logger
