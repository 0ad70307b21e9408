"""Logger setup for springsui modules and the CLI."""

import logging
import sys

import colorlog

_LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

ROOT_LOGGER = "springsui"


def get_logger(name: str) -> logging.Logger:
    """Return a module logger under the ``springsui`` namespace.

    Library modules only obtain loggers; handlers are attached once by
    ``configure_logging`` (the CLI does this). Without it, records propagate
    to whatever the host application configured.
    """
    if name != ROOT_LOGGER and not name.startswith(f"{ROOT_LOGGER}."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def configure_logging(
    log_level: str = "INFO",
    log_color: bool = False,
) -> logging.Logger:
    """Attach a stderr handler to the ``springsui`` root logger.

    Args:
        log_level: The logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL').
        log_color: Whether to use colored output.

    Returns:
        logging.Logger: The configured package root logger.

    Raises:
        ValueError: If an invalid log level is provided.
    """
    level_name = log_level.upper()
    if level_name not in _LOG_LEVELS:
        err_msg = f"Invalid log level: {log_level}"
        raise ValueError(err_msg)
    level = _LOG_LEVELS[level_name]

    logger = logging.getLogger(ROOT_LOGGER)

    if log_color:
        handler: logging.Handler = colorlog.StreamHandler(sys.stderr)
        handler.setFormatter(
            colorlog.ColoredFormatter(
                f"%(log_color)s{_FORMAT}",
                log_colors={
                    "DEBUG": "cyan",
                    "INFO": "green",
                    "WARNING": "yellow",
                    "ERROR": "red",
                    "CRITICAL": "red,bg_white",
                },
            )
        )
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))

    handler.setLevel(level)
    logger.setLevel(level)

    # Reconfiguring replaces the previous handler instead of stacking them.
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)

    return logger
