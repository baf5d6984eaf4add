# logging_config.py
import os
import logging

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"


def setup_logging():
    log_level_name = os.getenv(
        "STREAMDECODE_LOG_LEVEL", "WARNING"
    ).upper()  # Default to WARNING, set 'export STREAMDECODE_LOG_LEVEL=DEBUG' to see decoding failures
    log_levels = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    log_level = log_levels.get(log_level_name, logging.WARNING)
    # the decoder and source modules log under this name
    logger = logging.getLogger("streamdecode")
    logger.setLevel(log_level)
    # logging's last-resort handler drops records below WARNING
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
