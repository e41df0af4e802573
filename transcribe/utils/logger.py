import logging
import os
import sys

LOGGER_NAME = "TranscribePro"


def setup_logger(level=None):
    """Configure the application logger once; TRANSCRIBE_LOG_LEVEL overrides the console level."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    if level is None:
        level = os.environ.get("TRANSCRIBE_LOG_LEVEL", "INFO").upper()

    # Console only; the app keeps no log files
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))

    if not logger.handlers:
        logger.addHandler(console)

    return logger

logger = setup_logger()
