import logging
import os
import sys

DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(verbose: bool = False) -> None:
    """
    Configure logging for the command-line interface.

    - Level is WARNING by default, DEBUG with ``verbose``; ROCKETCHAT_LOG_LEVEL overrides both
    - Logs go to stderr so JSON on stdout stays parseable
    """
    default_level = "DEBUG" if verbose else "WARNING"
    log_level_name = os.getenv("ROCKETCHAT_LOG_LEVEL", default_level).upper()
    level = getattr(logging, log_level_name, logging.WARNING)

    root_logger = logging.getLogger()
    if root_logger.handlers:
        root_logger.setLevel(level)
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))

    root_logger.setLevel(level)
    root_logger.addHandler(handler)
