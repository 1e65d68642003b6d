from __future__ import annotations

import logging
import os

from timekeeper_e2e.configurations.configuration_constants import EnvVars

FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(name, log_file=None, level=logging.INFO):
    formatter = logging.Formatter(FORMAT)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Repeated imports under pytest must not stack handlers
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_file = log_file or os.environ.get(EnvVars.LogFile)
    if log_file:
        handler = logging.FileHandler(log_file)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = False

    return logger
