# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""Primary Logging Configuration Function
"""

import json
import logging
import os

LOG_LEVEL_VARIABLE = "GOVCLOUD_BRIDGE_LOG_LEVEL"


def configure_logger(logger_name):
    """Configures a generic logger which can be imported and used as needed
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(os.environ.get(LOG_LEVEL_VARIABLE, logging.INFO))
    logger.propagate = False

    # Warm Lambda containers import the same module more than once in tests
    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        '%(asctime)s | %(levelname)s | %(name)s | %(message)s | (%(filename)s:%(lineno)d)')

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    return logger


def log_event(logger, message, event):
    """
    Logs the full event payload at DEBUG level only, so account e-mail
    addresses and ids stay out of INFO logs.
    """
    logger.debug(
        "%s: %s",
        message,
        json.dumps(event, indent=2, default=str)
        if logger.isEnabledFor(logging.DEBUG)
        else "--data-hidden--",
    )
