"""
Logging setup for processes embedding the reconciler.

Modules log through ``logging.getLogger(__name__)``. Output goes to
stderr only; stdout belongs to the embedding process.
"""

from __future__ import annotations

import logging
import sys

from reconciler.app.config import ReconcilerConfig

PACKAGE_LOGGER = "reconciler"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(config: ReconcilerConfig) -> logging.Logger:
    """
    Apply ``LOG_LEVEL`` to the package logger hierarchy.

    Called by ``ContractFieldEngine.from_env``. Processes that build
    their own ``ReconcilerConfig`` call it themselves.

    A stderr handler is installed on the root logger only when the
    embedding process has not configured logging itself.
    """
    if not logging.getLogger().handlers:
        logging.basicConfig(stream=sys.stderr, format=LOG_FORMAT)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(config.LOG_LEVEL)
    return logger
