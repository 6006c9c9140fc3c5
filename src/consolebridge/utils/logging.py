"""Logging setup utilities for consolebridge.

Configures the ``consolebridge`` logger tree and quiets uvicorn's
per-request access log, which hosting platforms fill with health probes.
"""

from __future__ import annotations

import logging
import sys

from consolebridge.config.settings import LoggingConfig


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Configure logging for the consolebridge application.

    Sets up the ``consolebridge`` logger with the specified level, format,
    and optional file handler. Calling it again replaces the handlers
    installed by the previous call. Unless ``config.access_log`` is set,
    ``uvicorn.access`` only reports warnings.

    Args:
        config: Logging configuration. If None, uses defaults
                (INFO level, stderr output).
    """
    if config is None:
        config = LoggingConfig()

    root_logger = logging.getLogger("consolebridge")
    root_logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(config.format)

    # Console handler
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler (optional)
    if config.file:
        file_handler = logging.FileHandler(config.file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    logging.getLogger("uvicorn.access").setLevel(
        logging.INFO if config.access_log else logging.WARNING
    )

    root_logger.info(
        "Logging initialized at %s level (access log %s)",
        config.level, "on" if config.access_log else "off",
    )
