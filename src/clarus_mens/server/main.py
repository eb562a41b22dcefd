"""
Clarus Mens API - Main Entry Point

Sets up logging, loads settings, builds the FastAPI application and serves
it with uvicorn. Invalid configuration (for example a malformed license URL
in the API metadata) stops the process before it starts serving.

Usage:
    python -m clarus_mens.server.main
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional

import uvicorn

from ..config import ConfigurationError, Settings
from ..http_api import create_app

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
CONSOLE_HANDLER_NAME = "clarus-console"
FILE_HANDLER_NAME = "clarus-file"
HANDLER_NAMES = (CONSOLE_HANDLER_NAME, FILE_HANDLER_NAME)


def setup_logging(log_level_str: Optional[str] = None, log_dir: Optional[str] = None) -> logging.Logger:
    """
    Set up logging configuration.

    Configures console logging and, when a log directory is given, a rotating
    file handler.

    Args:
        log_level_str: Level name, ``LOG_LEVEL`` by default; unknown names fall
            back to INFO
        log_dir: Directory for ``clarus-mens.log``, ``LOG_DIR`` by default

    Returns:
        Logger instance for the main module
    """
    if log_level_str is None:
        log_level_str = os.environ.get("LOG_LEVEL", "INFO")
    log_level = getattr(logging, log_level_str.upper(), None)
    level_is_valid = isinstance(log_level, int) and log_level >= logging.DEBUG
    if not level_is_valid:
        log_level = logging.INFO

    if log_dir is None:
        log_dir = os.environ.get("LOG_DIR", "")

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.set_name(CONSOLE_HANDLER_NAME)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(console_handler)

    logger = logging.getLogger(__name__)

    if not level_is_valid:
        logger.warning(f"Unknown log level '{log_level_str}', using INFO")

    if log_dir:
        log_file = os.path.join(log_dir, "clarus-mens.log")
        try:
            Path(log_dir).mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                log_file, maxBytes=10 * 1024 * 1024, backupCount=5  # 10MB
            )
            file_handler.set_name(FILE_HANDLER_NAME)
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
            root_logger.addHandler(file_handler)
        except OSError as e:
            # Console logging still works
            logger.warning(f"Could not set up file logging: {e}")

    return logger


def main() -> None:
    """
    Main entry point for the Clarus Mens API server.

    Exits with status 1 when settings or API metadata configuration are
    invalid.
    """
    try:
        settings = Settings.load_runtime_config()
    except ConfigurationError as e:
        print(f"Critical error during startup: {e}", file=sys.stderr)
        sys.exit(1)

    logger = setup_logging(settings.log_level, settings.log_dir)

    errors = settings.validate()
    if errors:
        for error in errors:
            logger.critical(f"Configuration error: {error}")
        sys.exit(1)

    for key, value in settings.get_startup_summary().items():
        logger.debug(f"{key}: {value}")

    try:
        app = create_app(settings=settings)
    except ConfigurationError as e:
        logger.critical(f"Refusing to start: {e}")
        sys.exit(1)

    logger.info(f"Listening on: {settings.host}:{settings.port}")
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=logging.getLevelName(logging.getLogger().level).lower(),
        access_log=True,
    )


if __name__ == "__main__":
    main()
