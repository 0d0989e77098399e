# soapkit/utils/logger.py
"""
Logging configuration for the soapkit package.

Provides centralized logging setup to ensure consistent log formatting
and output across all modules in the package.
"""

import logging
from pathlib import Path
from sys import stdout

from .config_loader import SoapKitConfig

PACKAGE_LOGGER_NAME: str = 'soapkit'


def setup_logger(
    config: SoapKitConfig | None = None,
    logging_level: int = logging.WARNING,
    log_file_path: Path | None = None,
) -> logging.Logger:
    """
    Set up logging for the soapkit package.

    This function configures the package-level logger so that all modules
    (soapkit.response, soapkit.multipart, ...) inherit the same level and
    handlers.

    The function is idempotent - calling it multiple times will update
    the existing configuration rather than adding duplicate handlers.

    Args:
        config: Optional SoapKitConfig. When given, its 'logging' section
                wins over logging_level and log_file_path.
        logging_level: The console logging level. Defaults to WARNING.
        log_file_path: Optional path to a log file, written in addition to
                       the console output.

    Returns:
        The package-level logger.

    Example:
        >>> logger = setup_logger()
        >>> logger = setup_logger(logging_level=logging.DEBUG)
        >>> logger = setup_logger(config=load_config())
    """
    file_level: int | None = None
    if config is not None:
        logging_level = config.logging.get_console_level_int()
        log_file_path = config.logging.file_path
        file_level = config.logging.get_file_level_int()

    if log_file_path is not None and file_level is None:
        file_level = logging_level

    package_logger: logging.Logger = logging.getLogger(PACKAGE_LOGGER_NAME)

    # The logger passes everything either handler wants; handlers filter
    package_logger.setLevel(min(logging_level, file_level or logging_level))

    log_format: logging.Formatter = logging.Formatter(
        fmt='%(asctime)s - %(levelname)-8s - [%(name)s] - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )

    console_handlers: list[logging.Handler] = [
        h
        for h in package_logger.handlers
        if isinstance(h, logging.StreamHandler)
        and not isinstance(h, logging.FileHandler)
    ]
    file_handlers: list[logging.FileHandler] = [
        h for h in package_logger.handlers if isinstance(h, logging.FileHandler)
    ]

    if not console_handlers:
        console_handler: logging.Handler = logging.StreamHandler(stdout)
        console_handler.setFormatter(log_format)
        console_handler.setLevel(logging_level)
        package_logger.addHandler(console_handler)
    else:
        # Handler already exists - update its level to match new configuration
        for existing_handler in console_handlers:
            existing_handler.setLevel(logging_level)

    if log_file_path is not None and file_level is not None:
        if not file_handlers:
            log_file_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler: logging.FileHandler = logging.FileHandler(
                filename=str(log_file_path),
                mode='a',
                encoding='utf-8',
            )
            file_handler.setFormatter(log_format)
            file_handler.setLevel(file_level)
            package_logger.addHandler(file_handler)
            package_logger.info('Logging to file: %s', log_file_path)
        else:
            for existing_file_handler in file_handlers:
                existing_file_handler.setLevel(file_level)

    return package_logger
