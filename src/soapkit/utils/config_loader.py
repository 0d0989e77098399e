# soapkit/utils/config_loader.py
"""
soapkit Configuration Loader with Pydantic Validation

This module loads and validates configuration from a YAML file using Pydantic
for strong type checking and validation. It also owns the process-wide
settings object that SoapResponse reads when no explicit policy is passed.

Key Design Decisions:
- Pydantic models mirror the exact structure of config.yaml for maintainability
- Validation occurs at load time to fail fast if config is malformed
- Every field has a default, so an empty SoapKitConfig() is a usable config
- Log levels support both string names ("DEBUG") and numeric values (10)
- The process-wide settings are only read by SoapResponse, never written
"""

import logging
from pathlib import Path
from typing import Any, Literal, cast

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

# Set up a logger for this module
logger: logging.Logger = logging.getLogger(__name__)

# =============================================================================
# Type Aliases for Clarity
# =============================================================================

# Valid logging level names recognized by Python's logging module
LogLevelName = Literal['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']

# How element names are rewritten when XML is converted to a dict
TagConversion = Literal['snake_case', 'none']

# =============================================================================
# Configuration Models (Schema)
# =============================================================================


class ResponseSection(BaseModel):
    """
    Schema for the 'response' section of config.yaml.

    Controls how SoapResponse classifies failures and how the XML body is
    converted into nested dictionaries.
    """

    model_config = ConfigDict(extra='forbid')
    raise_errors: bool = Field(
        default=True,
        description='Raise SoapFaultError / HttpError while constructing a '
        'SoapResponse. When False, callers must check success explicitly.',
    )

    strip_namespaces: bool = Field(
        default=True,
        description='Drop namespace prefixes from element names in the parsed tree.',
    )

    convert_tags_to: TagConversion = Field(
        default='snake_case',
        description="Rewrite element names to snake_case, or keep them as-is ('none').",
    )

    advanced_typecasting: bool = Field(
        default=True,
        description="Convert 'true'/'false' leaf values to booleans.",
    )

    keep_attributes: bool = Field(
        default=False,
        description="Keep element attributes in the parsed tree under '@name' keys.",
    )


class LoggingSection(BaseModel):
    """
    Schema for the 'logging' section of config.yaml.

    Supports dual-destination logging:
    1. Console (stdout) - Always enabled, typically WARNING level for a library
    2. File (optional) - Detailed logs for troubleshooting, typically DEBUG level
    """

    model_config = ConfigDict(extra='forbid')
    console_level: LogLevelName | int = Field(
        default='WARNING',
        description='Logging level for console output. Accepts either a string name '
        '(DEBUG, INFO, WARNING, ERROR, CRITICAL) or an integer (10, 20, 30, 40, 50).',
    )

    file_path: Path | None = Field(
        default=None,
        description='Optional path to a log file. If None, file logging is disabled.',
    )

    file_level: LogLevelName | int | None = Field(
        default=None,
        description='Logging level for file output. Only relevant if file_path is provided.',
    )

    @field_validator('console_level', 'file_level')
    @classmethod
    def validate_log_level(
        cls, v: LogLevelName | int | None
    ) -> LogLevelName | int | None:
        """
        Validate that log levels are either valid string names or valid numeric values.
        """
        if v is None:
            return v

        # Literal already validated the string names
        if isinstance(v, str):
            return v

        valid_levels: set[int] = {10, 20, 30, 40, 50}
        if v not in valid_levels:
            raise ValueError(
                f'Numeric log level must be one of {valid_levels}, got {v}'
            )
        return v

    @model_validator(mode='after')
    def validate_file_logging_consistency(self) -> 'LoggingSection':
        """
        Ensure that if file_path is provided, file_level is also provided, and vice versa.
        """
        has_file_path: bool = self.file_path is not None
        has_file_level: bool = self.file_level is not None

        if has_file_path and not has_file_level:
            self.file_level = 'DEBUG'
            logger.warning(
                'file_path provided without file_level. Defaulting to DEBUG for file logging.'
            )

        if has_file_level and not has_file_path:
            raise ValueError(
                'file_level is specified but file_path is missing. '
                'Both must be provided to enable file logging.'
            )

        return self

    def get_console_level_int(self) -> int:
        """
        Convert console_level to the integer value used by Python's logging module.
        """
        if isinstance(self.console_level, int):
            return self.console_level
        return cast(int, getattr(logging, self.console_level))

    def get_file_level_int(self) -> int | None:
        """
        Convert file_level to the integer value used by Python's logging module.

        Returns:
            The integer logging level, or None if file logging is disabled
        """
        if self.file_level is None:
            return None
        if isinstance(self.file_level, int):
            return self.file_level
        return cast(int, getattr(logging, self.file_level))


class SoapKitConfig(BaseModel):
    """
    Root configuration model.

    Usage:
        config = load_config()
        raise_errors = config.response.raise_errors
        log_level = config.logging.get_console_level_int()
    """

    model_config = ConfigDict(extra='forbid')
    response: ResponseSection = Field(default_factory=ResponseSection)
    logging: LoggingSection = Field(default_factory=LoggingSection)


# =============================================================================
# Loader Logic
# =============================================================================


def _get_default_config_path() -> Path:
    """
    Resolve the absolute path to the default config.yaml shipped with the package.

    Directory Structure:
        src/
        └── soapkit/
            ├── config/
            │   └── config.yaml       <-- Target file
            └── utils/
                └── config_loader.py  <-- This file
    """
    current_file: Path = Path(__file__).resolve()
    soapkit_package_root: Path = current_file.parent.parent
    return soapkit_package_root / 'config' / 'config.yaml'


def load_config(config_path: Path | str | None = None) -> SoapKitConfig:
    """
    Load, parse, and validate the configuration file.

    Args:
        config_path: Optional explicit path to a config file. If None, uses
                     the default location determined by _get_default_config_path().

    Returns:
        A fully validated SoapKitConfig object.

    Raises:
        FileNotFoundError: The specified config file does not exist on disk.
        yaml.YAMLError: The file exists but contains invalid YAML syntax.
        ValidationError: The YAML is valid but the configuration is invalid.

    Example:
        >>> config = load_config()
        >>> test_config = load_config('/tmp/test_config.yaml')
        >>> config.response.raise_errors
        True
    """
    if config_path:
        path_obj: Path = Path(config_path)
    else:
        path_obj = _get_default_config_path()

    logger.debug('Resolving configuration from: %s', path_obj)

    if not path_obj.exists():
        error_msg: str = f'Configuration file not found at: {path_obj}'
        logger.error(error_msg)
        raise FileNotFoundError(error_msg)

    try:
        with open(path_obj, encoding='utf-8') as f:
            raw_config: dict[str, Any] | None = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error('Failed to parse YAML config file: %s', e)
        raise

    # An empty file means "all defaults"
    try:
        config = SoapKitConfig(**(raw_config or {}))
        logger.debug('Configuration validated successfully.')
        return config
    except ValidationError as e:
        logger.error('Configuration validation failed: %s', e)
        raise


# =============================================================================
# Process-wide Settings
# =============================================================================
# SoapResponse reads these when neither raise_errors nor config is passed to it.
# The host application sets them once, before constructing responses.

_settings: SoapKitConfig = SoapKitConfig()


def get_settings() -> SoapKitConfig:
    """Return the process-wide configuration."""
    return _settings


def configure(
    config: SoapKitConfig | None = None, **response_overrides: Any
) -> SoapKitConfig:
    """
    Replace the process-wide configuration.

    Args:
        config: A complete configuration to install. If None, the current
                settings are used as the starting point.
        **response_overrides: Individual fields of the 'response' section to
                override, e.g. ``configure(raise_errors=False)``.

    Returns:
        The installed configuration.

    Raises:
        ValidationError: If an override is not a valid 'response' field value.
    """
    global _settings

    base: SoapKitConfig = config if config is not None else _settings

    if response_overrides:
        response: ResponseSection = ResponseSection.model_validate(
            {**base.response.model_dump(), **response_overrides}
        )
        base = base.model_copy(update={'response': response})

    _settings = base
    logger.debug('Process-wide settings updated: %r', _settings.response)
    return _settings


def reset_settings() -> SoapKitConfig:
    """Restore the process-wide configuration to its defaults."""
    return configure(SoapKitConfig())
