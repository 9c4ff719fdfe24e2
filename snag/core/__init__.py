"""
Core module for snag.

This module provides the foundational components used throughout the application:
    - exceptions: Custom exception classes for error handling
    - config: Configuration loading and validation
    - logger: Logging system with multiple outputs

Usage:
    from snag.core import (
        Config, load_config,
        setup_logging, get_logger,
        SnagError, ConfigError, NotFoundError
    )
"""

from snag.core.config import (
    ApiConfig,
    ArchiveConfig,
    Config,
    DownloadConfig,
    OutputConfig,
    load_config,
    parse_config,
)
from snag.core.exceptions import (
    AssetError,
    ConfigError,
    EmptyArchiveError,
    EmptyPlaylistError,
    EnvelopeError,
    InvalidIdentifierError,
    NetworkError,
    NotFoundError,
    SnagError,
)
from snag.core.logger import (
    get_logger,
    log_asset_failure,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    # Config
    "Config",
    "ApiConfig",
    "DownloadConfig",
    "OutputConfig",
    "ArchiveConfig",
    "load_config",
    "parse_config",
    # Exceptions
    "SnagError",
    "ConfigError",
    "NetworkError",
    "EnvelopeError",
    "NotFoundError",
    "InvalidIdentifierError",
    "EmptyPlaylistError",
    "EmptyArchiveError",
    "AssetError",
    # Logger
    "setup_logging",
    "get_logger",
    "log_asset_failure",
    "shutdown_logging",
]
