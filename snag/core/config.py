"""
Configuration management for snag.

This module handles loading, validating, and providing access to the
application configuration stored in config.yaml.

The configuration file contains:
    - Audius API host, app identity and page size
    - Image download timeout, retry policy and hydration concurrency
    - Output directory for written archives and logs
    - ZIP compression level

Configuration File Location:
    By default config.yaml is looked up in the current working directory.
    When it is absent the built-in defaults are used, so snag runs
    without any configuration at all. An explicitly passed path must exist.

Example config.yaml:
    api:
      host: "https://api.audius.co"
      app_name: "snag"
      page_size: 100
      request_timeout: 30

    download:
      image_timeout: 10
      max_attempts: 3
      retry_base_delay: 1.0
      concurrency: 4

    output:
      directory: "~/Downloads/Snag"

    archive:
      compression_level: 6
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from snag.core.exceptions import ConfigError


# Default configuration file name (looked up in current working directory)
CONFIG_FILENAME = "config.yaml"

# Audius discovery host pool. Only the first host is used.
API_HOSTS = ("https://api.audius.co",)

DEFAULT_APP_NAME = "snag"
DEFAULT_PAGE_SIZE = 100
DEFAULT_OUTPUT_DIRECTORY = "~/Downloads/Snag"


@dataclass(frozen=True)
class ApiConfig:
    """
    Audius API access configuration.

    Attributes:
        host: Base URL of the Audius API host, without trailing slash.
        app_name: Value sent as the 'app_name' query parameter on every request.
                  Audius uses it to identify the calling application.
        page_size: Default 'limit' for artist track / playlist listings.
        request_timeout: Total timeout in seconds for a single API request,
                         or None to rely on aiohttp's default.
    """
    host: str = API_HOSTS[0]
    app_name: str = DEFAULT_APP_NAME
    page_size: int = DEFAULT_PAGE_SIZE
    request_timeout: float | None = 30.0


@dataclass(frozen=True)
class DownloadConfig:
    """
    Image download and hydration behavior.

    Attributes:
        image_timeout: Wall-clock budget in seconds for one image download attempt.
        max_attempts: Attempts per image before giving up. Default: 3.
        retry_base_delay: Delay before the second attempt, doubled for every
                          further attempt. Default: 1.0 second.
        concurrency: Maximum number of playlist tracks hydrated and images
                     fetched at the same time. Default: 4.
    """
    image_timeout: float = 10.0
    max_attempts: int = 3
    retry_base_delay: float = 1.0
    concurrency: int = 4


@dataclass(frozen=True)
class OutputConfig:
    """
    Output directory configuration.

    Attributes:
        directory: Absolute path where archives (and the logs/ folder) are written.
                   Path expansion is performed (~ is expanded to home directory).
    """
    directory: Path = field(
        default_factory=lambda: Path(DEFAULT_OUTPUT_DIRECTORY).expanduser().resolve()
    )


@dataclass(frozen=True)
class ArchiveConfig:
    """
    Archive packaging configuration.

    Attributes:
        compression_level: DEFLATE level (0-9) applied to every entry. Default: 6.
    """
    compression_level: int = 6


@dataclass(frozen=True)
class Config:
    """
    Complete application configuration.

    This is the main configuration object that aggregates all configuration
    sections. It is created by load_config() and should be treated as
    immutable (frozen dataclass). Config() with no arguments is the
    built-in default configuration.

    Example:
        config = load_config()
        print(f"Saving to: {config.output.directory}")
        print(f"API host: {config.api.host}")
    """
    api: ApiConfig = field(default_factory=ApiConfig)
    download: DownloadConfig = field(default_factory=DownloadConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    archive: ArchiveConfig = field(default_factory=ArchiveConfig)


def load_config(config_path: Path | None = None) -> Config:
    """
    Load and validate configuration from config.yaml.

    Args:
        config_path: Optional explicit path to config file.
                     If None, looks for config.yaml in current working directory
                     and falls back to defaults when it is not there.

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigError: If an explicit config file is not found, the file has
                     invalid YAML syntax, or contains invalid values.
                     The error message will indicate the specific problem.

    Behavior:
        1. Locate config file (explicit path or CWD/config.yaml)
        2. Read and parse YAML content (empty file means all defaults)
        3. Validate that each present section is a dictionary
        4. Parse each section, applying defaults for missing fields
        5. Create and return frozen Config object
    """
    explicit = config_path is not None
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME

    if not config_path.exists():
        if explicit:
            raise ConfigError(
                f"Configuration file not found: {config_path}",
                details={"file_path": str(config_path)}
            )
        return Config()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    if raw_config is None:
        return Config()

    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": str(config_path)}
        )

    return parse_config(raw_config)


def parse_config(raw_config: dict[str, Any]) -> Config:
    """
    Build a Config from an already-parsed dictionary.

    Split out of load_config() so the CLI and tests can build a
    configuration without touching the filesystem.

    Raises:
        ConfigError: If any section or value is invalid.
    """
    _validate_config(raw_config)

    return Config(
        api=_parse_api_config(raw_config.get("api")),
        download=_parse_download_config(raw_config.get("download")),
        output=_parse_output_config(raw_config.get("output")),
        archive=_parse_archive_config(raw_config.get("archive")),
    )


def _validate_config(raw_config: dict[str, Any]) -> None:
    """
    Validate the raw configuration dictionary structure.

    All sections are optional, but a section that is present must be
    a dictionary (or null).

    Raises:
        ConfigError: If a section has the wrong type.
    """
    for section in ("api", "download", "output", "archive"):
        value = raw_config.get(section)
        if value is not None and not isinstance(value, dict):
            raise ConfigError(
                f"Section '{section}' must be a dictionary",
                details={"section": section}
            )


def _parse_api_config(api_section: dict[str, Any] | None) -> ApiConfig:
    """
    Parse and validate the api configuration section.

    Raises:
        ConfigError: If host or app_name is empty, or page_size / request_timeout
                     are not positive numbers.
    """
    defaults = ApiConfig()
    if not api_section:
        return defaults

    host = api_section.get("host", defaults.host)
    if not isinstance(host, str) or not host.strip().startswith(("http://", "https://")):
        raise ConfigError(
            "'api.host' must be an http(s) URL",
            details={"field": "api.host", "value": host}
        )

    app_name = api_section.get("app_name", defaults.app_name)
    if not isinstance(app_name, str) or not app_name.strip():
        raise ConfigError(
            "'api.app_name' must be a non-empty string",
            details={"field": "api.app_name"}
        )

    page_size = _positive_int(api_section, "page_size", defaults.page_size, "api")

    request_timeout = api_section.get("request_timeout", defaults.request_timeout)
    if request_timeout is not None:
        request_timeout = _positive_number(request_timeout, "api.request_timeout")

    return ApiConfig(
        host=host.strip().rstrip("/"),
        app_name=app_name.strip(),
        page_size=page_size,
        request_timeout=request_timeout
    )


def _parse_download_config(download_section: dict[str, Any] | None) -> DownloadConfig:
    """
    Parse and validate the download configuration section.

    Applies defaults if section is missing or fields are not specified.

    Raises:
        ConfigError: If max_attempts / concurrency are not positive integers,
                     image_timeout is not positive, or retry_base_delay is negative.
    """
    defaults = DownloadConfig()
    if not download_section:
        return defaults

    image_timeout = _positive_number(
        download_section.get("image_timeout", defaults.image_timeout),
        "download.image_timeout"
    )
    max_attempts = _positive_int(download_section, "max_attempts", defaults.max_attempts, "download")
    concurrency = _positive_int(download_section, "concurrency", defaults.concurrency, "download")

    retry_base_delay = download_section.get("retry_base_delay", defaults.retry_base_delay)
    if (
        isinstance(retry_base_delay, bool)
        or not isinstance(retry_base_delay, (int, float))
        or retry_base_delay < 0
    ):
        raise ConfigError(
            "'download.retry_base_delay' must be a non-negative number",
            details={"field": "download.retry_base_delay", "value": retry_base_delay}
        )

    return DownloadConfig(
        image_timeout=float(image_timeout),
        max_attempts=max_attempts,
        retry_base_delay=float(retry_base_delay),
        concurrency=concurrency
    )


def _parse_output_config(output_section: dict[str, Any] | None) -> OutputConfig:
    """
    Parse and validate the output configuration section.

    Expands ~ to home directory and converts to absolute Path.
    Does NOT create the directory (that happens when the archive is written).

    Raises:
        ConfigError: If directory is present but empty.
    """
    if not output_section or output_section.get("directory") is None:
        return OutputConfig()

    directory = output_section["directory"]
    if not isinstance(directory, str) or not directory.strip():
        raise ConfigError(
            "'output.directory' must be a non-empty string",
            details={"field": "output.directory"}
        )

    return OutputConfig(directory=Path(directory.strip()).expanduser().resolve())


def _parse_archive_config(archive_section: dict[str, Any] | None) -> ArchiveConfig:
    """Parse the archive section; compression_level must be 0-9."""
    defaults = ArchiveConfig()
    if not archive_section:
        return defaults

    level = archive_section.get("compression_level", defaults.compression_level)
    if isinstance(level, bool) or not isinstance(level, int) or not 0 <= level <= 9:
        raise ConfigError(
            "'archive.compression_level' must be an integer between 0 and 9",
            details={"field": "archive.compression_level", "value": level}
        )

    return ArchiveConfig(compression_level=level)


def _positive_int(section: dict[str, Any], key: str, default: int, section_name: str) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError(
            f"'{section_name}.{key}' must be a positive integer",
            details={"field": f"{section_name}.{key}", "value": value}
        )
    return value


def _positive_number(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(
            f"'{field_name}' must be a positive number",
            details={"field": field_name, "value": value}
        )
    return float(value)
