"""
Logging configuration for snag.

This module sets up the logging system with multiple outputs:
    - Console: Real-time progress with tqdm-compatible formatting
    - log_full.log: Complete log of all events (DEBUG and above)
    - log_errors.log: Only ERROR and CRITICAL level messages
    - asset_failures.log: Images that could not be downloaded, with their URLs

The logging system follows the principle: everything to screen is also saved
to file, then filtered into specialized files.

Log File Locations:
    All log files are created in <output directory>/logs, one set per run,
    suffixed with the run timestamp.

Usage:
    from snag.core.logger import setup_logging, get_logger

    setup_logging(output_dir)  # Call once at startup
    logger = get_logger(__name__)  # Get logger for each module

    logger.info("Resolving artist")
    log_asset_failure(logger, "avatar", "someone", url, "HTTP 500")
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TextIO

from tqdm import tqdm


LOG_FULL_FILENAME = "log_full"
LOG_ERRORS_FILENAME = "log_errors"
ASSET_FAILURES_FILENAME = "asset_failures"

# Log format for file output (detailed with timestamp)
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"
    BOLD = "\033[1m"


class ColoredConsoleFormatter(logging.Formatter):
    """
    Custom formatter that adds colors to console output.

    Colors:
        - DEBUG: Blue
        - INFO: Green
        - WARNING: Yellow
        - ERROR: Red
        - CRITICAL: Bold Red
    """

    LEVEL_COLORS = {
        logging.DEBUG: Colors.BLUE,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        colored_levelname = f"{color}{record.levelname}{Colors.RESET}"
        return f"{colored_levelname}: {record.getMessage()}"


class TqdmLoggingHandler(logging.Handler):
    """
    Logging handler that writes to console without breaking tqdm progress bars.

    tqdm progress bars write to stderr and use carriage returns to update in-place.
    Standard logging to stderr can interfere with this, causing visual glitches.
    This handler uses tqdm.write() which properly coordinates with active progress bars.

    Attributes:
        stream: The output stream (defaults to sys.stderr).
    """

    def __init__(self, stream: TextIO = sys.stderr) -> None:
        super().__init__()
        self.stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            tqdm.write(msg, file=self.stream)
        except Exception:
            self.handleError(record)


class AssetFailureHandler(logging.Handler):
    """
    Captures image download failures for the asset report file.

    This handler listens for log records that carry asset failure information
    and writes them to asset_failures.log in a simple, human-readable format:

        someone_avatar.jpg
        https://creatornode.audius.co/content/.../1000x1000.jpg
        HTTP 503 (after 3 attempts)

    The handler looks for specific extra fields in log records:
        - 'asset_failed_label': What the image is (avatar, cover, artwork)
        - 'asset_failed_owner': Display name of the entity the image belongs to
        - 'asset_failed_url': The URL that could not be fetched
        - 'asset_failed_reason': Last failure reason

    Only records containing these fields are written to the report.

    Attributes:
        report_path: Path to the asset_failures log file.
        report_file: Open file handle, set by open().
    """

    def __init__(self, report_path: Path) -> None:
        super().__init__()
        self.report_path = report_path
        self.report_file: TextIO | None = None

    def open(self) -> None:
        """
        Open the report file for writing.

        Called by setup_logging() after handler is created.
        File is opened in write mode (overwrites existing content).
        """
        self.report_file = open(self.report_path, "w", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        """
        Write failed asset info to the report if present in the log record.

        Records without 'asset_failed_label' are ignored.
        """
        if not hasattr(record, "asset_failed_label"):
            return

        if self.report_file is None:
            return

        try:
            label = getattr(record, "asset_failed_label", "image")
            owner = getattr(record, "asset_failed_owner", "unknown")
            url = getattr(record, "asset_failed_url", "")
            reason = getattr(record, "asset_failed_reason", "")

            self.report_file.write(f"{owner}_{label}.jpg\n")
            self.report_file.write(f"{url}\n")
            self.report_file.write(f"{reason}\n\n")
            self.report_file.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        """
        Close the report file handle.

        Called automatically when logging is shut down.
        Safe to call multiple times.
        """
        if self.report_file is not None:
            try:
                self.report_file.close()
            except OSError:
                pass
            self.report_file = None
        super().close()


class ErrorOnlyFilter(logging.Filter):
    """
    Filter that only allows ERROR and CRITICAL level records.

    Used by the error log file handler to exclude DEBUG, INFO, and WARNING.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def setup_logging(output_dir: Path, verbose: bool = False) -> None:
    """
    Configure the logging system for the application.

    This function should be called ONCE at application startup, after
    the configuration is loaded but before any other operations.

    Args:
        output_dir: Directory where log files will be created.
                    Logs are stored in a 'logs' subdirectory.
        verbose: If True, the console shows DEBUG records (strategy
                 fallbacks, every API request). Files always get DEBUG.

    Behavior:
        1. Create output_dir/logs if it doesn't exist
        2. Generate timestamp for this run's log files
        3. Configure root logger level to DEBUG
        4. Console handler (TqdmLoggingHandler), INFO or DEBUG, compact colored format
        5. Full log file handler: logs/log_full_{timestamp}.log, DEBUG
        6. Error log file handler: logs/log_errors_{timestamp}.log, ERROR+ via ErrorOnlyFilter
        7. Asset failure handler: logs/asset_failures_{timestamp}.log

    Thread Safety:
        Not thread-safe. Call it once before the event loop starts.
    """
    logs_dir = output_dir / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Remove any existing handlers
    root_logger.handlers.clear()

    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(ColoredConsoleFormatter())
    root_logger.addHandler(console_handler)

    full_log_path = logs_dir / f"{LOG_FULL_FILENAME}_{timestamp}.log"
    full_handler = logging.FileHandler(full_log_path, mode="w", encoding="utf-8")
    full_handler.setLevel(logging.DEBUG)
    full_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    root_logger.addHandler(full_handler)

    error_log_path = logs_dir / f"{LOG_ERRORS_FILENAME}_{timestamp}.log"
    error_handler = logging.FileHandler(error_log_path, mode="w", encoding="utf-8")
    error_handler.setLevel(logging.DEBUG)  # Filter handles the level restriction
    error_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    error_handler.addFilter(ErrorOnlyFilter())
    root_logger.addHandler(error_handler)

    asset_failures_path = logs_dir / f"{ASSET_FAILURES_FILENAME}_{timestamp}.log"
    asset_handler = AssetFailureHandler(asset_failures_path)
    asset_handler.open()
    root_logger.addHandler(asset_handler)

    # aiohttp's access/internal chatter stays out of the console
    logging.getLogger("aiohttp").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    This is a convenience wrapper around logging.getLogger() that ensures
    consistent logger naming throughout the application.

    Args:
        name: The logger name, typically __name__ of the calling module.
              This creates a hierarchy like 'snag.audius.resolver'.

    Note:
        Loggers obtained before setup_logging() is called will have no
        handlers and will not produce output. Library callers that never
        call setup_logging() simply get Python's default behaviour.
    """
    return logging.getLogger(name)


def format_archive_message(filename: str, size_bytes: int, images_complete: bool) -> str:
    """
    Format the final 'archive written' message with colors.

    Args:
        filename: Archive file name.
        size_bytes: Archive size in bytes.
        images_complete: Whether every image made it into the archive.
    """
    size_kb = size_bytes / 1024
    status = (
        f"{Colors.GREEN}all images included{Colors.RESET}"
        if images_complete
        else f"{Colors.YELLOW}some images missing{Colors.RESET}"
    )
    return f"Archive {Colors.CYAN}{filename}{Colors.RESET} ({size_kb:.1f} KB, {status})"


def log_asset_failure(
    logger: logging.Logger,
    label: str,
    owner: str,
    url: str,
    reason: str
) -> None:
    """
    Log an image that could not be downloaded.

    This is a convenience function that logs an asset failure with the
    correct extra fields for the AssetFailureHandler to pick up.

    Args:
        logger: The logger to use for the message.
        label: What the image is ("avatar", "cover", "artwork").
        owner: Display name of the owning entity.
        url: URL that failed.
        reason: Last failure reason.

    Behavior:
        Logs a WARNING (not ERROR: a missing image never fails the archive).
    """
    logger.warning(
        f"Image not downloaded: {owner} {label} - {reason}",
        extra={
            "asset_failed_label": label,
            "asset_failed_owner": owner,
            "asset_failed_url": url,
            "asset_failed_reason": reason,
        }
    )


def shutdown_logging() -> None:
    """
    Properly shut down the logging system.

    Flushes and closes every handler on the root logger, then removes them.
    Typically called in a finally block at CLI exit.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        try:
            handler.flush()
            handler.close()
        except OSError:
            pass
        root_logger.removeHandler(handler)
