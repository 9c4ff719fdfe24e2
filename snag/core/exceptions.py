"""
Exception classes for snag.

This module defines all custom exceptions used throughout the application.
Each exception is designed to provide clear, actionable error messages
and to distinguish between different failure modes.

Exception Hierarchy:
    SnagError (base)
        ConfigError - Configuration file issues
        NetworkError - Transport or HTTP status failure talking to Audius
        EnvelopeError - Audius answered, but not with a {"data": ...} envelope
        NotFoundError - No entity found by any resolution strategy
        InvalidIdentifierError - Malformed path / identifier shape
        EmptyPlaylistError - Playlist resolved but has zero tracks
        EmptyArchiveError - Compressed archive came out empty
        AssetError - Single image download attempt failed (always recovered)

Fatal vs. recoverable:
    Everything raised while resolving or hydrating content is fatal and
    reaches the caller unchanged. AssetError never leaves the asset fetcher:
    a missing image only marks the archive as incomplete.
"""


class SnagError(Exception):
    """
    Base exception for all snag errors.

    All custom exceptions in this project inherit from this class,
    allowing callers to catch all snag errors with a single
    except clause if desired.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g., identifier, URL).

    Example:
        try:
            result = await resolve_and_build_archive("artist/track", "track", ...)
        except SnagError as e:
            logger.error(f"Operation failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description that will be shown to the user.
            details: Optional dictionary containing additional context about the error.
                     Useful for logging and debugging. Common keys include:
                     - 'identifier': The content identifier being resolved
                     - 'url': URL that caused the error
                     - 'original_error': The underlying exception if wrapping another error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(SnagError):
    """
    Raised when there's an issue with the configuration file.

    This is a CRITICAL error that should stop program execution.

    Common causes:
        - An explicitly requested config file does not exist
        - config.yaml has invalid YAML syntax
        - Invalid field values (e.g., zero attempts, negative timeout)

    Example:
        raise ConfigError(
            "'download.max_attempts' must be a positive integer",
            details={'field': 'download.max_attempts', 'value': 0}
        )
    """
    pass


class NetworkError(SnagError):
    """
    Raised when a request to the Audius API fails at the transport or HTTP level.

    Attributes:
        status: HTTP status code, or None when no response was received
                (connection refused, DNS failure, timeout).
        body: Response body text for non-success statuses ("" otherwise).

    Note:
        The API layer never retries. During resolution a NetworkError from
        one strategy just moves the resolver on to the next strategy.

    Example:
        raise NetworkError(
            "API request failed: 404 Not Found",
            status=404,
            body='{"message": "not found"}',
            details={'url': 'https://api.audius.co/v1/tracks/abc'}
        )
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        body: str = "",
        details: dict | None = None
    ) -> None:
        """
        Initialize network error with HTTP context.

        Args:
            message: Human-readable error description.
            status: HTTP status code if a response was received.
            body: Response body text, kept for diagnostics.
            details: Optional dictionary with additional context.
        """
        super().__init__(message, details)
        self.status = status
        self.body = body


class EnvelopeError(SnagError):
    """
    Raised when a successful HTTP response lacks the {"data": ...} envelope.

    Common causes:
        - Body is not JSON (HTML error page from a proxy)
        - JSON is not an object
        - The 'data' key is absent
    """
    pass


class NotFoundError(SnagError):
    """
    Raised when no resolution strategy produced an entity.

    Example:
        raise NotFoundError(
            "Could not resolve track: someone/some-track",
            details={'identifier': 'someone/some-track', 'strategies': ['resolve_url']}
        )
    """
    pass


class InvalidIdentifierError(SnagError):
    """
    Raised when an identifier does not have a recognised shape.

    Always raised before any network request is made.

    Common causes:
        - Wrong number of path segments for the requested content type
        - Playlist kind marker other than 'album' or 'playlist'
        - Reserved Audius paths such as 'trending' or 'explore'
    """
    pass


class EmptyPlaylistError(SnagError):
    """
    Raised when a playlist or album resolves but its track list is empty.

    No archive is produced for an empty playlist.
    """
    pass


class EmptyArchiveError(SnagError):
    """
    Raised when the compressed archive is zero bytes.

    Sanity check only; a hydrated graph always yields at least a manifest.
    """
    pass


class AssetError(SnagError):
    """
    Raised for a single failed image download attempt.

    This is a NON-CRITICAL error - it drives the retry loop inside the
    asset fetcher and is never propagated past it.

    Common causes:
        - Non-2xx status from the image host
        - Content-Type is not image/*
        - Empty response body
    """
    pass
