"""Custom exception hierarchy for chyoa-downloader."""


class ChyoaDownloaderError(Exception):
    """Base exception for all chyoa-downloader errors."""


class FetchError(ChyoaDownloaderError):
    """Raised when a chapter page cannot be fetched.

    Network failures, HTTP error statuses, bot challenges and login
    redirects all end up here; the message says which.
    """


class ImageError(ChyoaDownloaderError):
    """Raised when a single image cannot be fetched, transcoded or written."""


class RenderError(ChyoaDownloaderError):
    """Raised when HTML cannot be rendered to Markdown."""


class ConfigError(ChyoaDownloaderError):
    """Raised when command-line options or settings conflict."""


class AuthenticationError(ChyoaDownloaderError):
    """Raised when authentication fails or the session is invalid."""
