class ShortLinkError(Exception):
    """Base exception for all application-specific errors."""


class InvalidURLError(ShortLinkError):
    """Raised when a submitted URL is not an absolute http/https URL."""

    message = "The specified URL is invalid."

    def __init__(self, url=None):
        self.url = url
        super().__init__(self.message)


class CodeGenerationError(ShortLinkError):
    """Raised when no unique code could be produced within the configured bounds."""
