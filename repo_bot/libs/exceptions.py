class NoApiTokenError(Exception):
    """Raised when no API token is available for GitHub API operations."""

    pass


class UnknownOperationError(ValueError):
    """Raised when an operation has no transport assigned to it."""

    pass
