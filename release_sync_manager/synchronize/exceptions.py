"""Contains exceptions raised while synchronizing pull requests with their issues."""


class SyncTemplateError(Exception):
    """Raised when a pull request sync template cannot be rendered."""

    pass


class PullRequestMetadataError(Exception):
    """Raised when the pull request metadata embedded in an issue body is invalid."""

    def __init__(self, message: str, body: str | None = None) -> None:
        """Initializes the exception with the offending issue body."""
        super().__init__(message)
        self.body = body


class SyncLookupError(Exception):
    """Raised when GitHub could not be queried for a record needed by a sync run."""

    pass
