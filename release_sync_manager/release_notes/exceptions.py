"""Contains exceptions raised while generating release notes."""


class ReleaseNotesConfigurationError(Exception):
    """Raised when the release notes settings are missing, invalid, or reference something that does not exist."""

    def __init__(self, message: str, setting: str | None = None) -> None:
        """Initializes the exception with the name of the offending setting."""
        super().__init__(message)
        self.setting = setting
