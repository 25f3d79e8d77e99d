"""androidlib exception hierarchy.

All public exceptions inherit from AndroidLibError, giving callers a single
base class to catch when they want to handle any androidlib-specific failure
without swallowing unrelated errors.

Absence of an installation is never an error: detection returns ``None``.
The three constructor errors below are raised only by the strict
``parse_strict()`` entry points that callers invoke directly.
"""


class AndroidLibError(Exception):
    """Base exception for all androidlib errors."""


class InvalidDirectoryError(AndroidLibError, TypeError):
    """Raised when a directory argument is missing, empty, or not a string."""

    def __init__(self, message: str = "Expected directory to be a valid string") -> None:
        super().__init__(message)


class DirectoryNotFoundError(AndroidLibError):
    """Raised when a directory argument does not exist on disk."""

    def __init__(self, message: str = "Directory does not exist") -> None:
        super().__init__(message)


class NotAnInstallationError(AndroidLibError):
    """Raised when a directory exists but lacks the tool's required files.

    Attributes:
        tool: Display name of the tool that was expected (e.g. "Genymotion").
        missing: Relative paths of the required entries that were not found.
    """

    def __init__(self, tool: str, missing: list[str] | None = None) -> None:
        self.tool = tool
        self.missing = list(missing or [])
        super().__init__(f"Directory does not contain {tool}")


class DetectionError(AndroidLibError):
    """Raised when a detection pass cannot enumerate a search root.

    Per-candidate I/O failures are not reported this way; they are logged
    and the candidate is treated as "no match".
    """


class WatchError(AndroidLibError):
    """Raised when the filesystem-watch subscription itself fails.

    Delivered on a watch session's error channel; the session ends.
    """


class ConfigurationError(AndroidLibError):
    """Raised for malformed environment-driven settings."""


class UnknownProfileError(AndroidLibError, KeyError):
    """Raised when no detector profile matches a (detector, platform) pair."""
