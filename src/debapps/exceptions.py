"""Exception classes for debapps operations."""


class DebappsError(Exception):
    """Base exception for debapps operations."""

    error_prefix: str = "Operation failed"

    def __init__(self, message: str, target: str | None = None) -> None:
        """Initialize error with message and optional target.

        Args:
            message: Error message describing the failure.
            target: Optional name of the target that failed.

        """
        super().__init__(message)
        self.message = message
        self.target = target

    def __str__(self) -> str:
        """Return formatted error message."""
        if self.target:
            return f"{self.error_prefix} for '{self.target}': {self.message}"
        return f"{self.error_prefix}: {self.message}"


class ConfigError(DebappsError):
    """Raised when a catalog entry or one of its fields is missing/invalid."""

    error_prefix = "Configuration error"


class ResolutionError(DebappsError):
    """Raised when the latest version of an app cannot be determined."""

    error_prefix = "Version resolution failed"


class DownloadError(DebappsError):
    """Raised when every download transport has failed."""

    error_prefix = "Download failed"


class InstallVerificationError(DebappsError):
    """Raised when a post-install probe does not confirm the install."""

    error_prefix = "Installation failed"


class RemovalSafetyError(DebappsError):
    """Raised when a removal would operate outside the tool's footprint."""

    error_prefix = "Removal refused"


class CommandError(DebappsError):
    """Raised when an external command exits with a non-zero status."""

    error_prefix = "Command failed"

    def __init__(
        self,
        message: str,
        target: str | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        """Initialize command error.

        Args:
            message: Error message describing the failure.
            target: Command that failed.
            returncode: Exit status of the process.
            stderr: Captured standard error output.

        """
        super().__init__(message, target)
        self.returncode = returncode
        self.stderr = stderr


class LedgerError(DebappsError):
    """Raised when the install ledger cannot be read or written."""

    error_prefix = "Ledger error"
