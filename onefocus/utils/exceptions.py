"""Custom exceptions for the system."""

class ConfigError(Exception):
    """Raised when there is a configuration error."""
    pass


class DatabaseError(Exception):
    """Raised when a database operation fails."""
    pass


class StoreUnavailableError(DatabaseError):
    """Raised when the embedded focus store cannot be opened at all.

    Callers treat this as a degraded mode: focus tracking keeps running
    without persistence and the user is warned once.
    """
    def __init__(self, message: str = "The focus history store could not be opened. Window tracking is disabled."):
        super().__init__(message)


class ValidationError(Exception):
    """Raised when schema validation fails."""
    pass


class MigrationError(Exception):
    """Raised when a schema migration fails."""
    pass


class WindowTrackingError(Exception):
    """Base exception for OS window automation errors.

    This covers enumerating application windows, reading their titles
    and raising them to the front.
    """
    pass


class PlatformUnsupportedError(WindowTrackingError):
    """Raised when window automation is not available on this platform."""
    def __init__(self, message: str = "Window switching is only supported on macOS."):
        super().__init__(message)


class PermissionDeniedError(WindowTrackingError):
    """Raised when the OS refuses the automation permission.

    The message carries the raw diagnostic text from the OS, optionally
    followed by a remediation hint.
    """
    pass


class AutomationError(WindowTrackingError):
    """Exception raised for automation failures other than permission errors.

    This includes non-zero exits and unexpected output of the scripting host.
    """
    def __init__(self, message: str, returncode: int = None, stderr: str = None):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class NoSupportedApplicationRunningError(WindowTrackingError):
    """Raised when none of the supported editor applications is running."""
    def __init__(self, message: str = "Cursor or VS Code is not running."):
        super().__init__(message)


class NoMatchingWindowError(WindowTrackingError):
    """Raised when editors are running but none of their windows matches."""
    def __init__(self, message: str = "Unable to find a Cursor or VS Code window that matches the recorded history."):
        super().__init__(message)


class TaskDefinitionError(Exception):
    """Raised when flow.toml tasks cannot be located or parsed."""
    pass


class CommandError(Exception):
    """Raised when an external command fails to start or exits non-zero."""
    def __init__(self, message: str, returncode: int = None):
        super().__init__(message)
        self.returncode = returncode
