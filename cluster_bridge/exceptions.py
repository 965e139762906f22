"""Custom exceptions for cluster bridge."""


class ClusterBridgeError(Exception):
    """Base exception for all cluster bridge errors."""

    def __init__(self, message: str, details: str = None):
        """Initialize the exception.

        Args:
            message: Main error message
            details: Additional details or suggestions
        """
        self.message = message
        self.details = details
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format the complete error message.

        Returns:
            Formatted error message with details
        """
        if self.details:
            return f"{self.message}\n\nDetails: {self.details}"
        return self.message


class PreconditionError(ClusterBridgeError):
    """Exception raised when a required external capability is absent."""

    pass


class ResourceLookupError(ClusterBridgeError):
    """Exception raised when an expected node, service, or control-plane IP is missing."""

    pass


class ExternalCommandError(ClusterBridgeError):
    """Exception raised when an invoked external tool fails."""

    def __init__(
        self,
        message: str,
        details: str = None,
        command: list[str] | None = None,
        returncode: int = 1,
    ):
        """Initialize the exception.

        Args:
            message: Main error message
            details: Raw error output of the failed tool
            command: The command line that failed
            returncode: Exit status of the failed command
        """
        self.command = command or []
        self.returncode = returncode
        super().__init__(message, details)


class ConfigurationError(ClusterBridgeError):
    """Exception raised for configuration errors."""

    pass
