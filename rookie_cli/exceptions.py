"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class RookieError(Exception):
    """Base exception for all application-specific errors."""


class BridgeToolError(RookieError):
    """
    Raised when the adb bridge tool cannot be run, times out, or exits non-zero.
    """

    def __init__(
        self,
        message: str,
        args_used: list[str] | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.args_used = list(args_used or [])
        self.returncode = returncode
        self.stderr = stderr


class ConfigError(RookieError):
    """Raised for a missing or malformed server or settings configuration."""


class NetworkError(RookieError):
    """Raised when an HTTP request for the catalog or an artifact fails."""


class ParseError(RookieError):
    """Raised when a fetched document does not match the expected JSON schema."""


class ValidationError(RookieError):
    """
    Raised when a workflow is missing caller input, such as a selected device
    or an existing local APK.
    """
