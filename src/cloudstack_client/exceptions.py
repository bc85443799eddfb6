"""Exception hierarchy for the CloudStack client.

Configuration, catalog and validation errors abort a call. Server-side and
async-job failures are returned as ``ErrorResult`` objects and only become
exceptions when the caller asks for it via ``ErrorResult.raise_for_error()``.
"""

from typing import Any, Dict, Optional


class CloudStackClientError(Exception):
    """Base class for all client errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details: Dict[str, Any] = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(CloudStackClientError):
    """No usable profile or invalid settings."""


class ProfileNotFoundError(ConfigurationError):
    """Raised when a profile name cannot be resolved by the profile store."""

    def __init__(self, profile_name: str) -> None:
        super().__init__(
            f"Connection profile not found: {profile_name}",
            error_code="PROFILE_NOT_FOUND",
            details={"profile_name": profile_name},
        )


class CatalogError(CloudStackClientError):
    """The listApis discovery call failed or returned an unusable payload."""


class ValidationError(CloudStackClientError):
    """A call was rejected before any network access."""


class CommandNotFoundError(ValidationError):
    """The command name is not part of the loaded catalog."""

    def __init__(self, command: str) -> None:
        super().__init__(
            f"Unknown command: {command}",
            error_code="COMMAND_NOT_FOUND",
            details={"command": command},
        )


class MissingParameterError(ValidationError):
    """One or more required parameters were not supplied."""

    def __init__(self, command: str, missing: list) -> None:
        super().__init__(
            f"Missing required parameter(s) for {command}: {', '.join(missing)}",
            error_code="MISSING_PARAMETER",
            details={"command": command, "missing": list(missing)},
        )


class TransportError(CloudStackClientError):
    """Network or HTTP level failure."""


class ApiError(CloudStackClientError):
    """The server answered with ``success=false`` or an error body."""


class JobFailedError(ApiError):
    """An asynchronous job finished with status 2."""


class JobTimeoutWarning(UserWarning):
    """The wait budget ran out while the job was still pending."""
