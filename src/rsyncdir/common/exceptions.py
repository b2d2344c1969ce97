from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union


class ErrorCode(Enum):
    """Standard error codes for rsyncdir operations.

    This enum provides categorized error codes that can be used
    to identify error types without creating numerous exception classes.

    Attributes:
        CONFIG_*: Configuration-related errors
        VALIDATION_*: Input validation errors
        FILESYSTEM_*: Errors raised by filesystem primitives
        STATE_*: Revision ledger errors
        PUBLISH_*: Errors while switching the live revision
        CLEANUP_*: Errors while reclaiming deprecated revisions
    """
    # Configuration errors
    CONFIG_ERROR = "CONFIG_001"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_001"
    INVALID_URI = "VALIDATION_002"

    # Filesystem errors
    FILESYSTEM_ERROR = "FILESYSTEM_001"

    # Ledger errors
    STATE_CORRUPTED = "STATE_001"

    # Publication errors
    PUBLISH_ERROR = "PUBLISH_001"

    # Cleanup errors
    CLEANUP_ERROR = "CLEANUP_001"


class RsyncDirError(Exception):
    """Base exception for all rsyncdir errors.

    Every fatal condition of a publication cycle is surfaced as an
    ``RsyncDirError``; the error code tells callers which step failed.

    Attributes:
        message: Error message
        error_code: Error code from ErrorCode enum
        details: Additional error details (paths, operation names)
        cause: Optional underlying exception
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.FILESYSTEM_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause

        # Lazy import to avoid circular dependency
        from rsyncdir.logging import get_logger
        logger = get_logger(__name__)
        logger.error(
            message,
            extra={
                "error_code": error_code.value,
                "details": self.details,
            },
            exc_info=cause,
        )

    def __str__(self) -> str:
        msg = f"[{self.error_code.value}] {self.message}"
        if self.cause:
            msg = f"{msg} (caused by: {type(self.cause).__name__}: {str(self.cause)})"
        return msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "error_name": self.error_code.name,
            "details": self.details,
        }


# Helper functions for common error scenarios
def configuration_error(
    message: str,
    config_key: Optional[str] = None,
    **kwargs
) -> RsyncDirError:
    """Create a configuration error.

    Args:
        message: Error message
        config_key: Configuration key that caused the error
        **kwargs: Additional error details

    Returns:
        RsyncDirError with CONFIG_ERROR code
    """
    details = kwargs.get('details', {})
    if config_key:
        details["config_key"] = config_key

    return RsyncDirError(
        message=message,
        error_code=ErrorCode.CONFIG_ERROR,
        details=details,
        **{k: v for k, v in kwargs.items() if k != 'details'}
    )


def validation_error(
    message: str,
    field: Optional[str] = None,
    value: Any = None,
    error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
    **kwargs
) -> RsyncDirError:
    """Create a validation error.

    Args:
        message: Error message
        field: Field that failed validation
        value: Invalid value
        error_code: Specific validation code
        **kwargs: Additional error details

    Returns:
        RsyncDirError with a VALIDATION_* code
    """
    details = kwargs.get('details', {})
    if field:
        details["field"] = field
    if value is not None:
        details["value"] = str(value)

    return RsyncDirError(
        message=message,
        error_code=error_code,
        details=details,
        **{k: v for k, v in kwargs.items() if k != 'details'}
    )


def filesystem_error(
    operation: str,
    path: Union[str, Path],
    original_error: Exception,
    message: Optional[str] = None,
    error_code: ErrorCode = ErrorCode.FILESYSTEM_ERROR,
    **kwargs
) -> RsyncDirError:
    """Create an error for a failed filesystem operation.

    Args:
        operation: Name of the operation (e.g. "write", "rename")
        path: Path the operation acted on
        original_error: The underlying OSError
        message: Optional message overriding the generated one
        error_code: Code to report, FILESYSTEM_ERROR unless a step-specific
            code is more useful to the caller
        **kwargs: Additional error details

    Returns:
        RsyncDirError carrying operation and path details
    """
    details = kwargs.get('details', {})
    details["operation"] = operation
    details["path"] = str(path)

    return RsyncDirError(
        message=message or f"Could not {operation} '{path}': {original_error}",
        error_code=error_code,
        details=details,
        cause=original_error,
        **{k: v for k, v in kwargs.items() if k not in ['details', 'cause']}
    )


def state_corrupted_error(
    state_path: Union[str, Path],
    original_error: Exception,
    **kwargs
) -> RsyncDirError:
    """Create an error for a ledger file that cannot be deserialized.

    Args:
        state_path: Location of the ledger file
        original_error: The parse or validation error

    Returns:
        RsyncDirError with STATE_CORRUPTED code
    """
    details = kwargs.get('details', {})
    details["path"] = str(state_path)

    return RsyncDirError(
        message=f"Cannot deserialize json for current state from '{state_path}'",
        error_code=ErrorCode.STATE_CORRUPTED,
        details=details,
        cause=original_error,
        **{k: v for k, v in kwargs.items() if k not in ['details', 'cause']}
    )


def publish_error(
    operation: str,
    source: Union[str, Path],
    target: Union[str, Path],
    original_error: Exception,
    **kwargs
) -> RsyncDirError:
    """Create an error for a failed step of the live revision switch.

    Args:
        operation: Step that failed (e.g. "rename symlink")
        source: Path being moved or linked from
        target: Path being replaced
        original_error: The underlying OSError

    Returns:
        RsyncDirError with PUBLISH_ERROR code
    """
    details = kwargs.get('details', {})
    details["operation"] = operation
    details["source"] = str(source)
    details["target"] = str(target)

    return RsyncDirError(
        message=f"Could not {operation} from '{source}' to '{target}'",
        error_code=ErrorCode.PUBLISH_ERROR,
        details=details,
        cause=original_error,
        **{k: v for k, v in kwargs.items() if k not in ['details', 'cause']}
    )
