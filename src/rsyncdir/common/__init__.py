"""Common exceptions for rsyncdir.

Exception Design:
    The exception system uses error codes for categorization rather than
    numerous specific exception classes. All exceptions are ``RsyncDirError``
    instances carrying structured details (operation, paths) so a failed
    cycle can be diagnosed from its log line alone.
"""

from rsyncdir.common.exceptions import (
    RsyncDirError,
    ErrorCode,
    # Helper functions
    configuration_error,
    validation_error,
    filesystem_error,
    state_corrupted_error,
    publish_error,
)

__all__ = [
    # Base Exception and Error Codes
    "RsyncDirError",
    "ErrorCode",
    # Helper functions
    "configuration_error",
    "validation_error",
    "filesystem_error",
    "state_corrupted_error",
    "publish_error",
]
