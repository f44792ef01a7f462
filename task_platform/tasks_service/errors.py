"""
Error taxonomy for the Tasks Service.

Authentication failures and record store failures are kept in separate
branches so a route can never report one as the other. Each class carries
the event type it is logged under by `log_gate_event`.
"""
from typing import Optional


class TaskServiceError(Exception):
    """Base class for every failure raised by the tasks service core."""

    event_type = "task_service_error"


class AuthError(TaskServiceError):
    """The caller could not be authenticated. Always answered with a uniform 401."""

    event_type = "auth_error"


class AuthMissing(AuthError):
    """No usable bearer credential was presented. No network call is made."""

    event_type = "auth_missing"


class AuthInvalid(AuthError):
    """The auth service explicitly rejected the credential."""

    event_type = "auth_invalid"


class AuthUnreachable(AuthError):
    """The auth service could not be reached or answered with garbage."""

    event_type = "auth_unreachable"


class StoreError(TaskServiceError):
    """The record store operation failed."""

    event_type = "store_error"


class StoreWriteError(StoreError):
    event_type = "store_write_error"


class StoreReadError(StoreError):
    event_type = "store_read_error"


class StoreCorruptionError(StoreError):
    """
    A stored chunk could not be decoded.

    The whole read fails; `index` is the zero-based chunk position and
    `offset` the character offset of the chunk inside the file.
    """

    event_type = "store_corruption"

    def __init__(self, index: int, offset: int, reason: Optional[str] = None):
        self.index = index
        self.offset = offset
        self.reason = reason
        message = f"Task store is corrupt: chunk {index} at offset {offset} could not be decoded"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
