"""Error Configuration.

Error codes and retry classification for the run registry.
"""

from enum import Enum
from typing import Dict


class ErrorCode(Enum):
    """Standardized error codes raised by the persistence layer."""

    # Not found
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RUN_NOT_FOUND = "RUN_NOT_FOUND"
    RUN_ARTIFACT_NOT_FOUND = "RUN_ARTIFACT_NOT_FOUND"

    # Conflict
    RESOURCE_CONFLICT = "RESOURCE_CONFLICT"
    VERSION_CONFLICT = "VERSION_CONFLICT"

    # Server
    INTERNAL_ERROR = "INTERNAL_ERROR"


# Whether a caller may safely repeat the failed operation
ERROR_RETRYABLE_MAP: Dict[ErrorCode, bool] = {
    ErrorCode.RESOURCE_NOT_FOUND: False,
    ErrorCode.RUN_NOT_FOUND: False,
    ErrorCode.RUN_ARTIFACT_NOT_FOUND: False,
    ErrorCode.RESOURCE_CONFLICT: False,
    ErrorCode.VERSION_CONFLICT: True,
    ErrorCode.INTERNAL_ERROR: False,
}
