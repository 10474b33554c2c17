"""Run registry error taxonomy.

Not Found and Conflict outcomes are distinct types so retry logic can
react to a lost version race without catching missing-record errors.
"""

from mlops.errors.config import ErrorCode
from mlops.errors.exceptions import (
    ConflictError,
    NotFoundError,
    RunArtifactNotFoundError,
    RunNotFoundError,
    RunRegistryError,
    VersionConflictError,
)

__all__ = [
    # Config
    "ErrorCode",
    # Exceptions
    "ConflictError",
    "NotFoundError",
    "RunArtifactNotFoundError",
    "RunNotFoundError",
    "RunRegistryError",
    "VersionConflictError",
]
