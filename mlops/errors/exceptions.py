"""Custom Exception Hierarchy.

Typed exceptions that let callers tell a missing record apart from a
lost version race without parsing messages.
"""

from typing import Any, Dict, List, Optional

from mlops.errors.config import ERROR_RETRYABLE_MAP, ErrorCode


class RunRegistryError(Exception):
    """Base exception for all run registry errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.retryable = ERROR_RETRYABLE_MAP.get(error_code, False)
        self.details = details or []


class NotFoundError(RunRegistryError):
    """Raised when a referenced record does not exist."""

    def __init__(
        self,
        message: str = "Resource not found",
        error_code: ErrorCode = ErrorCode.RESOURCE_NOT_FOUND,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
    ):
        details = []
        if resource_type or resource_id:
            details = [{"resource_type": resource_type, "resource_id": resource_id}]
        super().__init__(message, error_code, details)
        self.resource_type = resource_type
        self.resource_id = resource_id


class RunNotFoundError(NotFoundError):
    """Raised when a Run with the given id does not exist."""

    def __init__(self, run_id: str, message: Optional[str] = None):
        super().__init__(
            message or f"The run with id {run_id} does not exist",
            ErrorCode.RUN_NOT_FOUND,
            resource_type="run",
            resource_id=run_id,
        )


class RunArtifactNotFoundError(NotFoundError):
    """Raised when a RunArtifact with the given id does not exist."""

    def __init__(self, run_artifact_id: str, message: Optional[str] = None):
        super().__init__(
            message or f"The RunArtifact with id {run_artifact_id} does not exist",
            ErrorCode.RUN_ARTIFACT_NOT_FOUND,
            resource_type="run_artifact",
            resource_id=run_artifact_id,
        )


class ConflictError(RunRegistryError):
    """Raised when a write conflicts with concurrently committed state."""

    def __init__(
        self,
        message: str = "Resource conflict",
        error_code: ErrorCode = ErrorCode.RESOURCE_CONFLICT,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message, error_code, details)


class VersionConflictError(ConflictError):
    """Raised when a model version could not be assigned after all attempts.

    Concurrent registrations for the same experiment kept claiming the
    computed version first. The operation is safe to retry.
    """

    def __init__(self, experiment_id: str, version: int, attempts: int):
        super().__init__(
            f"Version {version} for experiment {experiment_id} was claimed "
            f"concurrently; gave up after {attempts} attempts",
            ErrorCode.VERSION_CONFLICT,
            details=[{
                "experiment_id": experiment_id,
                "version": version,
                "attempts": attempts,
            }],
        )
        self.experiment_id = experiment_id
        self.version = version
        self.attempts = attempts
