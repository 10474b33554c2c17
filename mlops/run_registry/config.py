"""Run registry - Configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from mlops.settings import Settings, get_settings


@dataclass
class RepositoryConfig:
    """Configuration for the run repository."""

    # Attempts at the read-max/insert sequence before a VersionConflictError
    max_register_attempts: int = 5

    def __post_init__(self) -> None:
        if self.max_register_attempts < 1:
            raise ValueError(
                f"max_register_attempts must be >= 1, got {self.max_register_attempts}"
            )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "RepositoryConfig":
        settings = settings or get_settings()
        return cls(max_register_attempts=settings.register_max_attempts)
