"""Run registry: persistence and resolution of runs and registered models."""

from .clock import Clock, FixedClock, SystemClock
from .config import RepositoryConfig
from .entities import (
    ModelSchema,
    PackageDependency,
    RegisteredModel,
    Run,
    RunArtifact,
)
from .repository import RunRepository
from .resolvers import EntityResolver, RegisteredModelResolver, RunResolver
from .session import SessionFactory

__all__ = [
    # Clock
    "Clock",
    "FixedClock",
    "SystemClock",
    # Config
    "RepositoryConfig",
    # Entities
    "ModelSchema",
    "PackageDependency",
    "RegisteredModel",
    "Run",
    "RunArtifact",
    # Resolvers
    "EntityResolver",
    "RegisteredModelResolver",
    "RunResolver",
    # Session
    "SessionFactory",
    # Repository
    "RunRepository",
]
