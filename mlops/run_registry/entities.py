"""Run registry - Hydrated entities.

Plain dataclasses detached from any session. Repository read operations
return these, fully populated by the entity resolvers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional


@dataclass(frozen=True)
class PackageDependency:
    """A package name and version installed for a run."""

    name: str
    version: str


@dataclass(frozen=True)
class ModelSchema:
    """One model input/output field and its type descriptor."""

    name: str
    type: str


@dataclass
class RunArtifact:
    """A named output produced by a run, prior to registration."""

    run_artifact_id: str
    run_id: str
    name: str
    created_at: Optional[datetime] = None


@dataclass
class Run:
    """A single training/execution instance within an experiment."""

    run_id: str
    experiment_id: str
    commit_hash: str = ""
    package_dependencies: List[PackageDependency] = field(default_factory=list)
    model_schemas: List[ModelSchema] = field(default_factory=list)
    run_artifacts: List[RunArtifact] = field(default_factory=list)
    training_time: Optional[timedelta] = None
    created_at: Optional[datetime] = None


@dataclass
class RegisteredModel:
    """A versioned promotion of a run artifact."""

    registered_model_id: str
    run_artifact_id: str
    run_id: str
    experiment_id: str
    version: int
    registered_by: str
    registered_date: datetime
    description: str = ""
    run: Optional[Run] = None
    run_artifact: Optional[RunArtifact] = None
