"""SQLAlchemy ORM models for run tracking.

Tables:
- runs: One training/execution instance per row, owned by an experiment
- package_dependencies: name/version pairs owned by a run
- model_schemas: ordered input/output field descriptors owned by a run
- run_artifacts: Named outputs produced by a run
- registered_models: Versioned promotions of run artifacts (per experiment)

Relationships are resolved explicitly by the entity resolvers; no lazy
loading attributes are declared on the records.
"""

import uuid

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Interval,
    String,
    Text,
    UniqueConstraint,
)

from mlops.db.base import Base

VERSION_UNIQUE_CONSTRAINT = "uq_registered_models_experiment_version"


def _new_id() -> str:
    return str(uuid.uuid4())


class RunRecord(Base):
    """A training run belonging to an experiment."""

    __tablename__ = "runs"

    id = Column(String(36), primary_key=True, default=_new_id)
    experiment_id = Column(String(36), nullable=False, index=True)
    commit_hash = Column(String(64), nullable=False, default="", index=True)
    training_time = Column(Interval, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)


class PackageDependencyRecord(Base):
    """Package dependency (name + version) captured for a run."""

    __tablename__ = "package_dependencies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    run_id = Column(
        String(36), ForeignKey("runs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(200), nullable=False)
    version = Column(String(100), nullable=False)


class ModelSchemaRecord(Base):
    """One field of a run's model input/output schema."""

    __tablename__ = "model_schemas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    run_id = Column(
        String(36), ForeignKey("runs.id", ondelete="CASCADE"), nullable=False
    )
    position = Column(Integer, nullable=False)  # insertion order within the run
    name = Column(String(200), nullable=False)
    type = Column(String(200), nullable=False)

    __table_args__ = (
        Index("ix_model_schemas_run_position", "run_id", "position"),
    )


class RunArtifactRecord(Base):
    """A named artifact produced by a run (e.g. ``model.bin``)."""

    __tablename__ = "run_artifacts"

    id = Column(String(36), primary_key=True, default=_new_id)
    run_id = Column(
        String(36), ForeignKey("runs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(500), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)


class RegisteredModelRecord(Base):
    """A versioned registration of a run artifact.

    ``run_id`` and ``experiment_id`` are denormalised copies derived from the
    artifact at write time. ``(experiment_id, version)`` is unique so that a
    concurrent writer computing the same next version fails on commit.
    """

    __tablename__ = "registered_models"

    id = Column(String(36), primary_key=True, default=_new_id)
    run_artifact_id = Column(
        String(36), ForeignKey("run_artifacts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    run_id = Column(
        String(36), ForeignKey("runs.id", ondelete="CASCADE"), nullable=False
    )
    experiment_id = Column(String(36), nullable=False)
    version = Column(Integer, nullable=False)
    registered_by = Column(String(200), nullable=False)
    registered_date = Column(DateTime(timezone=True), nullable=False)
    description = Column(Text, nullable=False, default="")

    __table_args__ = (
        UniqueConstraint(
            "experiment_id", "version", name=VERSION_UNIQUE_CONSTRAINT
        ),
    )
