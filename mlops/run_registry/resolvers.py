"""Run registry - Entity resolvers.

Resolvers turn flat stored records into hydrated entities by issuing
explicit queries against a session handed in by the caller. They never
open sessions of their own, so hydration reads share the consistency scope
of the query that produced the record.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, Iterable, List, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

from mlops.db.models import (
    ModelSchemaRecord,
    PackageDependencyRecord,
    RegisteredModelRecord,
    RunArtifactRecord,
    RunRecord,
)

from .clock import as_utc
from .entities import ModelSchema, PackageDependency, RegisteredModel, Run, RunArtifact

RecordT = TypeVar("RecordT")
EntityT = TypeVar("EntityT")


class EntityResolver(ABC, Generic[RecordT, EntityT]):
    """Builds hydrated entities of one kind from raw records."""

    @abstractmethod
    def build_entity(self, session: Session, record: Optional[RecordT]) -> Optional[EntityT]:
        """Hydrate one record. A missing record resolves to ``None``."""

    def build_entities(self, session: Session, records: Iterable[RecordT]) -> List[EntityT]:
        """Hydrate each record, preserving input order."""
        return [self.build_entity(session, record) for record in records]


def to_run_artifact(record: RunArtifactRecord) -> RunArtifact:
    return RunArtifact(
        run_artifact_id=record.id,
        run_id=record.run_id,
        name=record.name,
        created_at=as_utc(record.created_at),
    )


def select_run_artifacts(run_id: str):
    """Artifacts of a run in creation order."""
    return (
        select(RunArtifactRecord)
        .where(RunArtifactRecord.run_id == run_id)
        .order_by(RunArtifactRecord.created_at, RunArtifactRecord.id)
    )


class RunResolver(EntityResolver[RunRecord, Run]):
    """Attaches dependencies, schema fields and artifacts to a run."""

    def build_entity(self, session: Session, record: Optional[RunRecord]) -> Optional[Run]:
        if record is None:
            return None

        dependencies = session.scalars(
            select(PackageDependencyRecord)
            .where(PackageDependencyRecord.run_id == record.id)
            .order_by(PackageDependencyRecord.id)
        ).all()
        schemas = session.scalars(
            select(ModelSchemaRecord)
            .where(ModelSchemaRecord.run_id == record.id)
            .order_by(ModelSchemaRecord.position)
        ).all()
        artifacts = session.scalars(select_run_artifacts(record.id)).all()

        return Run(
            run_id=record.id,
            experiment_id=record.experiment_id,
            commit_hash=record.commit_hash or "",
            package_dependencies=[
                PackageDependency(name=d.name, version=d.version) for d in dependencies
            ],
            model_schemas=[ModelSchema(name=s.name, type=s.type) for s in schemas],
            run_artifacts=[to_run_artifact(a) for a in artifacts],
            training_time=record.training_time,
            created_at=as_utc(record.created_at),
        )


class RegisteredModelResolver(EntityResolver[RegisteredModelRecord, RegisteredModel]):
    """Attaches the owning run (hydrated) and the registered artifact."""

    def __init__(self, run_resolver: Optional[RunResolver] = None) -> None:
        self._run_resolver = run_resolver or RunResolver()

    def build_entity(
        self, session: Session, record: Optional[RegisteredModelRecord]
    ) -> Optional[RegisteredModel]:
        if record is None:
            return None

        run_record = session.get(RunRecord, record.run_id)
        artifact_record = session.get(RunArtifactRecord, record.run_artifact_id)

        return RegisteredModel(
            registered_model_id=record.id,
            run_artifact_id=record.run_artifact_id,
            run_id=record.run_id,
            experiment_id=record.experiment_id,
            version=record.version,
            registered_by=record.registered_by,
            registered_date=as_utc(record.registered_date),
            description=record.description or "",
            run=self._run_resolver.build_entity(session, run_record),
            run_artifact=to_run_artifact(artifact_record) if artifact_record is not None else None,
        )
