"""Run registry - Run repository.

Creates, queries and mutates runs, run artifacts and registered models.
Every public operation opens one session, does its work and releases the
session before returning; no state is shared between calls.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Iterable, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mlops.db.models import (
    ModelSchemaRecord,
    PackageDependencyRecord,
    RegisteredModelRecord,
    RunArtifactRecord,
    RunRecord,
    VERSION_UNIQUE_CONSTRAINT,
)
from mlops.errors import (
    ConflictError,
    RunArtifactNotFoundError,
    RunNotFoundError,
    VersionConflictError,
)
from mlops.logging_config import log_performance
from mlops.settings import Settings

from .clock import Clock, SystemClock, as_utc
from .config import RepositoryConfig
from .entities import ModelSchema, PackageDependency, RegisteredModel, Run, RunArtifact
from .resolvers import (
    RegisteredModelResolver,
    RunResolver,
    select_run_artifacts,
    to_run_artifact,
)
from .session import SessionFactory

logger = logging.getLogger(__name__)


class RunRepository:
    """Persistence operations over runs, artifacts and registered models.

    Stateless and safe to call from multiple threads. Model versions are
    assigned per experiment as ``max(existing) + 1``; the store's unique
    ``(experiment_id, version)`` constraint rejects a writer that lost a race,
    and :meth:`register_model` then repeats the whole read-compute-write
    sequence in a fresh session.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        clock: Optional[Clock] = None,
        run_resolver: Optional[RunResolver] = None,
        registered_model_resolver: Optional[RegisteredModelResolver] = None,
        config: Optional[RepositoryConfig] = None,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock or SystemClock()
        self._run_resolver = run_resolver or RunResolver()
        self._registered_model_resolver = (
            registered_model_resolver or RegisteredModelResolver(self._run_resolver)
        )
        self._config = config or RepositoryConfig()

    @classmethod
    def from_settings(
        cls, settings: Optional[Settings] = None, clock: Optional[Clock] = None
    ) -> "RunRepository":
        return cls(
            SessionFactory.from_settings(settings),
            clock=clock,
            config=RepositoryConfig.from_settings(settings),
        )

    # ── Runs ─────────────────────────────────────────────────────────

    @log_performance()
    def create_run(
        self,
        experiment_id: str,
        package_dependencies: Optional[Iterable[PackageDependency]] = None,
        commit_hash: str = "",
    ) -> Run:
        """Insert a new run for ``experiment_id`` and return it with its id."""
        with self._session_factory.scope() as session:
            record = RunRecord(
                experiment_id=experiment_id,
                commit_hash=commit_hash or "",
                created_at=as_utc(self._clock.now()),
            )
            session.add(record)
            session.flush()

            for dependency in package_dependencies or []:
                session.add(PackageDependencyRecord(
                    run_id=record.id,
                    name=dependency.name,
                    version=dependency.version,
                ))
            session.flush()

            run = self._run_resolver.build_entity(session, record)

        logger.info(
            "Created run %s for experiment %s.",
            run.run_id,
            experiment_id,
            extra={"run_id": run.run_id, "experiment_id": experiment_id},
        )
        return run

    @log_performance()
    def set_model_schema(self, run_id: str, schemas: Iterable[ModelSchema]) -> None:
        """Replace the run's schema list. The previous list is discarded."""
        with self._session_factory.scope() as session:
            self._require_run(session, run_id)

            session.execute(
                delete(ModelSchemaRecord).where(ModelSchemaRecord.run_id == run_id)
            )
            for position, schema in enumerate(schemas):
                session.add(ModelSchemaRecord(
                    run_id=run_id,
                    position=position,
                    name=schema.name,
                    type=schema.type,
                ))

    @log_performance()
    def get_run(self, run_id: str) -> Optional[Run]:
        """Return the hydrated run, or None when no such run exists."""
        with self._session_factory.scope() as session:
            record = session.get(RunRecord, run_id)
            return self._run_resolver.build_entity(session, record)

    @log_performance()
    def get_run_by_commit_hash(self, commit_hash: str) -> Optional[Run]:
        """Return the most recently created run with ``commit_hash``, or None."""
        with self._session_factory.scope() as session:
            record = session.scalars(
                select(RunRecord)
                .where(RunRecord.commit_hash == commit_hash)
                .order_by(RunRecord.created_at.desc(), RunRecord.id.desc())
                .limit(1)
            ).first()
            return self._run_resolver.build_entity(session, record)

    @log_performance()
    def get_runs(self, experiment_id: str) -> List[Run]:
        """Return all runs of an experiment in creation order, hydrated."""
        with self._session_factory.scope() as session:
            records = session.scalars(
                select(RunRecord)
                .where(RunRecord.experiment_id == experiment_id)
                .order_by(RunRecord.created_at, RunRecord.id)
            ).all()
            return self._run_resolver.build_entities(session, records)

    @log_performance()
    def set_training_time(self, run_id: str, training_time: timedelta) -> None:
        with self._session_factory.scope() as session:
            record = self._require_run(session, run_id)
            record.training_time = training_time

    # ── Run artifacts ────────────────────────────────────────────────

    @log_performance()
    def create_run_artifact(self, run_id: str, name: str) -> RunArtifact:
        """Record a named artifact produced by an existing run."""
        with self._session_factory.scope() as session:
            self._require_run(session, run_id)

            record = RunArtifactRecord(
                run_id=run_id,
                name=name,
                created_at=as_utc(self._clock.now()),
            )
            session.add(record)
            session.flush()
            artifact = to_run_artifact(record)

        logger.info(
            "Created run artifact '%s' (%s) for run %s.",
            name,
            artifact.run_artifact_id,
            run_id,
            extra={"run_id": run_id, "run_artifact_id": artifact.run_artifact_id},
        )
        return artifact

    @log_performance()
    def get_run_artifacts(self, run_id: str) -> List[RunArtifact]:
        with self._session_factory.scope() as session:
            records = session.scalars(select_run_artifacts(run_id)).all()
            return [to_run_artifact(r) for r in records]

    # ── Registered models ────────────────────────────────────────────

    @log_performance()
    def register_model(
        self,
        experiment_id: str,
        run_artifact_id: str,
        registered_by: str,
        description: str = "",
    ) -> RegisteredModel:
        """Register a run artifact as the next model version of an experiment.

        The run id stored on the registration is derived from the artifact.
        Returns the registration with a unique version, or raises
        :class:`VersionConflictError` once every attempt lost the race.

        Raises:
            RunArtifactNotFoundError: the artifact does not exist.
            ConflictError: the artifact's run belongs to another experiment.
            VersionConflictError: retryable; all attempts were preempted.
            IntegrityError: any other constraint failure, unchanged.
        """
        attempts = self._config.max_register_attempts
        version = 0

        for attempt in range(1, attempts + 1):
            try:
                with self._session_factory.scope() as session:
                    artifact = session.get(RunArtifactRecord, run_artifact_id)
                    if artifact is None:
                        logger.warning(
                            "Cannot register model: run artifact %s not found.",
                            run_artifact_id,
                            extra={"run_artifact_id": run_artifact_id},
                        )
                        raise RunArtifactNotFoundError(
                            run_artifact_id,
                            f"The RunArtifact with id {run_artifact_id} does not exist. "
                            f"Unable to register a model",
                        )

                    run = session.get(RunRecord, artifact.run_id)
                    if run.experiment_id != experiment_id:
                        raise ConflictError(
                            f"RunArtifact {run_artifact_id} belongs to experiment "
                            f"{run.experiment_id}, not {experiment_id}"
                        )

                    version = self._next_version(session, experiment_id)
                    record = RegisteredModelRecord(
                        run_artifact_id=artifact.id,
                        run_id=run.id,
                        experiment_id=run.experiment_id,
                        version=version,
                        registered_by=registered_by,
                        registered_date=as_utc(self._clock.now()),
                        description=description or "",
                    )
                    session.add(record)
                    session.flush()
                    registered = self._registered_model_resolver.build_entity(session, record)
            except IntegrityError as exc:
                if not self._is_version_collision(exc):
                    raise
                logger.warning(
                    "Version %d for experiment %s was claimed concurrently "
                    "(attempt %d/%d).",
                    version,
                    experiment_id,
                    attempt,
                    attempts,
                    extra={"experiment_id": experiment_id, "version": version, "attempt": attempt},
                )
                continue

            logger.info(
                "Registered model version %d for experiment %s from artifact %s (by %s).",
                registered.version,
                experiment_id,
                run_artifact_id,
                registered_by,
                extra={
                    "experiment_id": experiment_id,
                    "run_artifact_id": run_artifact_id,
                    "version": registered.version,
                },
            )
            return registered

        raise VersionConflictError(experiment_id, version, attempts)

    @log_performance()
    def get_registered_models(self, experiment_id: str) -> List[RegisteredModel]:
        """Return every registration of an experiment ordered by version."""
        with self._session_factory.scope() as session:
            records = session.scalars(
                select(RegisteredModelRecord)
                .where(RegisteredModelRecord.experiment_id == experiment_id)
                .order_by(RegisteredModelRecord.version)
            ).all()
            return self._registered_model_resolver.build_entities(session, records)

    @log_performance()
    def get_registered_model(self, experiment_id: str, version: int) -> Optional[RegisteredModel]:
        with self._session_factory.scope() as session:
            record = session.scalars(
                select(RegisteredModelRecord).where(
                    RegisteredModelRecord.experiment_id == experiment_id,
                    RegisteredModelRecord.version == version,
                )
            ).first()
            return self._registered_model_resolver.build_entity(session, record)

    @log_performance()
    def get_latest_registered_model(self, experiment_id: str) -> Optional[RegisteredModel]:
        """Return the highest version registered for an experiment, or None."""
        with self._session_factory.scope() as session:
            record = session.scalars(
                select(RegisteredModelRecord)
                .where(RegisteredModelRecord.experiment_id == experiment_id)
                .order_by(RegisteredModelRecord.version.desc())
                .limit(1)
            ).first()
            return self._registered_model_resolver.build_entity(session, record)

    # ── Helpers ──────────────────────────────────────────────────────

    @staticmethod
    def _require_run(session: Session, run_id: str) -> RunRecord:
        record = session.get(RunRecord, run_id)
        if record is None:
            logger.warning("Run %s not found.", run_id, extra={"run_id": run_id})
            raise RunNotFoundError(run_id)
        return record

    @staticmethod
    def _next_version(session: Session, experiment_id: str) -> int:
        current = session.scalar(
            select(func.max(RegisteredModelRecord.version))
            .where(RegisteredModelRecord.experiment_id == experiment_id)
        )
        return (current or 0) + 1

    @staticmethod
    def _is_version_collision(exc: IntegrityError) -> bool:
        """True when ``exc`` was raised by the (experiment_id, version) unique constraint.

        PostgreSQL drivers expose the constraint name on ``orig.diag``; other
        backends only name it (or its columns, for SQLite) in the message.
        """
        orig = exc.orig
        constraint_name = getattr(getattr(orig, "diag", None), "constraint_name", None)
        if constraint_name is not None:
            return constraint_name == VERSION_UNIQUE_CONSTRAINT

        message = str(orig)
        return VERSION_UNIQUE_CONSTRAINT in message or (
            "UNIQUE" in message
            and "registered_models.experiment_id" in message
            and "registered_models.version" in message
        )
