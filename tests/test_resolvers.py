"""Tests for the Run and RegisteredModel entity resolvers."""

import uuid
from datetime import datetime, timedelta, timezone

from mlops.db.models import (
    ModelSchemaRecord,
    PackageDependencyRecord,
    RegisteredModelRecord,
    RunArtifactRecord,
    RunRecord,
)
from mlops.run_registry import (
    EntityResolver,
    ModelSchema,
    PackageDependency,
    RegisteredModelResolver,
    RunResolver,
)

CREATED = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def _add_run(session, experiment_id="exp-1", commit_hash="", created_at=CREATED):
    record = RunRecord(
        id=str(uuid.uuid4()),
        experiment_id=experiment_id,
        commit_hash=commit_hash,
        created_at=created_at,
    )
    session.add(record)
    session.flush()
    return record


class TestRunResolver:
    def setup_method(self):
        self.resolver = RunResolver()

    def test_is_entity_resolver(self):
        assert isinstance(self.resolver, EntityResolver)

    def test_missing_record_resolves_to_none(self, session_factory):
        with session_factory.scope() as session:
            assert self.resolver.build_entity(session, None) is None

    def test_empty_input_yields_empty_output(self, session_factory):
        with session_factory.scope() as session:
            assert self.resolver.build_entities(session, []) == []

    def test_build_entities_preserves_order(self, session_factory):
        with session_factory.scope() as session:
            records = [
                _add_run(session, created_at=CREATED + timedelta(minutes=i)) for i in range(3)
            ]
            runs = self.resolver.build_entities(session, list(reversed(records)))

        assert [r.run_id for r in runs] == [rec.id for rec in reversed(records)]

    def test_hydrates_children(self, session_factory):
        with session_factory.scope() as session:
            record = _add_run(session, commit_hash="abc123")
            session.add_all([
                PackageDependencyRecord(run_id=record.id, name="pandas", version="2.2.0"),
                PackageDependencyRecord(run_id=record.id, name="numpy", version="1.26.4"),
                ModelSchemaRecord(run_id=record.id, position=1, name="label", type="int"),
                ModelSchemaRecord(run_id=record.id, position=0, name="feature", type="float"),
                RunArtifactRecord(
                    id=str(uuid.uuid4()), run_id=record.id, name="model.bin", created_at=CREATED
                ),
            ])
            session.flush()

            run = self.resolver.build_entity(session, record)

        assert run.commit_hash == "abc123"
        assert set(run.package_dependencies) == {
            PackageDependency("pandas", "2.2.0"),
            PackageDependency("numpy", "1.26.4"),
        }
        assert run.model_schemas == [ModelSchema("feature", "float"), ModelSchema("label", "int")]
        assert [a.name for a in run.run_artifacts] == ["model.bin"]
        assert run.run_artifacts[0].created_at == CREATED
        assert run.created_at == CREATED

    def test_children_of_other_runs_are_excluded(self, session_factory):
        with session_factory.scope() as session:
            mine = _add_run(session)
            other = _add_run(session)
            session.add(PackageDependencyRecord(run_id=other.id, name="x", version="1"))
            session.flush()

            run = self.resolver.build_entity(session, mine)

        assert run.package_dependencies == []


class TestRegisteredModelResolver:
    def setup_method(self):
        self.resolver = RegisteredModelResolver()

    def test_missing_record_resolves_to_none(self, session_factory):
        with session_factory.scope() as session:
            assert self.resolver.build_entity(session, None) is None

    def test_attaches_run_and_artifact(self, session_factory):
        with session_factory.scope() as session:
            run_record = _add_run(session, experiment_id="exp-9")
            session.add(PackageDependencyRecord(run_id=run_record.id, name="xgboost", version="2.0.3"))
            artifact_record = RunArtifactRecord(
                id=str(uuid.uuid4()), run_id=run_record.id, name="model.json", created_at=CREATED
            )
            session.add(artifact_record)
            session.flush()
            registered_record = RegisteredModelRecord(
                id=str(uuid.uuid4()),
                run_artifact_id=artifact_record.id,
                run_id=run_record.id,
                experiment_id="exp-9",
                version=4,
                registered_by="bob",
                registered_date=CREATED,
                description="candidate",
            )
            session.add(registered_record)
            session.flush()

            models = self.resolver.build_entities(session, [registered_record])

        assert len(models) == 1
        model = models[0]
        assert model.version == 4
        assert model.registered_by == "bob"
        assert model.registered_date == CREATED
        assert model.run.run_id == run_record.id
        assert model.run.package_dependencies == [PackageDependency("xgboost", "2.0.3")]
        assert model.run_artifact.run_artifact_id == artifact_record.id
        assert model.run_artifact.name == "model.json"

    def test_uses_supplied_run_resolver(self, session_factory):
        class CountingRunResolver(RunResolver):
            calls = 0

            def build_entity(self, session, record):
                CountingRunResolver.calls += 1
                return super().build_entity(session, record)

        resolver = RegisteredModelResolver(CountingRunResolver())
        with session_factory.scope() as session:
            run_record = _add_run(session)
            artifact = RunArtifactRecord(
                id=str(uuid.uuid4()), run_id=run_record.id, name="m", created_at=CREATED
            )
            session.add(artifact)
            session.flush()
            record = RegisteredModelRecord(
                id=str(uuid.uuid4()),
                run_artifact_id=artifact.id,
                run_id=run_record.id,
                experiment_id="exp-1",
                version=1,
                registered_by="ci",
                registered_date=CREATED,
                description="",
            )
            session.add(record)
            session.flush()
            resolver.build_entity(session, record)

        assert CountingRunResolver.calls == 1
