"""Database package for the run registry."""

from mlops.db.base import Base
from mlops.db.engine import create_db_engine, get_engine, get_session_factory
from mlops.db.models import (
    ModelSchemaRecord,
    PackageDependencyRecord,
    RegisteredModelRecord,
    RunArtifactRecord,
    RunRecord,
)

__all__ = [
    "Base",
    "create_db_engine",
    "get_engine",
    "get_session_factory",
    "ModelSchemaRecord",
    "PackageDependencyRecord",
    "RegisteredModelRecord",
    "RunArtifactRecord",
    "RunRecord",
]
