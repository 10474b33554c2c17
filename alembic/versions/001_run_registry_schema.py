"""Run registry schema - runs, artifacts, registered models.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- runs ---
    op.create_table(
        "runs",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("experiment_id", sa.String(36), nullable=False),
        sa.Column("commit_hash", sa.String(64), nullable=False, server_default=""),
        sa.Column("training_time", sa.Interval(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_runs"),
    )
    op.create_index("ix_runs_experiment_id", "runs", ["experiment_id"])
    op.create_index("ix_runs_commit_hash", "runs", ["commit_hash"])

    # --- package_dependencies ---
    op.create_table(
        "package_dependencies",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("run_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("version", sa.String(100), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_package_dependencies"),
        sa.ForeignKeyConstraint(
            ["run_id"], ["runs.id"],
            name="fk_package_dependencies_run_id_runs",
            ondelete="CASCADE",
        ),
    )
    op.create_index(
        "ix_package_dependencies_run_id", "package_dependencies", ["run_id"]
    )

    # --- model_schemas ---
    op.create_table(
        "model_schemas",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("run_id", sa.String(36), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("type", sa.String(200), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_model_schemas"),
        sa.ForeignKeyConstraint(
            ["run_id"], ["runs.id"],
            name="fk_model_schemas_run_id_runs",
            ondelete="CASCADE",
        ),
    )
    op.create_index(
        "ix_model_schemas_run_position", "model_schemas", ["run_id", "position"]
    )

    # --- run_artifacts ---
    op.create_table(
        "run_artifacts",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("run_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(500), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_run_artifacts"),
        sa.ForeignKeyConstraint(
            ["run_id"], ["runs.id"],
            name="fk_run_artifacts_run_id_runs",
            ondelete="CASCADE",
        ),
    )
    op.create_index("ix_run_artifacts_run_id", "run_artifacts", ["run_id"])

    # --- registered_models ---
    op.create_table(
        "registered_models",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("run_artifact_id", sa.String(36), nullable=False),
        sa.Column("run_id", sa.String(36), nullable=False),
        sa.Column("experiment_id", sa.String(36), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("registered_by", sa.String(200), nullable=False),
        sa.Column("registered_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.PrimaryKeyConstraint("id", name="pk_registered_models"),
        sa.ForeignKeyConstraint(
            ["run_artifact_id"], ["run_artifacts.id"],
            name="fk_registered_models_run_artifact_id_run_artifacts",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["run_id"], ["runs.id"],
            name="fk_registered_models_run_id_runs",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint(
            "experiment_id", "version",
            name="uq_registered_models_experiment_version",
        ),
    )
    op.create_index(
        "ix_registered_models_run_artifact_id",
        "registered_models",
        ["run_artifact_id"],
    )


def downgrade() -> None:
    op.drop_table("registered_models")
    op.drop_table("run_artifacts")
    op.drop_table("model_schemas")
    op.drop_table("package_dependencies")
    op.drop_table("runs")
