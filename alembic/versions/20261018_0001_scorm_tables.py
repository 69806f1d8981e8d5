"""scorm packages, scos and tracking tables

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "scorm_packages",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("course_id", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("version", sa.String(length=8), nullable=False),
        sa.Column("manifest_data", sa.JSON(), nullable=False),
        sa.Column("package_url", sa.String(length=500), nullable=False),
        sa.Column(
            "organization_identifier", sa.String(length=200), nullable=False
        ),
        sa.Column(
            "created_at", sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP")
        ),
    )
    op.create_index(
        "ix_scorm_packages_course_id", "scorm_packages", ["course_id"]
    )

    op.create_table(
        "scorm_scos",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "package_id",
            sa.Integer(),
            sa.ForeignKey("scorm_packages.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("identifier", sa.String(length=200), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("launch_url", sa.String(length=500), nullable=False),
        sa.Column("entry_point", sa.String(length=500), nullable=False),
        sa.Column("json_data", sa.JSON(), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP")
        ),
    )
    op.create_index("ix_scorm_scos_package_id", "scorm_scos", ["package_id"])

    op.create_table(
        "scorm_tracking",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column(
            "sco_id",
            sa.Integer(),
            sa.ForeignKey("scorm_scos.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("cmi_data", sa.JSON(), nullable=False),
        sa.Column("completion_status", sa.String(length=32), nullable=True),
        sa.Column("success_status", sa.String(length=32), nullable=True),
        sa.Column("score_scaled", sa.String(length=32), nullable=True),
        sa.Column("score_raw", sa.Float(), nullable=True),
        sa.Column("score_min", sa.Float(), nullable=True),
        sa.Column("score_max", sa.Float(), nullable=True),
        sa.Column("session_time", sa.Integer(), nullable=True),
        sa.Column("total_time", sa.Integer(), nullable=True),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("suspend_data", sa.Text(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP")
        ),
        sa.Column(
            "updated_at", sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP")
        ),
        sa.UniqueConstraint(
            "user_id", "sco_id", name="uq_scorm_tracking_user_sco"
        ),
    )
    op.create_index("ix_scorm_tracking_user_id", "scorm_tracking", ["user_id"])
    op.create_index("ix_scorm_tracking_sco_id", "scorm_tracking", ["sco_id"])


def downgrade() -> None:
    op.drop_index("ix_scorm_tracking_sco_id", table_name="scorm_tracking")
    op.drop_index("ix_scorm_tracking_user_id", table_name="scorm_tracking")
    op.drop_table("scorm_tracking")
    op.drop_index("ix_scorm_scos_package_id", table_name="scorm_scos")
    op.drop_table("scorm_scos")
    op.drop_index("ix_scorm_packages_course_id", table_name="scorm_packages")
    op.drop_table("scorm_packages")
