"""lims 시료 구조와 interp 해석 규칙 테이블 생성

Revision ID: 0001_initial_lims_interp
Revises:
Create Date: 2026-10-18 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001_initial_lims_interp"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- lims ---
    op.create_table(
        "samples",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("code", sa.String(length=32), nullable=False, unique=True),
        sa.Column("species", sa.String(length=255), nullable=False),
        sa.Column("variety", sa.String(length=255), nullable=True),
        sa.Column("previous_crop", sa.String(length=255), nullable=True),
        sa.Column("next_crop", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
        schema="lims",
    )
    op.create_table(
        "sample_units",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("sample_id", sa.Integer(), sa.ForeignKey("lims.samples.id"), nullable=False),
        sa.Column("code", sa.String(length=50), nullable=True),
        sa.Column("label", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
        schema="lims",
    )
    op.create_index("ix_lims_sample_units_sample_id", "sample_units", ["sample_id"], schema="lims")
    op.create_table(
        "unit_results",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("unit_id", sa.Integer(), sa.ForeignKey("lims.sample_units.id"), nullable=False),
        sa.Column("analyte", sa.String(length=255), nullable=True),
        sa.Column("result_value", sa.DOUBLE_PRECISION(), nullable=True),
        sa.Column("result_flag", sa.String(length=50), nullable=True),
        sa.Column("test_area", sa.String(length=50), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
        schema="lims",
    )
    op.create_index("ix_lims_unit_results_unit_id", "unit_results", ["unit_id"], schema="lims")

    # --- interp ---
    op.create_table(
        "rules",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("area", sa.String(length=50), nullable=True),
        sa.Column("species", sa.String(length=255), nullable=True),
        sa.Column("crop_next", sa.String(length=255), nullable=True),
        sa.Column("analyte", sa.String(length=255), nullable=False),
        sa.Column("comparator", sa.String(length=4), nullable=False),
        sa.Column("threshold", postgresql.JSONB(), nullable=False),
        sa.Column("message", sa.String(), nullable=False),
        sa.Column("severity", sa.String(length=10), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
        schema="interp",
    )
    op.create_index("ix_interp_rules_area", "rules", ["area"], schema="interp")
    op.create_index("ix_interp_rules_active", "rules", ["active"], schema="interp")
    op.create_table(
        "applied_interpretations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("sample_id", sa.Integer(), sa.ForeignKey("lims.samples.id"), nullable=False),
        sa.Column("rule_id", sa.Integer(), sa.ForeignKey("interp.rules.id"), nullable=True),
        sa.Column("message", sa.String(), nullable=False),
        sa.Column("severity", sa.String(length=10), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
        schema="interp",
    )
    op.create_index(
        "ix_interp_applied_interpretations_sample_id", "applied_interpretations", ["sample_id"], schema="interp"
    )


def downgrade() -> None:
    op.drop_index("ix_interp_applied_interpretations_sample_id", table_name="applied_interpretations", schema="interp")
    op.drop_table("applied_interpretations", schema="interp")
    op.drop_index("ix_interp_rules_active", table_name="rules", schema="interp")
    op.drop_index("ix_interp_rules_area", table_name="rules", schema="interp")
    op.drop_table("rules", schema="interp")
    op.drop_index("ix_lims_unit_results_unit_id", table_name="unit_results", schema="lims")
    op.drop_table("unit_results", schema="lims")
    op.drop_index("ix_lims_sample_units_sample_id", table_name="sample_units", schema="lims")
    op.drop_table("sample_units", schema="lims")
    op.drop_table("samples", schema="lims")
