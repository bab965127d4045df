"""Initial tables: decisions, reflections, debriefs, certificates.

Revision ID: 001
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "decisions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("session_hint", sa.String(64), nullable=True),
        sa.Column("scenario_id", sa.String(64), nullable=False),
        sa.Column("decision_point", sa.Integer(), nullable=False),
        sa.Column("selected_option_id", sa.String(64), nullable=False),
        sa.Column("confidence", sa.Integer(), nullable=False),
        sa.Column("time_on_page_ms", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("details_json", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_decisions_session_hint"), "decisions", ["session_hint"], unique=False)
    op.create_index(op.f("ix_decisions_scenario_id"), "decisions", ["scenario_id"], unique=False)

    op.create_table(
        "reflections",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("session_hint", sa.String(64), nullable=True),
        sa.Column("scenario_id", sa.String(64), nullable=False),
        sa.Column("phase", sa.String(8), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("word_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_reflections_session_hint"), "reflections", ["session_hint"], unique=False)
    op.create_index(op.f("ix_reflections_scenario_id"), "reflections", ["scenario_id"], unique=False)

    op.create_table(
        "debriefs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("session_hint", sa.String(64), nullable=True),
        sa.Column("scenario_id", sa.String(64), nullable=False),
        sa.Column("mission_score", sa.Integer(), nullable=False),
        sa.Column("decision_quality", sa.Integer(), nullable=False),
        sa.Column("confidence_alignment", sa.Integer(), nullable=False),
        sa.Column("cri", sa.Integer(), nullable=False),
        sa.Column("bias_awareness", sa.Integer(), nullable=False),
        sa.Column("trust_calibration", sa.Integer(), nullable=False),
        sa.Column("information_advantage", sa.Integer(), nullable=False),
        sa.Column("cognitive_adaptability", sa.Integer(), nullable=False),
        sa.Column("escalation_tendency", sa.Integer(), nullable=False),
        sa.Column("reflection_quality", sa.Integer(), nullable=False),
        sa.Column("short_feedback_json", sa.Text(), nullable=False),
        sa.Column("computed_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_debriefs_session_hint"), "debriefs", ["session_hint"], unique=False)
    op.create_index(op.f("ix_debriefs_scenario_id"), "debriefs", ["scenario_id"], unique=False)

    op.create_table(
        "certificates",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("code", sa.String(32), nullable=False),
        sa.Column("session_hint", sa.String(64), nullable=True),
        sa.Column("module_id", sa.String(64), nullable=False),
        sa.Column("revoked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("issued_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_certificates_code"), "certificates", ["code"], unique=True)
    op.create_index(op.f("ix_certificates_session_hint"), "certificates", ["session_hint"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_certificates_session_hint"), table_name="certificates")
    op.drop_index(op.f("ix_certificates_code"), table_name="certificates")
    op.drop_table("certificates")
    op.drop_index(op.f("ix_debriefs_scenario_id"), table_name="debriefs")
    op.drop_index(op.f("ix_debriefs_session_hint"), table_name="debriefs")
    op.drop_table("debriefs")
    op.drop_index(op.f("ix_reflections_scenario_id"), table_name="reflections")
    op.drop_index(op.f("ix_reflections_session_hint"), table_name="reflections")
    op.drop_table("reflections")
    op.drop_index(op.f("ix_decisions_scenario_id"), table_name="decisions")
    op.drop_index(op.f("ix_decisions_session_hint"), table_name="decisions")
    op.drop_table("decisions")
