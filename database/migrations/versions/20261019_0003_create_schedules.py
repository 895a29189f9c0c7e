"""create schedules with overlap exclusion constraints

Revision ID: 20261019_0003
Revises: 20261019_0002
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

from app.db.overlap_constraints import DROP_STATEMENTS, INSTALL_STATEMENTS

revision = "20261019_0003"
down_revision = "20261019_0002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "schedules",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("teacher_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("subject_id", sa.String(length=36), sa.ForeignKey("subjects.id"), nullable=False),
        sa.Column("classroom_id", sa.String(length=36), sa.ForeignKey("classrooms.id"), nullable=False),
        sa.Column("class_id", sa.String(length=36), sa.ForeignKey("classes.id"), nullable=False),
        sa.Column("section_id", sa.String(length=36), sa.ForeignKey("sections.id"), nullable=True),
        sa.Column("academic_year", sa.String(length=20), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_by", sa.String(length=36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("day_of_week >= 1 AND day_of_week <= 7", name="ck_schedules_day_of_week"),
        sa.CheckConstraint("start_time < end_time", name="ck_schedules_valid_time"),
    )
    op.create_index("ix_schedules_teacher_day", "schedules", ["teacher_id", "day_of_week"])
    op.create_index("ix_schedules_classroom_day", "schedules", ["classroom_id", "day_of_week"])
    op.create_index("ix_schedules_day_start", "schedules", ["day_of_week", "start_time"])

    if op.get_bind().dialect.name != "postgresql":
        return

    for statement in INSTALL_STATEMENTS:
        op.execute(statement)


def downgrade() -> None:
    if op.get_bind().dialect.name == "postgresql":
        for statement in DROP_STATEMENTS:
            op.execute(statement)
    op.drop_index("ix_schedules_day_start", table_name="schedules")
    op.drop_index("ix_schedules_classroom_day", table_name="schedules")
    op.drop_index("ix_schedules_teacher_day", table_name="schedules")
    op.drop_table("schedules")
    if op.get_bind().dialect.name == "postgresql":
        op.execute("DROP TYPE IF EXISTS timerange")
