"""create schedule entries and slot claims

Revision ID: 20261001_0002
Revises: 20261001_0001
Create Date: 2026-10-01 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261001_0002"
down_revision = "20261001_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "schedule_entries",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("section_id", sa.String(length=36), nullable=False),
        sa.Column("semester", sa.String(length=50), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("room_id", sa.String(length=36), nullable=True),
        sa.Column("faculty_id", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("day_of_week BETWEEN 1 AND 7", name="ck_schedule_entries_day_of_week"),
        sa.CheckConstraint("start_time < end_time", name="ck_schedule_entries_time_order"),
    )
    op.create_index("ix_schedule_entries_semester_day", "schedule_entries", ["semester", "day_of_week"])
    op.create_index("ix_schedule_entries_section_id", "schedule_entries", ["section_id"])
    op.create_index("ix_schedule_entries_room_id", "schedule_entries", ["room_id"])
    op.create_index("ix_schedule_entries_faculty_id", "schedule_entries", ["faculty_id"])

    op.create_table(
        "schedule_slot_claims",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "entry_id",
            sa.String(length=36),
            sa.ForeignKey("schedule_entries.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("resource_key", sa.String(length=80), nullable=False),
        sa.Column("semester", sa.String(length=50), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("minute", sa.Integer(), nullable=False),
        sa.UniqueConstraint(
            "resource_key", "semester", "day_of_week", "minute", name="uq_schedule_slot_claims_slot"
        ),
    )
    op.create_index("ix_schedule_slot_claims_entry_id", "schedule_slot_claims", ["entry_id"])


def downgrade() -> None:
    op.drop_index("ix_schedule_slot_claims_entry_id", table_name="schedule_slot_claims")
    op.drop_table("schedule_slot_claims")
    op.drop_index("ix_schedule_entries_faculty_id", table_name="schedule_entries")
    op.drop_index("ix_schedule_entries_room_id", table_name="schedule_entries")
    op.drop_index("ix_schedule_entries_section_id", table_name="schedule_entries")
    op.drop_index("ix_schedule_entries_semester_day", table_name="schedule_entries")
    op.drop_table("schedule_entries")
