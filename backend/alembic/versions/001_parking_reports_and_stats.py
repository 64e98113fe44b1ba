"""Parking reports and per-place/time-slot parking stats."""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "parking_reports",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("room_id", sa.String(64), nullable=False),
        sa.Column("participant_id", sa.String(64), nullable=False),
        sa.Column("place_id", sa.String(64), nullable=False),
        sa.Column("region_id", sa.String(128), nullable=True),
        sa.Column("visit_date", sa.Date(), nullable=False),
        sa.Column("time_slot", sa.String(20), nullable=False),
        sa.Column("parking_available", sa.Boolean(), nullable=False),
        sa.Column("parking_experience", sa.String(32), nullable=True),
        sa.Column("reported_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("room_id", "participant_id", name="uq_parking_reports_room_participant"),
        sa.CheckConstraint(
            "parking_available OR parking_experience IS NULL",
            name="ck_parking_reports_experience_requires_parking",
        ),
    )
    op.create_index("ix_parking_reports_place_id", "parking_reports", ["place_id"], unique=False)
    op.create_index(
        "ix_parking_reports_place_slot_reported",
        "parking_reports",
        ["place_id", "time_slot", "reported_at"],
        unique=False,
    )
    op.create_index("ix_parking_reports_region_reported", "parking_reports", ["region_id", "reported_at"], unique=False)

    op.create_table(
        "parking_stats",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("place_id", sa.String(64), nullable=False),
        sa.Column("time_slot", sa.String(20), nullable=False),
        sa.Column("total_attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("success_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("partial_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("fail_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("unknown_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("success_rate", sa.Float(), nullable=False, server_default="0"),
        sa.Column("last_updated", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("place_id", "time_slot", name="uq_parking_stats_place_slot"),
    )
    op.create_index("ix_parking_stats_place_id", "parking_stats", ["place_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_parking_stats_place_id", table_name="parking_stats")
    op.drop_table("parking_stats")
    op.drop_index("ix_parking_reports_region_reported", table_name="parking_reports")
    op.drop_index("ix_parking_reports_place_slot_reported", table_name="parking_reports")
    op.drop_index("ix_parking_reports_place_id", table_name="parking_reports")
    op.drop_table("parking_reports")
