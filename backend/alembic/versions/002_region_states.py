"""Region visibility lifecycle (OPEN / CANDIDATE / CORE) and its promotion audit trail."""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "region_states",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("region_id", sa.String(128), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="OPEN"),
        sa.Column("total_records", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("unique_participants", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("time_slot_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("first_recorded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_recorded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("promoted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_aggregated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("region_id"),
    )
    op.create_index("ix_region_states_status", "region_states", ["status"], unique=False)

    op.create_table(
        "region_promotion_audits",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("region_id", sa.String(128), nullable=False),
        sa.Column("from_status", sa.String(16), nullable=False),
        sa.Column("to_status", sa.String(16), nullable=False),
        sa.Column("actor", sa.String(16), nullable=False),
        sa.Column("promoted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("total_records", sa.Integer(), nullable=True),
        sa.Column("unique_participants", sa.Integer(), nullable=True),
        sa.Column("time_slot_count", sa.Integer(), nullable=True),
        sa.Column("days_since_first_record", sa.Integer(), nullable=True),
        sa.Column("note", sa.String(256), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_region_promotion_audits_region_id", "region_promotion_audits", ["region_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_region_promotion_audits_region_id", table_name="region_promotion_audits")
    op.drop_table("region_promotion_audits")
    op.drop_index("ix_region_states_status", table_name="region_states")
    op.drop_table("region_states")
