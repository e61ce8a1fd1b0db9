"""Initial schema — users and effective-dated hourly rates.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, autoincrement=True, nullable=False),
        sa.Column("username", sa.String(150), nullable=False),
        sa.Column("avatar", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )

    # (user_id, effective_from) is the record identity: one rate per user per date
    op.create_table(
        "hourly_rates",
        sa.Column("user_id", sa.Integer, nullable=False),
        sa.Column("effective_from", sa.Date, nullable=False),
        sa.Column("hourly_rate", sa.Numeric(10, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("user_id", "effective_from", name="pk_hourly_rates"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name="fk_hourly_rates_user_id_users",
        ),
        sa.CheckConstraint("hourly_rate >= 0", name="ck_hourly_rates_non_negative"),
    )


def downgrade() -> None:
    op.drop_table("hourly_rates")
    op.drop_table("users")
