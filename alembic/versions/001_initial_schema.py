"""Initial schema.

Revision ID: 001
Revises:
Create Date: 2026-10-18

Creates users, availability, scheduled_notifications and
notification_settings, plus the two enum types they use.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


user_type_enum = postgresql.ENUM("active", "staff", "ns", name="user_type_enum", create_type=False)
ict_enum = postgresql.ENUM("live", "sims", "other", name="ict_enum", create_type=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=True,
        ),
        sa.Column(
            "updated",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=True,
        ),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    user_type_enum.create(bind, checkfirst=True)
    ict_enum.create(bind, checkfirst=True)

    op.create_table(
        "users",
        sa.Column("user_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("discord_id", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("ops_name", sa.Text(), nullable=False),
        sa.Column("usr_type", user_type_enum, nullable=False),
        sa.Column("admin", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("is_valid", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("user_id", name=op.f("pk_users")),
    )
    op.create_index("idx_users_discord_id", "users", ["discord_id"], unique=False)

    op.create_table(
        "availability",
        sa.Column("availability_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("avail", sa.Date(), nullable=False),
        sa.Column("ict_type", ict_enum, nullable=False),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("planned", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("saf100", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("attended", sa.Boolean(), nullable=True),
        sa.Column("is_valid", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.user_id"],
            name=op.f("fk_availability_user_id_users"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("availability_id", name=op.f("pk_availability")),
    )
    op.create_index("idx_availability_user_id", "availability", ["user_id"], unique=False)

    op.create_table(
        "scheduled_notifications",
        sa.Column("notification_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("availability_id", sa.Integer(), nullable=False),
        sa.Column("scheduled_time", postgresql.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("sent", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("is_valid", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["availability_id"],
            ["availability.availability_id"],
            name=op.f("fk_scheduled_notifications_availability_id_availability"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("notification_id", name=op.f("pk_scheduled_notifications")),
    )
    op.create_index(
        "idx_scheduled_notifications_due",
        "scheduled_notifications",
        ["scheduled_time"],
        unique=False,
        postgresql_where=sa.text("sent = false AND is_valid = true"),
    )

    op.create_table(
        "notification_settings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("chat_id", sa.BigInteger(), nullable=False),
        sa.Column("notif_system", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("notif_register", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("notif_availability", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("notif_plan", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("notif_conflict", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        *_timestamps(),
        sa.Column("is_valid", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_notification_settings")),
    )
    op.create_index(
        "uq_notification_settings_valid_chat_id",
        "notification_settings",
        ["chat_id"],
        unique=True,
        postgresql_where=sa.text("is_valid = true"),
    )


def downgrade() -> None:
    op.drop_index("uq_notification_settings_valid_chat_id", table_name="notification_settings")
    op.drop_table("notification_settings")
    op.drop_index("idx_scheduled_notifications_due", table_name="scheduled_notifications")
    op.drop_table("scheduled_notifications")
    op.drop_index("idx_availability_user_id", table_name="availability")
    op.drop_table("availability")
    op.drop_index("idx_users_discord_id", table_name="users")
    op.drop_table("users")

    bind = op.get_bind()
    ict_enum.drop(bind, checkfirst=True)
    user_type_enum.drop(bind, checkfirst=True)
