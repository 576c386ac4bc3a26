"""initial schema

Revision ID: 0001
Revises:
Create Date: 2025-01-15 10:00:00.000000

This migration creates:
1. users - identity records keyed by the provider uid
2. departments - admin-managed departments
3. counters - named sequences (application numbers)
4. applications - entrance examination applications
5. notifications - email/SMS/WhatsApp messages

Enum types are created explicitly with checkfirst so the migration can be
re-run against a partially initialised database.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

ENUMS = {
    "user_role": ("admin", "user"),
    "payment_status": ("pending", "completed", "failed"),
    "notification_type": ("email", "sms", "whatsapp"),
    "notification_status": ("pending", "sent", "failed"),
}


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _base_columns() -> list[sa.Column]:
    """Primary key and timestamps (from BaseModel)."""
    return [
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Create all tables."""
    bind = op.get_bind()
    for name in ENUMS:
        _enum(name).create(bind, checkfirst=True)

    op.create_table(
        "users",
        *_base_columns(),
        sa.Column("uid", sa.String(length=128), nullable=False),
        sa.Column("phone_number", sa.String(length=20), nullable=True),
        sa.Column("role", _enum("user_role"), nullable=False, server_default="user"),
        sa.Column("display_name", sa.String(length=200), nullable=True),
        sa.Column("photo_url", sa.String(length=500), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_uid"), "users", ["uid"], unique=True)
    op.create_index(op.f("ix_users_phone_number"), "users", ["phone_number"], unique=False)

    op.create_table(
        "departments",
        *_base_columns(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("code", sa.String(length=10), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_departments_code"), "departments", ["code"], unique=True)

    op.create_table(
        "counters",
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("sequence", sa.BigInteger(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("name"),
    )

    op.create_table(
        "applications",
        *_base_columns(),
        # Identity
        sa.Column("application_no", sa.String(length=32), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        # Content blocks
        sa.Column("personal_info", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("address_info", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("contact_info", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("educational_info", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        # Payment
        sa.Column("payment_transaction_id", sa.String(length=64), nullable=False),
        sa.Column("payment_order_id", sa.String(length=64), nullable=False),
        sa.Column("payment_amount", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("payment_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "payment_status",
            _enum("payment_status"),
            nullable=False,
            server_default="completed",
        ),
        # Review status
        sa.Column("is_approved", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("is_qualified", sa.Boolean(), nullable=True),
        sa.Column("department_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column(
            "applied_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("reviewed_by", sa.String(length=128), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        # Exam
        sa.Column("exam_center_name", sa.String(length=200), nullable=True),
        sa.Column("exam_date", sa.Date(), nullable=True),
        sa.Column("exam_time", sa.String(length=50), nullable=True),
        sa.Column("hall_ticket_issued", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("hall_ticket_issued_at", sa.DateTime(timezone=True), nullable=True),
        # Constraints
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["department_id"],
            ["departments.id"],
            name="fk_applications_department_id",
            ondelete="SET NULL",
        ),
        sa.UniqueConstraint("application_no", name="uq_applications_application_no"),
        sa.UniqueConstraint(
            "payment_transaction_id", name="uq_applications_payment_transaction_id"
        ),
    )
    op.create_index(
        "ix_applications_user_applied_at", "applications", ["user_id", "applied_at"]
    )
    op.create_index("ix_applications_applied_at", "applications", ["applied_at"])
    op.create_index("ix_applications_department_id", "applications", ["department_id"])
    op.create_index(
        "ix_applications_review",
        "applications",
        ["is_approved", "is_qualified", "reviewed_at"],
    )

    op.create_table(
        "notifications",
        *_base_columns(),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("type", _enum("notification_type"), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column(
            "status",
            _enum("notification_status"),
            nullable=False,
            server_default="pending",
        ),
        sa.Column(
            "send_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "metadata",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_notifications_user_send_at", "notifications", ["user_id", "send_at"]
    )
    op.create_index(
        "ix_notifications_status_send_at", "notifications", ["status", "send_at"]
    )


def downgrade() -> None:
    """Drop all tables and enum types."""
    op.drop_index("ix_notifications_status_send_at", table_name="notifications")
    op.drop_index("ix_notifications_user_send_at", table_name="notifications")
    op.drop_table("notifications")

    op.drop_index("ix_applications_review", table_name="applications")
    op.drop_index("ix_applications_department_id", table_name="applications")
    op.drop_index("ix_applications_applied_at", table_name="applications")
    op.drop_index("ix_applications_user_applied_at", table_name="applications")
    op.drop_table("applications")

    op.drop_table("counters")

    op.drop_index(op.f("ix_departments_code"), table_name="departments")
    op.drop_table("departments")

    op.drop_index(op.f("ix_users_phone_number"), table_name="users")
    op.drop_index(op.f("ix_users_uid"), table_name="users")
    op.drop_table("users")

    bind = op.get_bind()
    for name in reversed(ENUMS):
        postgresql.ENUM(*ENUMS[name], name=name).drop(bind, checkfirst=True)
