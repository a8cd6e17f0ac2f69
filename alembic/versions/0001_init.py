"""init schema

Revision ID: 0001_init
Revises:
Create Date: 2026-03-02
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None

ROLE = ("OWNER", "COLLABORATOR")
TASK_STATUS = ("TODO", "IN_PROGRESS", "IN_REVIEW", "BLOCKED", "VALIDATED", "TRASH")
TASK_SIZE = ("XS", "S", "M", "L")
INVOICE_STATUS = ("DRAFT", "VALIDATED", "PAID")
INVOICE_LINE_TYPE = ("PRESENCE", "TASK")

def upgrade() -> None:
    # enums
    for values, name in (
        (ROLE, "role"),
        (TASK_STATUS, "task_status"),
        (TASK_SIZE, "task_size"),
        (INVOICE_STATUS, "invoice_status"),
        (INVOICE_LINE_TYPE, "invoice_line_type"),
    ):
        postgresql.ENUM(*values, name=name).create(op.get_bind(), checkfirst=True)

    role = postgresql.ENUM(*ROLE, name="role", create_type=False)
    task_status = postgresql.ENUM(*TASK_STATUS, name="task_status", create_type=False)
    task_size = postgresql.ENUM(*TASK_SIZE, name="task_size", create_type=False)
    invoice_status = postgresql.ENUM(*INVOICE_STATUS, name="invoice_status", create_type=False)
    invoice_line_type = postgresql.ENUM(*INVOICE_LINE_TYPE, name="invoice_line_type", create_type=False)

    uuid_t = postgresql.UUID(as_uuid=True)
    now = sa.text("now()")

    op.create_table(
        "users",
        sa.Column("id", uuid_t, primary_key=True, nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=now, nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "user_roles",
        sa.Column("user_id", uuid_t, sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("role", role, primary_key=True),
    )

    op.create_table(
        "collaborator_rates",
        sa.Column("user_id", uuid_t, sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("daily_rate", sa.Numeric(10, 2), nullable=False),
        sa.Column("rate_xs", sa.Numeric(10, 2), nullable=False),
        sa.Column("rate_s", sa.Numeric(10, 2), nullable=False),
        sa.Column("rate_m", sa.Numeric(10, 2), nullable=False),
        sa.Column("rate_l", sa.Numeric(10, 2), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=now, nullable=False),
    )

    op.create_table(
        "projects",
        sa.Column("id", uuid_t, primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("git_repo", sa.String(length=500), nullable=True),
        sa.Column("created_by", uuid_t, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=now, nullable=False),
    )
    op.create_index("ix_projects_created_by", "projects", ["created_by"])

    op.create_table(
        "project_members",
        sa.Column("project_id", uuid_t, sa.ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("user_id", uuid_t, sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=now, nullable=False),
    )
    op.create_index("ix_project_members_user_id", "project_members", ["user_id"])

    op.create_table(
        "tasks",
        sa.Column("id", uuid_t, primary_key=True, nullable=False),
        sa.Column("project_id", uuid_t, sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(length=300), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("size", task_size, nullable=False),
        sa.Column("priority", sa.Integer(), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("assigned_to", uuid_t, sa.ForeignKey("users.id"), nullable=True),
        sa.Column("status", task_status, nullable=False, server_default="TODO"),
        sa.Column("validated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("validated_by", uuid_t, sa.ForeignKey("users.id"), nullable=True),
        sa.Column("git_repo", sa.String(length=500), nullable=True),
        sa.Column("git_branch", sa.String(length=255), nullable=True),
        sa.Column("git_pull_request", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=now, nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=now, nullable=False),
        # validation stamp travels with the VALIDATED status
        sa.CheckConstraint(
            "(status = 'VALIDATED') = (validated_at IS NOT NULL AND validated_by IS NOT NULL)"
            " AND (validated_at IS NULL) = (validated_by IS NULL)",
            name="ck_tasks_validation_stamp",
        ),
    )
    op.create_index("ix_tasks_project_id", "tasks", ["project_id"])
    op.create_index("ix_tasks_assigned_to", "tasks", ["assigned_to"])

    op.create_table(
        "invitations",
        sa.Column("id", uuid_t, primary_key=True, nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("token_hash", sa.String(length=64), nullable=False, unique=True),
        sa.Column("role", role, nullable=False, server_default="COLLABORATOR"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=now, nullable=False),
    )

    op.create_table(
        "password_reset_tokens",
        sa.Column("token_hash", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("user_id", uuid_t, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=now, nullable=False),
    )
    op.create_index("ix_password_reset_tokens_user_id", "password_reset_tokens", ["user_id"])

    op.create_table(
        "presences",
        sa.Column("id", uuid_t, primary_key=True, nullable=False),
        sa.Column("user_id", uuid_t, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=now, nullable=False),
        sa.UniqueConstraint("user_id", "date", name="uq_presence_user_date"),
    )
    op.create_index("ix_presences_user_id", "presences", ["user_id"])

    op.create_table(
        "invoices",
        sa.Column("id", uuid_t, primary_key=True, nullable=False),
        sa.Column("user_id", uuid_t, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("period_start", sa.Date(), nullable=False),
        sa.Column("period_end", sa.Date(), nullable=False),
        sa.Column("status", invoice_status, nullable=False, server_default="DRAFT"),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("validated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=now, nullable=False),
    )
    op.create_index("ix_invoices_user_id", "invoices", ["user_id"])

    op.create_table(
        "invoice_lines",
        sa.Column("id", uuid_t, primary_key=True, nullable=False),
        sa.Column("invoice_id", uuid_t, sa.ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", invoice_line_type, nullable=False),
        sa.Column("reference_id", uuid_t, nullable=True),
        sa.Column("label", sa.String(length=300), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("total", sa.Numeric(12, 2), nullable=False),
    )
    op.create_index("ix_invoice_lines_invoice_id", "invoice_lines", ["invoice_id"])

    op.create_table(
        "audit_logs",
        sa.Column("id", uuid_t, primary_key=True, nullable=False),
        sa.Column("actor_id", uuid_t, sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity", sa.String(length=50), nullable=False),
        sa.Column("entity_id", uuid_t, nullable=True),
        sa.Column("detail", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=now, nullable=False),
    )
    op.create_index("ix_audit_logs_actor_id", "audit_logs", ["actor_id"])
    op.create_index("ix_audit_logs_entity_id", "audit_logs", ["entity_id"])

def downgrade() -> None:
    op.drop_index("ix_audit_logs_entity_id", table_name="audit_logs")
    op.drop_index("ix_audit_logs_actor_id", table_name="audit_logs")
    op.drop_table("audit_logs")

    op.drop_index("ix_invoice_lines_invoice_id", table_name="invoice_lines")
    op.drop_table("invoice_lines")
    op.drop_index("ix_invoices_user_id", table_name="invoices")
    op.drop_table("invoices")

    op.drop_index("ix_presences_user_id", table_name="presences")
    op.drop_table("presences")

    op.drop_index("ix_password_reset_tokens_user_id", table_name="password_reset_tokens")
    op.drop_table("password_reset_tokens")
    op.drop_table("invitations")

    op.drop_index("ix_tasks_assigned_to", table_name="tasks")
    op.drop_index("ix_tasks_project_id", table_name="tasks")
    op.drop_table("tasks")

    op.drop_index("ix_project_members_user_id", table_name="project_members")
    op.drop_table("project_members")
    op.drop_index("ix_projects_created_by", table_name="projects")
    op.drop_table("projects")

    op.drop_table("collaborator_rates")
    op.drop_table("user_roles")

    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

    for name in ("invoice_line_type", "invoice_status", "task_size", "task_status", "role"):
        postgresql.ENUM(name=name).drop(op.get_bind(), checkfirst=True)
