"""Initial schema: employees, customers, daily reports, visit records, comments."""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op


# Revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(*, updated: bool = True) -> list[sa.Column]:
    cols = [sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())]
    if updated:
        cols.append(
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
        )
    return cols


def upgrade() -> None:
    op.create_table(
        "employees",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("department", sa.String(100), nullable=False),
        sa.Column("position", sa.String(100), nullable=False),
        sa.Column("manager_id", sa.Integer(), sa.ForeignKey("employees.id"), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_employees_email"),
    )
    op.create_index("ix_employees_manager_id", "employees", ["manager_id"])

    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("customer_name", sa.String(100), nullable=False),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("assigned_employee_id", sa.Integer(), sa.ForeignKey("employees.id"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_customers_assigned_employee_id", "customers", ["assigned_employee_id"])

    op.create_table(
        "daily_reports",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("employee_id", sa.Integer(), sa.ForeignKey("employees.id"), nullable=False),
        sa.Column("report_date", sa.Date(), nullable=False),
        sa.Column("problem", sa.Text(), nullable=True),
        sa.Column("plan", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("employee_id", "report_date", name="uq_daily_reports_employee_report_date"),
    )
    op.create_index("ix_daily_reports_employee_id", "daily_reports", ["employee_id"])

    op.create_table(
        "visit_records",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "report_id",
            sa.Integer(),
            sa.ForeignKey("daily_reports.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customers.id"), nullable=False),
        sa.Column("visit_time", sa.Time(), nullable=False),
        sa.Column("visit_content", sa.String(500), nullable=False),
        *_timestamps(updated=False),
    )
    op.create_index("ix_visit_records_report_id", "visit_records", ["report_id"])
    op.create_index("ix_visit_records_customer_id", "visit_records", ["customer_id"])

    op.create_table(
        "comments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "report_id",
            sa.Integer(),
            sa.ForeignKey("daily_reports.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("commenter_id", sa.Integer(), sa.ForeignKey("employees.id"), nullable=False),
        sa.Column("comment_content", sa.String(500), nullable=False),
        *_timestamps(updated=False),
    )
    op.create_index("ix_comments_report_id", "comments", ["report_id"])
    op.create_index("ix_comments_commenter_id", "comments", ["commenter_id"])


def downgrade() -> None:
    op.drop_table("comments")
    op.drop_table("visit_records")
    op.drop_table("daily_reports")
    op.drop_table("customers")
    op.drop_table("employees")
