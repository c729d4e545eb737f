"""initial schema: workspaces, enrollment, invitations, rosters, leave

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _workspace_fk() -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(["workspace_id"], ["workspaces.id"], ondelete="CASCADE")


def upgrade() -> None:
    op.create_table(
        "workspaces",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_workspaces_owner_id", "workspaces", ["owner_id"])

    op.create_table(
        "workspace_enrollments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("workspace_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("role", sa.String(length=50), nullable=True),
        sa.Column("enrolled_at", sa.DateTime(timezone=True), nullable=False),
        _workspace_fk(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("workspace_id", "user_id", name="uq_enrollment_workspace_user"),
    )
    op.create_index("ix_workspace_enrollments_user_id", "workspace_enrollments", ["user_id"])

    op.create_table(
        "enrollment_requests",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("workspace_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        *_timestamps(),
        _workspace_fk(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_enrollment_requests_workspace_id", "enrollment_requests", ["workspace_id"]
    )
    op.create_index("ix_enrollment_requests_user_id", "enrollment_requests", ["user_id"])
    op.create_index(
        "uq_enrollment_requests_pending",
        "enrollment_requests",
        ["workspace_id", "user_id"],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
        sqlite_where=sa.text("status = 'pending'"),
    )

    op.create_table(
        "user_favorites",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("workspace_id", sa.Uuid(), nullable=False),
        *_timestamps(),
        _workspace_fk(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id"),
    )

    op.create_table(
        "invitations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("workspace_id", sa.Uuid(), nullable=False),
        sa.Column("inviter_id", sa.Uuid(), nullable=False),
        sa.Column("invitee_email", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        *_timestamps(),
        _workspace_fk(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_invitations_workspace_email_status",
        "invitations",
        ["workspace_id", "invitee_email", "status"],
    )
    op.create_index(
        "uq_invitations_pending",
        "invitations",
        ["workspace_id", "invitee_email"],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
        sqlite_where=sa.text("status = 'pending'"),
    )

    op.create_table(
        "rosters",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("workspace_id", sa.Uuid(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("published_by", sa.Uuid(), nullable=True),
        *_timestamps(),
        _workspace_fk(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("workspace_id", "month", "year", name="uq_roster_workspace_period"),
    )

    op.create_table(
        "roster_assignments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("roster_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("day", sa.Integer(), nullable=False),
        sa.Column("shift_period", sa.String(length=1), nullable=False),
        sa.Column("duty_type", sa.String(length=2), nullable=False),
        sa.Column("is_overtime", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.ForeignKeyConstraint(["roster_id"], ["rosters.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "roster_id", "user_id", "day", "shift_period", name="uq_roster_assignment_cell"
        ),
    )
    op.create_index("ix_roster_assignments_roster_id", "roster_assignments", ["roster_id"])

    op.create_table(
        "leave_requests",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("workspace_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        *_timestamps(),
        _workspace_fk(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_leave_requests_workspace_user_status",
        "leave_requests",
        ["workspace_id", "user_id", "status"],
    )


def downgrade() -> None:
    op.drop_index("ix_leave_requests_workspace_user_status", table_name="leave_requests")
    op.drop_table("leave_requests")
    op.drop_index("ix_roster_assignments_roster_id", table_name="roster_assignments")
    op.drop_table("roster_assignments")
    op.drop_table("rosters")
    op.drop_index("uq_invitations_pending", table_name="invitations")
    op.drop_index("ix_invitations_workspace_email_status", table_name="invitations")
    op.drop_table("invitations")
    op.drop_table("user_favorites")
    op.drop_index("uq_enrollment_requests_pending", table_name="enrollment_requests")
    op.drop_index("ix_enrollment_requests_user_id", table_name="enrollment_requests")
    op.drop_index("ix_enrollment_requests_workspace_id", table_name="enrollment_requests")
    op.drop_table("enrollment_requests")
    op.drop_index("ix_workspace_enrollments_user_id", table_name="workspace_enrollments")
    op.drop_table("workspace_enrollments")
    op.drop_index("ix_workspaces_owner_id", table_name="workspaces")
    op.drop_table("workspaces")
