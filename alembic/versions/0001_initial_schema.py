"""facilities, users, shift templates and generated shifts

Revision ID: 0001
Revises:
Create Date: 2025-01-06 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

staffing_model = sa.Enum("PER_SLOT", "GROUPED", name="staffing_model")
shift_status = sa.Enum(
    "OPEN", "ASSIGNED", "IN_PROGRESS", "COMPLETED", "CANCELLED", name="shift_status"
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "facilities",
        sa.Column("facility_id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("facility_type", sa.String(40), nullable=False),
        sa.Column("timezone", sa.String(64), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "users",
        sa.Column("user_id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(254), nullable=False, unique=True),
        sa.Column("first_name", sa.String(80), nullable=False),
        sa.Column("last_name", sa.String(80), nullable=False),
        sa.Column("role", sa.String(40), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column(
            "primary_facility_id",
            sa.String(36),
            sa.ForeignKey("facilities.facility_id"),
            nullable=True,
        ),
        sa.Column("associated_facility_ids", sa.JSON(), nullable=False),
        sa.Column("permissions", sa.JSON(), nullable=True),
        sa.Column("facility_permissions", sa.JSON(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "shift_templates",
        sa.Column("template_id", sa.String(36), primary_key=True),
        sa.Column(
            "facility_id",
            sa.String(36),
            sa.ForeignKey("facilities.facility_id"),
            nullable=False,
        ),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("department", sa.String(80), nullable=False),
        sa.Column("specialty", sa.String(80), nullable=False),
        sa.Column("shift_type", sa.String(20), nullable=True),
        sa.Column("min_staff", sa.Integer(), nullable=False),
        sa.Column("max_staff", sa.Integer(), nullable=False),
        sa.Column("staffing_model", staffing_model, nullable=False),
        sa.Column("start_time", sa.String(5), nullable=False),
        sa.Column("end_time", sa.String(5), nullable=False),
        sa.Column("overnight", sa.Boolean(), nullable=False),
        sa.Column("days_of_week", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("days_posted_out", sa.Integer(), nullable=False),
        sa.Column("hourly_rate", sa.Numeric(8, 2), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("generated_shifts_count", sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index(
        "ix_shift_templates_facility_id", "shift_templates", ["facility_id"]
    )

    op.create_table(
        "generated_shifts",
        sa.Column("shift_id", sa.String(36), primary_key=True),
        sa.Column(
            "template_id",
            sa.String(36),
            sa.ForeignKey("shift_templates.template_id"),
            nullable=False,
        ),
        sa.Column(
            "facility_id",
            sa.String(36),
            sa.ForeignKey("facilities.facility_id"),
            nullable=False,
        ),
        sa.Column("title", sa.String(120), nullable=False),
        sa.Column("department", sa.String(80), nullable=False),
        sa.Column("specialty", sa.String(80), nullable=False),
        sa.Column("shift_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.String(5), nullable=False),
        sa.Column("end_time", sa.String(5), nullable=False),
        sa.Column("slot_index", sa.Integer(), nullable=False),
        sa.Column("required_workers", sa.Integer(), nullable=False),
        sa.Column("max_workers", sa.Integer(), nullable=False),
        sa.Column("hourly_rate", sa.Numeric(8, 2), nullable=False),
        sa.Column("total_hours", sa.Numeric(5, 2), nullable=False),
        sa.Column("status", shift_status, nullable=False),
        sa.Column("assigned_staff_ids", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint(
            "template_id", "shift_date", "slot_index", name="uq_generated_shift_slot"
        ),
    )
    op.create_index(
        "ix_generated_shifts_template_id", "generated_shifts", ["template_id"]
    )
    op.create_index(
        "ix_generated_shifts_shift_date", "generated_shifts", ["shift_date"]
    )


def downgrade() -> None:
    op.drop_index("ix_generated_shifts_shift_date", table_name="generated_shifts")
    op.drop_index("ix_generated_shifts_template_id", table_name="generated_shifts")
    op.drop_table("generated_shifts")
    op.drop_index("ix_shift_templates_facility_id", table_name="shift_templates")
    op.drop_table("shift_templates")
    op.drop_table("users")
    op.drop_table("facilities")
    shift_status.drop(op.get_bind(), checkfirst=True)
    staffing_model.drop(op.get_bind(), checkfirst=True)
