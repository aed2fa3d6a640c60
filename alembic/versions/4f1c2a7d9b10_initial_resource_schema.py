"""initial resource schema

Revision ID: 4f1c2a7d9b10
Revises:
Create Date: 2026-10-18 09:12:44.108213
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "4f1c2a7d9b10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(with_updated: bool = True) -> list[sa.Column]:
    cols = [sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)]
    if with_updated:
        cols.append(sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False))
    return cols


def upgrade() -> None:
    op.create_table(
        "departments",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(with_updated=False),
    )
    op.create_table(
        "roles",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(with_updated=False),
    )
    op.create_table(
        "employees",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("employee_code", sa.String(50), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("designation", sa.String(200), nullable=False),
        sa.Column("phone_number", sa.String(50), nullable=True),
        sa.Column("profile_picture_url", sa.String(500), nullable=True),
        sa.Column("date_of_joining", sa.Date(), nullable=False),
        sa.Column("department_id", sa.Uuid(), sa.ForeignKey("departments.id", ondelete="SET NULL"), nullable=True),
        sa.Column("reporting_manager_id", sa.Uuid(), sa.ForeignKey("employees.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_employees_employee_code", "employees", ["employee_code"], unique=True)

    op.create_table(
        "projects",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("project_code", sa.String(50), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("client_name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("completion_percentage", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("status IN ('active','on_hold','completed')", name="ck_projects_status"),
        sa.CheckConstraint("completion_percentage BETWEEN 0 AND 100", name="ck_projects_completion"),
        sa.CheckConstraint("start_date <= end_date", name="ck_projects_dates"),
    )
    op.create_index("ix_projects_project_code", "projects", ["project_code"], unique=True)

    op.create_table(
        "project_assignments",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("employee_id", sa.Uuid(), sa.ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("project_id", sa.Uuid(), sa.ForeignKey("projects.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("role_id", sa.Uuid(), sa.ForeignKey("roles.id", ondelete="SET NULL"), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("utilization_percentage", sa.Integer(), nullable=False),
        sa.Column("lock_type", sa.String(10), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("lock_type IN ('hard','soft')", name="ck_project_assignments_lock_type"),
        sa.CheckConstraint("utilization_percentage BETWEEN 0 AND 100", name="ck_project_assignments_utilization"),
        sa.CheckConstraint("start_date <= end_date", name="ck_project_assignments_dates"),
    )
    op.create_index("ix_project_assignments_employee_id", "project_assignments", ["employee_id"])
    op.create_index("ix_project_assignments_project_id", "project_assignments", ["project_id"])

    op.create_table(
        "hiring_requirements",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("position_name", sa.String(200), nullable=False),
        sa.Column("department_id", sa.Uuid(), sa.ForeignKey("departments.id", ondelete="SET NULL"), nullable=True),
        sa.Column("number_of_openings", sa.Integer(), nullable=False),
        sa.Column("urgency", sa.String(10), nullable=False),
        sa.Column("experience_required", sa.String(200), nullable=False),
        sa.Column("job_description", sa.Text(), nullable=True),
        sa.Column("job_document_url", sa.String(500), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("urgency IN ('normal','medium','urgent')", name="ck_hiring_requirements_urgency"),
        sa.CheckConstraint("number_of_openings >= 1", name="ck_hiring_requirements_openings"),
    )

    op.create_table(
        "audit_events",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("actor", sa.String(320), nullable=True),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("event_metadata", sa.JSON(), nullable=True),
        *_timestamps(with_updated=False),
    )


def downgrade() -> None:
    op.drop_table("audit_events")
    op.drop_table("hiring_requirements")
    op.drop_index("ix_project_assignments_project_id", table_name="project_assignments")
    op.drop_index("ix_project_assignments_employee_id", table_name="project_assignments")
    op.drop_table("project_assignments")
    op.drop_index("ix_projects_project_code", table_name="projects")
    op.drop_table("projects")
    op.drop_index("ix_employees_employee_code", table_name="employees")
    op.drop_table("employees")
    op.drop_table("roles")
    op.drop_table("departments")
