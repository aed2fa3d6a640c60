import uuid
from datetime import date, datetime

from sqlalchemy import String, Date, DateTime, Integer, ForeignKey, CheckConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from staffboard.db.base import Base


class ProjectAssignment(Base):
    """
    Persisted copy of a committed allocation. Rows are written only through
    AllocationService hooks, never directly by the routers.
    """

    __tablename__ = "project_assignments"
    __table_args__ = (
        CheckConstraint("lock_type IN ('hard','soft')", name="ck_project_assignments_lock_type"),
        CheckConstraint("utilization_percentage BETWEEN 0 AND 100", name="ck_project_assignments_utilization"),
        CheckConstraint("start_date <= end_date", name="ck_project_assignments_dates"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    employee_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("employees.id", ondelete="RESTRICT"), index=True, nullable=False)
    project_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("projects.id", ondelete="RESTRICT"), index=True, nullable=False)
    role_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("roles.id", ondelete="SET NULL"), nullable=True)

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    utilization_percentage: Mapped[int] = mapped_column(Integer, nullable=False)
    lock_type: Mapped[str] = mapped_column(String(10), nullable=False, default="soft")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    employee = relationship("Employee")
    project = relationship("Project")
    role = relationship("Role")
