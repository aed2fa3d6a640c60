from datetime import date
from pydantic import BaseModel


class DashboardSummary(BaseModel):
    """Headline figures for the dashboard cards, computed for a single day"""
    as_of: date
    active_projects: int = 0
    total_employees: int = 0
    average_utilization: int = 0  # mean utilization of assignments running on as_of
    available_employees: int = 0  # combined load below 100% on as_of
    open_positions: int = 0
    positions_by_urgency: dict[str, int] = {}  # normal, medium, urgent
