from staffboard.models.audit_event import AuditEvent
from staffboard.models.department import Department
from staffboard.models.employee import Employee
from staffboard.models.hiring_requirement import HiringRequirement
from staffboard.models.project import Project
from staffboard.models.project_assignment import ProjectAssignment
from staffboard.models.role import Role

__all__ = [ "AuditEvent", "Department", "Employee", "HiringRequirement",
           "Project", "ProjectAssignment", "Role" ]
