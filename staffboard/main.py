from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from staffboard.api.health import router as health_router
from staffboard.api.root import router as root_router
from staffboard.api.departments import router as departments_router
from staffboard.api.roles import router as roles_router
from staffboard.api.employees import router as employees_router
from staffboard.api.projects import router as projects_router
from staffboard.api.assignments import router as assignments_router
from staffboard.api.hiring_requirements import router as hiring_router
from staffboard.api.dashboard import router as dashboard_router
from staffboard.api.audit import router as audit_router
from staffboard.core.config import settings
from staffboard.core.logging import configure_logging

configure_logging()

app = FastAPI(title="Staffboard Resource Manager")

# CORS middleware for frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(root_router)
app.include_router(health_router)
app.include_router(departments_router)
app.include_router(roles_router)
app.include_router(employees_router)
app.include_router(projects_router)
app.include_router(assignments_router)
app.include_router(hiring_router)
app.include_router(dashboard_router)
app.include_router(audit_router)
