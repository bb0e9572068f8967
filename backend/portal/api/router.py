from fastapi import APIRouter

from .endpoints import auth, employees, projects, deliverables, renewals

api_router = APIRouter()

# Paths are flat under /api to match the portal frontend
api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(employees.router, tags=["employees"])
api_router.include_router(projects.router, tags=["projects"])
api_router.include_router(deliverables.router, tags=["deliverables"])
api_router.include_router(renewals.router, tags=["renewals"])
