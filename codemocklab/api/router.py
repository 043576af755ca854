from fastapi import APIRouter
from .endpoints import (
    auth,
    dashboard,
    health,
    interview,
    job_preference,
    resume,
    tasks,
)

# Add a common prefix for all API routes
api_router = APIRouter(prefix="/api")

# Include routers with their specific prefixes
api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(health.router, prefix="/health", tags=["health"])

api_router.include_router(resume.router, prefix="/resume", tags=["resume"])
api_router.include_router(interview.router, prefix="/interview", tags=["interview"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(
    job_preference.router, prefix="/job-preference", tags=["job-preference"]
)
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
