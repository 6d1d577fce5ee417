"""
API router that includes all endpoint routers.
"""
from fastapi import APIRouter

from nlq_dashboard.api.endpoints import (
    config,
    deployment,
    install,
    services,
    status,
)

# Create main API router
api_router = APIRouter()

# Include endpoint routers
api_router.include_router(status.router, tags=["status"])
api_router.include_router(config.router, tags=["config"])
api_router.include_router(services.router, tags=["services"])
api_router.include_router(deployment.router, tags=["deployment"])
api_router.include_router(install.router, tags=["install"])
