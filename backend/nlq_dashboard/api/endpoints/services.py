"""
API endpoints for downstream service status.
"""
from typing import Dict

from fastapi import APIRouter, Depends

from nlq_dashboard.api.deps import get_config_store, get_health_checker
from nlq_dashboard.services.config_store import ConfigStore, Stack
from nlq_dashboard.services.health_service import ServiceHealthChecker

router = APIRouter()


@router.get("/services/status", response_model=Dict[str, dict])
async def get_services_status(
    store: ConfigStore = Depends(get_config_store),
    checker: ServiceHealthChecker = Depends(get_health_checker),
) -> Dict[str, dict]:
    """
    Probe every known service.

    Returns:
        Mapping of service name to ``{"port", "healthy"}``
    """
    return await checker.get_status(store.load(Stack.NLQ))


@router.post("/services/{service}/restart")
async def restart_service(service: str) -> dict:
    # TODO: run `docker-compose restart <service>` through the deployment helper
    return {
        "success": True,
        "message": f"Service {service} restart initiated",
        "service": service,
    }


@router.get("/services/{service}/logs")
async def get_service_logs(service: str) -> dict:
    return {
        "service": service,
        "logs": "Service logs would appear here",
    }
