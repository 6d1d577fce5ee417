"""
API endpoints for deployment helper negotiation and deployment tasks.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends

from nlq_dashboard.api.deps import (
    get_deployment_context,
    get_host_resolver,
    get_port_allocator,
    get_task_runner,
)
from nlq_dashboard.core.exceptions import InvalidPortError, PortUnavailableError
from nlq_dashboard.schemas.deployment import (
    DeploymentPortRequest,
    DeploymentPortResponse,
    DeploymentPortUpdateResponse,
    DeploymentTaskResponse,
)
from nlq_dashboard.services.deployment.executor_base import DeploymentContext
from nlq_dashboard.services.deployment.port_allocator import PortAllocator, is_valid_port
from nlq_dashboard.services.deployment.task_runner import DeploymentTaskRunner

logger = logging.getLogger(__name__)

router = APIRouter()


def helper_url(host: str, port: int) -> str:
    return f"http://{host}:{port}"


@router.get(
    "/deployment-port",
    response_model=DeploymentPortResponse,
    response_model_exclude_none=True,
)
async def get_deployment_port(
    context: DeploymentContext = Depends(get_deployment_context),
    allocator: PortAllocator = Depends(get_port_allocator),
    resolve_host=Depends(get_host_resolver),
) -> DeploymentPortResponse:
    """
    Probe the default deployment helper port.

    When it is free it becomes the negotiated port; otherwise up to five
    free ports above it are suggested.
    """
    port = context.default_port
    if allocator.is_available(port):
        context.negotiate(port)
        host = resolve_host()
        return DeploymentPortResponse(
            available=True,
            port=port,
            host=host,
            url=helper_url(host, port),
        )

    alternatives = allocator.list_alternatives(port)
    logger.info(f"Deployment port {port} is in use; alternatives: {alternatives}")
    return DeploymentPortResponse(available=False, port=port, alternatives=alternatives)


@router.post("/deployment-port", response_model=DeploymentPortUpdateResponse)
async def set_deployment_port(
    payload: DeploymentPortRequest,
    context: DeploymentContext = Depends(get_deployment_context),
    allocator: PortAllocator = Depends(get_port_allocator),
    resolve_host=Depends(get_host_resolver),
) -> DeploymentPortUpdateResponse:
    """
    Choose the deployment helper port.

    Raises:
        InvalidPortError: If the port is outside 1-65535 (400)
        PortUnavailableError: If the port is in use (400)
    """
    port = payload.port
    if not is_valid_port(port):
        raise InvalidPortError(port)
    if not allocator.is_available(port):
        raise PortUnavailableError(port, allocator.list_alternatives(port))

    context.negotiate(port)
    host = resolve_host()
    logger.info(f"Deployment port set to {port}")
    return DeploymentPortUpdateResponse(
        success=True,
        port=port,
        host=host,
        url=helper_url(host, port),
    )


@router.get("/deployments", response_model=List[DeploymentTaskResponse])
async def list_deployments(
    runner: DeploymentTaskRunner = Depends(get_task_runner),
) -> List[DeploymentTaskResponse]:
    """List background deployments, newest first."""
    return [DeploymentTaskResponse(**task.to_dict()) for task in runner.list_tasks()]


@router.get("/deployments/{task_id}", response_model=DeploymentTaskResponse)
async def get_deployment(
    task_id: str,
    runner: DeploymentTaskRunner = Depends(get_task_runner),
) -> DeploymentTaskResponse:
    """
    Get one background deployment.

    Raises:
        DeploymentTaskNotFoundError: If the task is unknown (404)
    """
    return DeploymentTaskResponse(**runner.get(task_id).to_dict())
