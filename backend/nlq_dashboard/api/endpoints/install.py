"""
API endpoint for the installation wizard.
"""
import logging

from fastapi import APIRouter, Depends

from nlq_dashboard.api.deps import (
    get_config_store,
    get_deployment_context,
    get_task_runner,
)
from nlq_dashboard.core.config import settings
from nlq_dashboard.core.exceptions import ConfigurationSaveError, InvalidPortError
from nlq_dashboard.schemas.install import InstallRequest, InstallResponse
from nlq_dashboard.services import installation_service as keys
from nlq_dashboard.services.config_store import ConfigStore, Stack
from nlq_dashboard.services.deployment.executor_base import DeploymentContext
from nlq_dashboard.services.deployment.port_allocator import is_valid_port
from nlq_dashboard.services.deployment.task_runner import DeploymentTaskRunner

logger = logging.getLogger(__name__)

router = APIRouter()


def build_nlq_config(request: InstallRequest) -> dict:
    return {
        keys.API_KEY: request.api_key,
        keys.OPENWEBUI_DB_PASSWORD: request.openwebui_password,
        keys.MCPDB_PASSWORD: request.mcpdb_password,
        keys.LITELLM_MASTER_KEY: request.litellm_key,
        keys.WEBUI_SECRET_KEY: request.webui_secret,
        "MCP_REGISTRY": request.registry or settings.DEFAULT_MCP_REGISTRY,
        "MCP_VERSION": request.version or settings.DEFAULT_MCP_VERSION,
    }


def build_migration_config(request: InstallRequest) -> dict:
    return {
        keys.MIGRATION_DB_PASSWORD: request.migration_password or request.mcpdb_password,
    }


@router.post("/install", response_model=InstallResponse)
async def install(
    request: InstallRequest,
    store: ConfigStore = Depends(get_config_store),
    context: DeploymentContext = Depends(get_deployment_context),
    runner: DeploymentTaskRunner = Depends(get_task_runner),
) -> InstallResponse:
    """
    Persist the wizard configuration and start deployment in the background.

    The migration stack is only configured and deployed when requested.
    The response is sent before any deployment finishes; progress is
    visible through /api/deployments and /api/services/status.

    Raises:
        InvalidPortError: If deploymentServicePort is outside 1-65535 (400)
        ConfigurationSaveError: If a configuration file could not be written (500)
    """
    if request.deployment_service_port is not None:
        if not is_valid_port(request.deployment_service_port):
            raise InvalidPortError(request.deployment_service_port)
        context.negotiate(request.deployment_service_port)

    logger.info("Saving configuration...")
    stacks = [Stack.NLQ]
    if not store.save(Stack.NLQ, build_nlq_config(request)):
        raise ConfigurationSaveError(Stack.NLQ.value)

    if request.include_migration:
        stacks.append(Stack.MIGRATION)
        if not store.save(Stack.MIGRATION, build_migration_config(request)):
            raise ConfigurationSaveError(Stack.MIGRATION.value)

    logger.info("Initiating docker-compose deployment...")
    tasks = [runner.dispatch(stack.value, port=context.port) for stack in stacks]

    return InstallResponse(
        success=True,
        message=(
            "Configuration saved. Deployment starting in background. "
            "Check /api/services/status for progress."
        ),
        deployments=[task.id for task in tasks],
    )
