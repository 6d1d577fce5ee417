"""
Deployment delegation services.

This package locates the deployment helper, negotiates its port and runs
stack deployments through it in the background.
"""
from nlq_dashboard.services.deployment.executor_base import (
    DeploymentContext,
    DeploymentOutcome,
    DeploymentResult,
)
from nlq_dashboard.services.deployment.deployment_client import DeploymentClient, deployment_client
from nlq_dashboard.services.deployment.host_resolver import (
    ExecutionContext,
    detect_execution_context,
    resolve_deployment_host,
)
from nlq_dashboard.services.deployment.port_allocator import (
    PortAllocator,
    is_port_available,
    port_allocator,
)
from nlq_dashboard.services.deployment.task_runner import (
    DeploymentTask,
    DeploymentTaskRunner,
    DeploymentTaskStatus,
)

__all__ = [
    "DeploymentContext",
    "DeploymentOutcome",
    "DeploymentResult",
    "DeploymentClient",
    "deployment_client",
    "ExecutionContext",
    "detect_execution_context",
    "resolve_deployment_host",
    "PortAllocator",
    "is_port_available",
    "port_allocator",
    "DeploymentTask",
    "DeploymentTaskRunner",
    "DeploymentTaskStatus",
]
