"""
Request dependencies.

Services are created once per application instance and kept on
``app.state``; handlers receive them explicitly through these functions.
"""
from fastapi import Request

from nlq_dashboard.services.config_store import ConfigStore
from nlq_dashboard.services.deployment.executor_base import DeploymentContext
from nlq_dashboard.services.deployment.port_allocator import PortAllocator
from nlq_dashboard.services.deployment.task_runner import DeploymentTaskRunner
from nlq_dashboard.services.health_service import ServiceHealthChecker


def get_config_store(request: Request) -> ConfigStore:
    return request.app.state.config_store


def get_deployment_context(request: Request) -> DeploymentContext:
    return request.app.state.deployment_context


def get_port_allocator(request: Request) -> PortAllocator:
    return request.app.state.port_allocator


def get_task_runner(request: Request) -> DeploymentTaskRunner:
    return request.app.state.task_runner


def get_health_checker(request: Request) -> ServiceHealthChecker:
    return request.app.state.health_checker


def get_host_resolver(request: Request):
    """Callable returning the deployment helper host name."""
    return request.app.state.host_resolver
