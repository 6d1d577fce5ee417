"""
Resolution of the host name under which the deployment helper is reachable.

The dashboard runs in one of three contexts, each reaching the helper
differently:

- inside the compose project: the helper's service DNS name;
- in a container under Docker Desktop (macOS/Windows): the host alias;
- in a container on a native Linux host: the default bridge gateway.
"""
import os
import sys
from enum import Enum
from typing import Mapping, Optional

from nlq_dashboard.core.config import settings


class ExecutionContext(str, Enum):
    """Where the dashboard process runs relative to the deployment helper."""
    IN_COMPOSE = "in_compose"
    DOCKER_DESKTOP = "docker_desktop"
    LINUX_HOST = "linux_host"


def _is_docker_desktop_platform(platform: str) -> bool:
    return platform == "darwin" or platform.startswith("win") or platform == "cygwin"


def detect_execution_context(
    environ: Optional[Mapping[str, str]] = None,
    platform: Optional[str] = None,
) -> ExecutionContext:
    """
    Classify the current process.

    The in-compose marker wins over the platform check.

    Args:
        environ: Environment to inspect (default: os.environ)
        platform: Platform name as in sys.platform (default: sys.platform)
    """
    environ = os.environ if environ is None else environ
    platform = sys.platform if platform is None else platform

    if environ.get(settings.DEPLOYMENT_IN_COMPOSE_ENV):
        return ExecutionContext.IN_COMPOSE
    if _is_docker_desktop_platform(platform):
        return ExecutionContext.DOCKER_DESKTOP
    return ExecutionContext.LINUX_HOST


def host_for_context(context: ExecutionContext) -> str:
    hosts = {
        ExecutionContext.IN_COMPOSE: settings.DEPLOYMENT_COMPOSE_HOST,
        ExecutionContext.DOCKER_DESKTOP: settings.DEPLOYMENT_DESKTOP_HOST,
        ExecutionContext.LINUX_HOST: settings.DEPLOYMENT_LINUX_HOST,
    }
    return hosts[context]


def resolve_deployment_host(
    environ: Optional[Mapping[str, str]] = None,
    platform: Optional[str] = None,
) -> str:
    """Host name of the deployment helper for the current execution context."""
    return host_for_context(detect_execution_context(environ, platform))
