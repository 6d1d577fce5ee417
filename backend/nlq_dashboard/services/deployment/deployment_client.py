"""
Client for the deployment helper.

The helper is a sibling process that runs ``docker-compose up -d`` for a
named stack. This client sends it one request per deployment and turns
whatever comes back, including transport failures, into a DeploymentResult.
"""
import errno
import logging
from typing import Optional

import httpx

from nlq_dashboard.core.config import settings
from nlq_dashboard.services.deployment.executor_base import DeploymentResult
from nlq_dashboard.services.deployment.host_resolver import resolve_deployment_host

logger = logging.getLogger(__name__)


def is_connection_refused(exc: BaseException) -> bool:
    """
    True if a connection error was caused by the peer refusing it.

    DNS failures and unreachable networks also surface as httpx.ConnectError;
    only the chained OS error tells them apart. Exception groups (raised when
    every resolved address fails) are searched too.
    """
    seen = set()
    pending = [exc]
    while pending:
        current = pending.pop()
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))
        if isinstance(current, ConnectionRefusedError):
            return True
        if isinstance(current, OSError) and current.errno == errno.ECONNREFUSED:
            return True
        pending.extend(getattr(current, "exceptions", ()))
        pending.extend((current.__cause__, current.__context__))
    return False


class DeploymentClient:
    """
    Delegates stack deployments to the deployment helper over HTTP.

    No retries: a failed deployment is reported once.
    """

    def __init__(
        self,
        default_port: int = None,
        timeout: float = None,
        host_resolver=None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            default_port: Helper port used when deploy() gets none
            timeout: Request timeout in seconds (image pulls can take long)
            host_resolver: Callable returning the helper host name
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.default_port = default_port or settings.DEPLOYMENT_SERVICE_PORT
        self.timeout = timeout or settings.DEPLOYMENT_TIMEOUT_SECONDS
        self._resolve_host = host_resolver or resolve_deployment_host
        self._transport = transport

    def deploy_url(self, port: Optional[int] = None) -> str:
        return f"http://{self._resolve_host()}:{port or self.default_port}/deploy"

    async def deploy(self, system: str, port: Optional[int] = None) -> DeploymentResult:
        """
        Ask the helper to deploy a stack.

        Args:
            system: Stack name (e.g. "nlq", "migration")
            port: Helper port; the default port is used when omitted

        Returns:
            DeploymentResult; transport and helper errors become error results
        """
        port = port or self.default_port
        url = self.deploy_url(port)
        logger.info(f"Requesting deployment of '{system}' from {url}")

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.post(url, json={"system": system})
        except httpx.ConnectError as e:
            logger.debug(f"Connection to deployment helper failed: {e}")
            if not is_connection_refused(e):
                return DeploymentResult.failed(system, str(e) or e.__class__.__name__)
            return DeploymentResult.failed(
                system,
                f"Cannot connect to deployment service on port {port}. "
                f"Make sure the deployment service is running and listening on port {port}.",
            )
        except httpx.HTTPError as e:
            return DeploymentResult.failed(system, str(e) or e.__class__.__name__)

        return self._parse_response(system, response)

    def _parse_response(self, system: str, response: httpx.Response) -> DeploymentResult:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if response.is_success and body.get("status") != "error":
            return DeploymentResult.succeeded(
                system,
                stdout=body.get("stdout", ""),
                message=body.get("message"),
            )

        message = body.get("message") or body.get("error") or (
            f"Deployment service returned HTTP {response.status_code}"
        )
        return DeploymentResult.failed(
            system,
            message,
            stderr=body.get("stderr"),
            compose_path=body.get("composePath"),
        )


# Singleton instance
deployment_client = DeploymentClient()
