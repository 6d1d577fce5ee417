"""
Liveness probes for the services of the nlq stack.
"""
import asyncio
import logging
from dataclasses import asdict, dataclass
from typing import Dict, Mapping, Optional

import httpx

from nlq_dashboard.core.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KnownService:
    """Downstream service with a default port and the config key that may override it."""
    name: str
    port: int
    port_key: Optional[str] = None


KNOWN_SERVICES = (
    KnownService("openwebui", 3000, "OPENWEBUI_PORT"),  # OpenWebUI web interface
    KnownService("mcp", 8000, "MCP_PORT"),              # Custom MCP Server
    KnownService("litellm", 4000, "LITELLM_PORT"),      # LiteLLM API proxy
    KnownService("postgres_system", 5434),              # System database (internal)
    KnownService("postgres_query", 5433),               # Query database (external)
)


@dataclass
class ServiceStatus:
    """Status of one downstream service."""
    port: int
    healthy: bool


class ServiceHealthChecker:
    """
    Probes each known service with an unauthenticated GET.

    Probes run concurrently and each one is bounded by its own timeout, so
    an unreachable service never delays or fails the others.
    """

    def __init__(
        self,
        host: str = None,
        endpoint: str = None,
        timeout: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.host = host or settings.SERVICE_HEALTH_HOST
        self.endpoint = endpoint or settings.SERVICE_HEALTH_ENDPOINT
        self.timeout = timeout or settings.SERVICE_HEALTH_TIMEOUT
        self._transport = transport

    def resolve_ports(self, config: Optional[Mapping[str, str]] = None) -> Dict[str, int]:
        """Ports to probe, honouring overrides from the stack configuration."""
        config = config or {}
        ports = {}
        for service in KNOWN_SERVICES:
            port = service.port
            override = config.get(service.port_key) if service.port_key else None
            if override:
                try:
                    port = int(override)
                except ValueError:
                    logger.warning(f"Ignoring non-numeric {service.port_key}={override!r}")
            ports[service.name] = port
        return ports

    async def check_service(self, client: httpx.AsyncClient, port: int) -> bool:
        """
        Probe a single service.

        The timeout bounds the whole exchange, body included; httpx's own
        timeouts only bound each connect, read or write step.

        Returns:
            True if the health endpoint answered 200 within the timeout
        """
        url = f"http://{self.host}:{port}{self.endpoint}"
        try:
            response = await asyncio.wait_for(client.get(url), timeout=self.timeout)
            return response.status_code == 200
        except asyncio.TimeoutError:
            logger.debug(f"Health check timed out after {self.timeout}s for {url}")
            return False
        except Exception as e:
            logger.debug(f"Health check failed for {url}: {e}")
            return False

    async def get_status(self, config: Optional[Mapping[str, str]] = None) -> Dict[str, dict]:
        """
        Probe every known service.

        Returns:
            Mapping of service name to ``{"port": int, "healthy": bool}``
        """
        ports = self.resolve_ports(config)
        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            results = await asyncio.gather(
                *(self.check_service(client, port) for port in ports.values())
            )
        return {
            name: asdict(ServiceStatus(port=port, healthy=healthy))
            for (name, port), healthy in zip(ports.items(), results)
        }


# Singleton instance
health_checker = ServiceHealthChecker()
