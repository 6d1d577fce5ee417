"""
Port probing and allocation for the deployment helper.

Availability is decided by briefly binding a listener on the loopback
interface, which is how the helper itself would claim the port.
"""
import errno
import logging
import socket
import sys
from typing import List, Optional

from nlq_dashboard.core.config import settings

logger = logging.getLogger(__name__)

MAX_PORT = 65535
PROBE_HOST = "127.0.0.1"


def is_valid_port(port) -> bool:
    """True for integers in the TCP port range (booleans excluded)."""
    return isinstance(port, int) and not isinstance(port, bool) and 1 <= port <= MAX_PORT


def is_port_available(port: int, host: str = PROBE_HOST) -> bool:
    """
    Check whether a TCP port can be bound on ``host``.

    Only "address in use" counts as unavailable. Any other bind error
    (permission denied on privileged ports, resource limits) reports the
    port as available.

    Args:
        port: Port number to probe
        host: Interface to bind on

    Returns:
        True if the port is free (or the bind failed for another reason)
    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        if sys.platform != "win32":
            # Match how servers bind, so TIME_WAIT leftovers do not count as in use
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((host, port))
            sock.listen(1)
        except OSError as e:
            if e.errno == errno.EADDRINUSE:
                return False
            logger.debug(f"Bind on {host}:{port} failed with {e}; treating port as available")
            return True
    return True


class PortAllocator:
    """
    Sequential port scanner.

    Both operations only probe; nothing is reserved or persisted.
    """

    def __init__(self, host: str = PROBE_HOST, probe=None):
        """
        Initialize the allocator.

        Args:
            host: Interface to probe on
            probe: Callable ``(port, host) -> bool``, defaults to is_port_available
        """
        self.host = host
        self._probe = probe or is_port_available

    def is_available(self, port: int) -> bool:
        return self._probe(port, self.host)

    def allocate(self, start_port: int = None, max_attempts: int = None) -> Optional[int]:
        """
        Find the first available port at or after ``start_port``.

        Args:
            start_port: First candidate (default: deployment helper port)
            max_attempts: Number of candidates to probe

        Returns:
            The lowest available port among the candidates, or None
        """
        if start_port is None:
            start_port = settings.DEPLOYMENT_SERVICE_PORT
        if max_attempts is None:
            max_attempts = settings.DEPLOYMENT_PORT_MAX_ATTEMPTS

        for port in range(start_port, min(start_port + max_attempts, MAX_PORT + 1)):
            if self.is_available(port):
                logger.info(f"Allocated port {port}")
                return port

        logger.warning(f"No available port in {start_port}-{start_port + max_attempts - 1}")
        return None

    def list_alternatives(self, base_port: int, count: int = None) -> List[int]:
        """
        List every available port in ``base_port+1 .. base_port+count``.

        Used to suggest choices when the preferred port is taken.
        """
        if count is None:
            count = settings.DEPLOYMENT_PORT_ALTERNATIVES
        return [
            port
            for port in range(base_port + 1, min(base_port + count, MAX_PORT) + 1)
            if self.is_available(port)
        ]


# Singleton instance
port_allocator = PortAllocator()
