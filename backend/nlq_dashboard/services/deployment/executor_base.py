"""
Shared types for deployment delegation.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from nlq_dashboard.core.config import settings


class DeploymentOutcome(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class DeploymentResult:
    """Outcome of one deployment request to the helper."""

    status: DeploymentOutcome
    system: str
    stdout: Optional[str] = None
    message: Optional[str] = None
    stderr: Optional[str] = None
    compose_path: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == DeploymentOutcome.SUCCESS

    @classmethod
    def succeeded(cls, system: str, stdout: str = "", message: str = None) -> "DeploymentResult":
        return cls(status=DeploymentOutcome.SUCCESS, system=system, stdout=stdout, message=message)

    @classmethod
    def failed(
        cls,
        system: str,
        message: str,
        stderr: Optional[str] = None,
        compose_path: Optional[str] = None,
    ) -> "DeploymentResult":
        return cls(
            status=DeploymentOutcome.ERROR,
            system=system,
            message=message,
            stderr=stderr,
            compose_path=compose_path,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape: ``stdout`` on success, ``message``/``stderr``/``composePath`` on error."""
        if self.success:
            data = {"status": self.status.value, "stdout": self.stdout, "system": self.system}
            if self.message:
                data["message"] = self.message
            return data

        data = {"status": self.status.value, "system": self.system, "message": self.message}
        if self.stderr is not None:
            data["stderr"] = self.stderr
        if self.compose_path is not None:
            data["composePath"] = self.compose_path
        return data


@dataclass
class DeploymentContext:
    """
    Deployment helper port known to one application instance.

    Held on ``app.state`` and handed to request handlers as a dependency.
    """

    default_port: int = field(default_factory=lambda: settings.DEPLOYMENT_SERVICE_PORT)
    negotiated_port: Optional[int] = None

    @property
    def port(self) -> int:
        """Negotiated port if one was set, otherwise the default."""
        return self.negotiated_port or self.default_port

    def negotiate(self, port: int) -> None:
        self.negotiated_port = port
