"""
Custom exception hierarchy for domain-specific errors.

This module provides a clean separation between domain errors and HTTP concerns.
Services raise domain exceptions, and the exception handlers map them to HTTP responses.
"""
from typing import Optional, Dict, Any, List


class DomainException(Exception):
    """Base exception for all domain errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


# =============================================================================
# Not Found Errors (404)
# =============================================================================

class NotFoundError(DomainException):
    """Base class for resource not found errors."""
    pass


class DeploymentTaskNotFoundError(NotFoundError):
    """Deployment task does not exist."""

    def __init__(self, task_id: str):
        super().__init__(f"Deployment task not found: {task_id}", {"task_id": task_id})


# =============================================================================
# Validation Errors (400)
# =============================================================================

class ValidationError(DomainException):
    """Base class for validation errors."""
    pass


class InvalidPortError(ValidationError):
    """Port number is outside the TCP range."""

    def __init__(self, port: Any):
        super().__init__(
            f"Invalid port: {port}. Port must be an integer between 1 and 65535",
            {"port": port},
        )


class PortUnavailableError(ValidationError):
    """Requested port is already in use."""

    def __init__(self, port: int, alternatives: Optional[List[int]] = None):
        super().__init__(
            f"Port {port} is already in use",
            {"port": port, "alternatives": alternatives or []},
        )


class UnknownStackError(ValidationError):
    """Stack name is not one of the known stacks."""

    def __init__(self, name: str):
        super().__init__(f"Unknown stack: {name}", {"stack": name})


# =============================================================================
# Operation Errors (500)
# =============================================================================

class OperationError(DomainException):
    """Base class for operation failures."""
    pass


class ConfigurationSaveError(OperationError):
    """Stack configuration could not be written."""

    def __init__(self, stack: str):
        super().__init__("Failed to save configuration", {"stack": stack})


# =============================================================================
# Service Unavailable (503)
# =============================================================================

class ServiceUnavailableError(DomainException):
    """External service is unavailable."""

    def __init__(self, service: str, reason: str = "Service unavailable"):
        super().__init__(f"{service}: {reason}", {"service": service, "reason": reason})
