"""
Domain event system for loose coupling between services.

This module provides a simple in-process event dispatcher that allows
services to communicate without direct dependencies. The deployment task
runner reports the outcome of background deployments through it.
"""
import inspect
import logging
from typing import Callable, Dict, List, Any, Optional, Type
from dataclasses import dataclass, field
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Base Event Classes
# =============================================================================

@dataclass
class DomainEvent:
    """Base class for all domain events."""
    timestamp: datetime = field(default_factory=_utcnow)

    @property
    def event_type(self) -> str:
        """Return the event type name."""
        return self.__class__.__name__


# =============================================================================
# Configuration Events
# =============================================================================

@dataclass
class ConfigurationSavedEvent(DomainEvent):
    """Emitted after a stack configuration file was written."""
    stack: str = None
    path: str = None
    keys: List[str] = field(default_factory=list)


# =============================================================================
# Deployment Events
# =============================================================================

@dataclass
class DeploymentRequestedEvent(DomainEvent):
    """Emitted when a background deployment is dispatched."""
    task_id: str = None
    system: str = None
    port: Optional[int] = None


@dataclass
class DeploymentCompletedEvent(DomainEvent):
    """Emitted when the deployment helper reports success."""
    task_id: str = None
    system: str = None
    stdout: str = None


@dataclass
class DeploymentFailedEvent(DomainEvent):
    """Emitted when a background deployment ends in an error result."""
    task_id: str = None
    system: str = None
    message: str = None
    stderr: Optional[str] = None
    compose_path: Optional[str] = None


# =============================================================================
# Event Dispatcher
# =============================================================================

class EventDispatcher:
    """
    Simple in-process event dispatcher.

    Handlers are registered per event type and called in registration order
    when events are dispatched. A failing handler never stops the others.
    """

    def __init__(self):
        self._handlers: Dict[Type[DomainEvent], List[Callable]] = {}

    def register(
        self,
        event_type: Type[DomainEvent],
        handler: Callable[[DomainEvent], Any],
    ) -> None:
        """
        Register a handler for an event type.

        Args:
            event_type: The event class to handle
            handler: Callable that takes the event as argument
        """
        if event_type not in self._handlers:
            self._handlers[event_type] = []
        self._handlers[event_type].append(handler)
        logger.debug(f"Registered handler {handler.__name__} for {event_type.__name__}")

    def dispatch(self, event: DomainEvent) -> None:
        """
        Dispatch an event to all registered synchronous handlers.

        Coroutine handlers are skipped here; use dispatch_async for those.
        """
        event_type = type(event)
        handlers = self._handlers.get(event_type, [])

        logger.debug(f"Dispatching {event_type.__name__} to {len(handlers)} handlers")

        for handler in handlers:
            if inspect.iscoroutinefunction(handler):
                logger.debug(f"Skipping async handler {handler.__name__} in sync dispatch")
                continue
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    f"Handler {handler.__name__} failed for {event_type.__name__}: {e}"
                )

    async def dispatch_async(self, event: DomainEvent) -> None:
        """
        Dispatch an event to all registered handlers (async version).

        Handlers can be either sync or async functions.
        """
        event_type = type(event)
        handlers = self._handlers.get(event_type, [])

        logger.debug(f"Dispatching {event_type.__name__} to {len(handlers)} handlers (async)")

        for handler in handlers:
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(
                    f"Handler {handler.__name__} failed for {event_type.__name__}: {e}"
                )


# Global event dispatcher instance
event_dispatcher = EventDispatcher()


# =============================================================================
# Decorator for registering handlers
# =============================================================================

def handles(event_type: Type[DomainEvent]):
    """
    Decorator to register a function as an event handler.

    Example:
        @handles(DeploymentFailedEvent)
        def on_deployment_failed(event: DeploymentFailedEvent):
            logger.error(event.message)
    """
    def decorator(func: Callable):
        event_dispatcher.register(event_type, func)
        return func
    return decorator
