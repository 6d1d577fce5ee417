"""
Event handlers for domain events.

Background deployments have no caller waiting on them, so their outcome
is reported here.
"""
import logging

from nlq_dashboard.core.events import (
    ConfigurationSavedEvent,
    DeploymentCompletedEvent,
    DeploymentFailedEvent,
    DeploymentRequestedEvent,
    handles,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Event Handlers
# =============================================================================

@handles(ConfigurationSavedEvent)
def on_configuration_saved(event: ConfigurationSavedEvent):
    logger.info(f"Configuration saved to {event.path} ({len(event.keys)} keys)")


# =============================================================================
# Deployment Event Handlers
# =============================================================================

@handles(DeploymentRequestedEvent)
def on_deployment_requested(event: DeploymentRequestedEvent):
    logger.info(
        f"Deployment {event.task_id} of '{event.system}' dispatched "
        f"(helper port {event.port})"
    )


@handles(DeploymentCompletedEvent)
def on_deployment_completed(event: DeploymentCompletedEvent):
    logger.info(f"Deployment {event.task_id} of '{event.system}' completed")
    if event.stdout:
        logger.info(event.stdout)


@handles(DeploymentFailedEvent)
def on_deployment_failed(event: DeploymentFailedEvent):
    logger.error(f"{event.system} deployment error: {event.message}")
    if event.stderr:
        logger.error(f"stderr: {event.stderr}")
    if event.compose_path:
        logger.error(f"Compose path: {event.compose_path}")


def register_all_handlers():
    """
    Explicitly register all handlers.

    The @handles decorator registers handlers when this module is imported;
    calling this during startup guarantees the import happened.
    """
    logger.info("Event handlers registered")
