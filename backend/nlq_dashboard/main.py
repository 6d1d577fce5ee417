"""
FastAPI main application entry point.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from nlq_dashboard.api.router import api_router
from nlq_dashboard.core.config import Settings, settings as default_settings
from nlq_dashboard.core.event_handlers import register_all_handlers
from nlq_dashboard.core.exception_handlers import register_exception_handlers
from nlq_dashboard.core.logging_config import configure_logging
from nlq_dashboard.services.config_store import ConfigStore, Stack
from nlq_dashboard.services.deployment.deployment_client import DeploymentClient
from nlq_dashboard.services.deployment.executor_base import DeploymentContext
from nlq_dashboard.services.deployment.host_resolver import (
    detect_execution_context,
    resolve_deployment_host,
)
from nlq_dashboard.services.deployment.port_allocator import PortAllocator
from nlq_dashboard.services.deployment.task_runner import DeploymentTaskRunner
from nlq_dashboard.services.health_service import ServiceHealthChecker
from nlq_dashboard.services.installation_service import is_installed

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log installation status on startup and pending deployments on shutdown."""
    register_all_handlers()

    installed = is_installed(app.state.config_store.load(Stack.NLQ))
    logger.info(f"Installation status: {'Complete' if installed else 'Pending'}")
    logger.info(
        f"Deployment helper expected at {app.state.host_resolver()}:"
        f"{app.state.deployment_context.port} ({detect_execution_context().value})"
    )

    yield

    pending = app.state.task_runner.pending_count()
    if pending:
        logger.warning(f"Shutting down with {pending} deployment(s) still running")
    logger.info("Application shutdown complete")


def _serve_ui(dist_dir: Path, full_path: str):
    """Serve a built UI asset, falling back to index.html for client-side routes."""
    root = dist_dir.resolve()
    if full_path:
        candidate = (root / full_path).resolve()
        if candidate.is_file() and root in candidate.parents:
            return FileResponse(candidate)

    index = root / "index.html"
    if index.is_file():
        return FileResponse(index)
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": f"Dashboard UI not found in {root}"},
    )


def create_app(
    app_settings: Optional[Settings] = None,
    config_store: Optional[ConfigStore] = None,
    deployment_client: Optional[DeploymentClient] = None,
    port_allocator: Optional[PortAllocator] = None,
    health_checker: Optional[ServiceHealthChecker] = None,
    host_resolver=None,
) -> FastAPI:
    """
    Build the dashboard application.

    Every collaborator can be replaced, which is how the tests isolate the
    filesystem, the network and the deployment helper.
    """
    app_settings = app_settings or default_settings

    app = FastAPI(
        title=app_settings.APP_NAME,
        version=app_settings.APP_VERSION,
        description="Configures and launches the NLQ platform stacks",
        lifespan=lifespan,
    )

    app.state.settings = app_settings
    app.state.config_store = config_store or ConfigStore(
        container_root=app_settings.CONFIG_CONTAINER_ROOT,
        local_root=app_settings.CONFIG_LOCAL_ROOT,
    )
    app.state.host_resolver = host_resolver or resolve_deployment_host
    app.state.deployment_context = DeploymentContext(
        default_port=app_settings.DEPLOYMENT_SERVICE_PORT,
    )
    app.state.port_allocator = port_allocator or PortAllocator()
    app.state.health_checker = health_checker or ServiceHealthChecker(
        host=app_settings.SERVICE_HEALTH_HOST,
        endpoint=app_settings.SERVICE_HEALTH_ENDPOINT,
        timeout=app_settings.SERVICE_HEALTH_TIMEOUT,
    )
    app.state.task_runner = DeploymentTaskRunner(
        deployment_client or DeploymentClient(
            default_port=app_settings.DEPLOYMENT_SERVICE_PORT,
            timeout=app_settings.DEPLOYMENT_TIMEOUT_SECONDS,
            host_resolver=app.state.host_resolver,
        )
    )

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Origin", "X-Requested-With"],
        max_age=600,
    )

    app.include_router(api_router, prefix="/api")

    @app.get("/health", status_code=status.HTTP_200_OK)
    async def health_check():
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    dist_dir = Path(app_settings.UI_DIST_DIR)

    # Must stay last: everything not matched above belongs to the single-page app
    @app.get("/{full_path:path}", include_in_schema=False)
    async def serve_ui(full_path: str):
        return _serve_ui(dist_dir, full_path)

    return app


app = create_app()


def run() -> None:
    """Console entry point: ``nlq-dashboard``."""
    configure_logging(default_settings.LOG_LEVEL)
    logger.info(f"NLQ Platform Dashboard running on http://localhost:{default_settings.PORT}")
    logger.info(f"API available at http://localhost:{default_settings.PORT}/api")
    uvicorn.run(
        app,
        host=default_settings.HOST,
        port=default_settings.PORT,
        log_level=default_settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
