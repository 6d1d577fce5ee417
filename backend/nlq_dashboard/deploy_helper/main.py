"""
Deployment helper: a small HTTP service that runs docker-compose for the
dashboard.

It runs where the Docker CLI and the stack directories are available and
answers ``POST /deploy {"system": "<stack>"}``.
"""
import logging
import os
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from nlq_dashboard.core.config import settings
from nlq_dashboard.core.exception_handlers import register_exception_handlers
from nlq_dashboard.core.logging_config import configure_logging
from nlq_dashboard.deploy_helper.compose_runner import ComposeRunner
from nlq_dashboard.services.config_store import Stack

logger = logging.getLogger(__name__)


class DeployRequest(BaseModel):
    system: str = Stack.NLQ.value


def create_helper_app(runner: ComposeRunner = None) -> FastAPI:
    app = FastAPI(title="NLQ Deployment Helper", version=settings.APP_VERSION)
    app.state.runner = runner or ComposeRunner()
    register_exception_handlers(app)

    @app.get("/health")
    async def health():
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.post("/deploy")
    async def deploy(request: DeployRequest):
        stack = Stack.parse(request.system)
        logger.info(f"Deploy requested for '{stack.value}'")
        result = await app.state.runner.deploy(stack)
        if result.success:
            return result.to_dict()
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=result.to_dict(),
        )

    return app


app = create_helper_app()


def run() -> None:
    """Console entry point: ``nlq-deploy-helper``."""
    configure_logging(settings.LOG_LEVEL)
    port = int(os.environ.get("PORT", settings.DEPLOYMENT_SERVICE_PORT))
    uvicorn.run(app, host="0.0.0.0", port=port)


if __name__ == "__main__":
    run()
