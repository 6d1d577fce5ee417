"""
Application configuration using Pydantic Settings.
"""
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Application
    APP_NAME: str = "NLQ Platform Dashboard"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "info"
    HOST: str = "0.0.0.0"
    PORT: int = 3001  # Platform services use their own ports
    CORS_ORIGINS: str = "http://localhost:3001,http://localhost:5173,http://localhost"

    # Stack configuration files
    # The container layout is tried first, then the working directory
    CONFIG_CONTAINER_ROOT: str = "/app"
    CONFIG_LOCAL_ROOT: str = "."
    COMPOSE_FILE_NAME: str = "docker-compose.yml"

    # Built single-page UI
    UI_DIST_DIR: str = "./ui/dist"

    # Deployment helper
    DEPLOYMENT_SERVICE_PORT: int = 3002
    DEPLOYMENT_TIMEOUT_SECONDS: float = 1800.0  # docker-compose pulls can be slow
    DEPLOYMENT_PORT_ALTERNATIVES: int = 5
    DEPLOYMENT_PORT_MAX_ATTEMPTS: int = 10
    DEPLOYMENT_MAX_FINISHED_TASKS: int = 100
    DEPLOYMENT_IN_COMPOSE_ENV: str = "RUNNING_IN_COMPOSE"
    DEPLOYMENT_COMPOSE_HOST: str = "deployment-service"
    DEPLOYMENT_DESKTOP_HOST: str = "host.docker.internal"
    DEPLOYMENT_LINUX_HOST: str = "172.17.0.1"
    COMPOSE_COMMAND: str = "docker-compose"

    # Downstream service health probes
    SERVICE_HEALTH_HOST: str = "localhost"
    SERVICE_HEALTH_ENDPOINT: str = "/health"
    SERVICE_HEALTH_TIMEOUT: float = 2.0

    # Defaults written by the installer
    DEFAULT_MCP_REGISTRY: str = "rfinancials/mydocker-repo"
    DEFAULT_MCP_VERSION: str = "v1.0.0"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    def get_cors_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]


settings = Settings()
