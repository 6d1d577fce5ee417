"""
Pydantic schemas for the installation wizard.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, StrictInt


class InstallRequest(BaseModel):
    """Values collected by the setup wizard."""
    model_config = ConfigDict(populate_by_name=True)

    api_key: str = Field(..., alias="apiKey")
    openwebui_password: str = Field(..., alias="openwebuiPassword")
    mcpdb_password: str = Field(..., alias="mcpdbPassword")
    litellm_key: str = Field("", alias="litellmKey")
    webui_secret: str = Field("", alias="webuiSecret")
    include_migration: bool = Field(False, alias="includeMigration")
    migration_password: Optional[str] = Field(None, alias="migrationPassword")
    registry: Optional[str] = None
    version: Optional[str] = None
    deployment_service_port: Optional[StrictInt] = Field(None, alias="deploymentServicePort")


class InstallResponse(BaseModel):
    """Acknowledgement sent before the deployments finish."""
    success: bool
    message: str
    deployments: List[str] = Field(default_factory=list)


class InstallationStatus(BaseModel):
    """Installation status derived from the nlq stack configuration."""
    installed: bool
    hasApiKey: bool
    hasPasswords: bool
    timestamp: datetime
