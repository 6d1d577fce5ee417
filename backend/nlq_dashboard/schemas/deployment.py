"""
Pydantic schemas for deployment helper negotiation and deployment tasks.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, StrictInt


class DeploymentPortRequest(BaseModel):
    """Port chosen by the operator for the deployment helper."""
    port: StrictInt


class DeploymentPortResponse(BaseModel):
    """Result of probing the deployment helper port."""
    available: bool
    port: int
    host: Optional[str] = None
    url: Optional[str] = None
    alternatives: Optional[List[int]] = None


class DeploymentPortUpdateResponse(BaseModel):
    """Acknowledgement of a negotiated deployment helper port."""
    success: bool
    port: int
    host: str
    url: str


class DeploymentTaskResponse(BaseModel):
    """Handle of a background deployment."""
    id: str
    system: str
    port: Optional[int] = None
    status: str
    createdAt: str
    finishedAt: Optional[str] = None
    result: Optional[Dict[str, Any]] = None
