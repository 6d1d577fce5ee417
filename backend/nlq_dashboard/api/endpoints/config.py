"""
API endpoints for stack configuration.
"""
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Query

from nlq_dashboard.api.deps import get_config_store
from nlq_dashboard.core.exceptions import ConfigurationSaveError
from nlq_dashboard.services.config_store import ConfigStore, Stack
from nlq_dashboard.services.installation_service import mask_config

router = APIRouter()


@router.get("/config", response_model=Dict[str, str])
async def get_config(
    stack: str = Query(Stack.NLQ.value, description="Stack to read"),
    store: ConfigStore = Depends(get_config_store),
) -> Dict[str, str]:
    """
    Get the configuration of a stack with secrets masked.

    Secret-shaped values come back as ``****`` when set and ``''`` when not.
    """
    return mask_config(store.load(Stack.parse(stack)))


@router.post("/config")
async def save_config(
    config: Dict[str, Any] = Body(...),
    stack: str = Query(Stack.NLQ.value, description="Stack to write"),
    store: ConfigStore = Depends(get_config_store),
) -> dict:
    """
    Replace the configuration of a stack.

    The posted mapping becomes the whole file; keys not posted are removed.

    Raises:
        ConfigurationSaveError: If the file could not be written (500)
    """
    target = Stack.parse(stack)
    values = {key: None if value is None else str(value) for key, value in config.items()}
    if not store.save(target, values):
        raise ConfigurationSaveError(target.value)
    return {"success": True, "message": "Configuration saved"}
