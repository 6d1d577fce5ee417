"""
API endpoint for installation status.
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from nlq_dashboard.api.deps import get_config_store
from nlq_dashboard.schemas.install import InstallationStatus
from nlq_dashboard.services.config_store import ConfigStore, Stack
from nlq_dashboard.services.installation_service import (
    API_KEY,
    has_passwords,
    is_installed,
)

router = APIRouter()


@router.get("/status", response_model=InstallationStatus)
async def get_status(
    store: ConfigStore = Depends(get_config_store),
) -> InstallationStatus:
    """
    Report whether the platform has been configured.

    ``installed`` requires a non-placeholder API key and both database
    passwords; ``hasApiKey`` only reports that some key is present.
    """
    config = store.load(Stack.NLQ)
    return InstallationStatus(
        installed=is_installed(config),
        hasApiKey=bool(config.get(API_KEY)),
        hasPasswords=has_passwords(config),
        timestamp=datetime.now(timezone.utc),
    )
