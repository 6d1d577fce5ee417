"""
Installation state derived from the nlq stack configuration.
"""
from typing import Dict, Mapping, Optional

from nlq_dashboard.core.config import settings

API_KEY = "ANTHROPIC_API_KEY"
OPENWEBUI_DB_PASSWORD = "OPENWEBUI_DB_PASSWORD"
MCPDB_PASSWORD = "MCPDB_PASSWORD"
LITELLM_MASTER_KEY = "LITELLM_MASTER_KEY"
WEBUI_SECRET_KEY = "WEBUI_SECRET_KEY"
MIGRATION_DB_PASSWORD = "MIGRATION_DB_PASSWORD"

# The example key shipped with the stack templates starts with this prefix;
# a key still containing it was never replaced by the operator.
API_KEY_PLACEHOLDER = "sk-ant-api03"

MASK = "****"

SECRET_KEYS = (
    API_KEY,
    OPENWEBUI_DB_PASSWORD,
    MCPDB_PASSWORD,
    LITELLM_MASTER_KEY,
    WEBUI_SECRET_KEY,
)

# Reported only when the stack configuration defines them
OPTIONAL_SECRET_KEYS = (
    MIGRATION_DB_PASSWORD,
)


def public_defaults() -> Dict[str, str]:
    """Non-secret keys always reported by the config endpoint, with their defaults."""
    return {
        "OPENWEBUI_PORT": "3000",     # OpenWebUI web interface
        "MCP_PORT": "8000",           # Custom MCP Server
        "LITELLM_PORT": "4000",       # LiteLLM API proxy
        "MIGRATION_UI_PORT": "8080",  # Migration UI web interface
        "MCP_REGISTRY": settings.DEFAULT_MCP_REGISTRY,
        "MCP_VERSION": settings.DEFAULT_MCP_VERSION,
    }


def has_real_api_key(config: Mapping[str, str]) -> bool:
    key = config.get(API_KEY)
    return bool(key) and API_KEY_PLACEHOLDER not in key


def has_passwords(config: Mapping[str, str]) -> bool:
    return bool(config.get(OPENWEBUI_DB_PASSWORD)) and bool(config.get(MCPDB_PASSWORD))


def is_installed(config: Mapping[str, str]) -> bool:
    """The platform counts as installed once a real API key and both database passwords are set."""
    return has_real_api_key(config) and has_passwords(config)


def mask_config(config: Mapping[str, Optional[str]]) -> Dict[str, str]:
    """
    Build the configuration view returned to the browser.

    Only a fixed set of keys is reported. Secrets are replaced by a fixed
    mask when set and by an empty string when absent; public keys fall back
    to their defaults. Keys outside this set are never reported.
    """
    safe: Dict[str, str] = {
        key: MASK if config.get(key) else ""
        for key in SECRET_KEYS
    }
    for key in OPTIONAL_SECRET_KEYS:
        if key in config:
            safe[key] = MASK if config[key] else ""
    for key, default in public_defaults().items():
        safe[key] = config.get(key) or default
    return safe
