"""
Configuration store for stack ``.env`` files.

Each stack keeps its environment in a flat ``KEY=VALUE`` file next to its
docker-compose definition. The container layout (``/app/<stack>-system``)
is preferred; when it does not exist the working directory is used, so the
same code runs inside the dashboard container and on a developer machine.
"""
import logging
import os
from enum import Enum
from pathlib import Path
from typing import Dict, Mapping, Optional

from nlq_dashboard.core.config import settings
from nlq_dashboard.core.events import ConfigurationSavedEvent, event_dispatcher
from nlq_dashboard.core.exceptions import UnknownStackError

logger = logging.getLogger(__name__)

ENV_FILE_NAME = ".env"


class Stack(str, Enum):
    """Deployable group of containers with its own configuration and compose file."""
    NLQ = "nlq"
    MIGRATION = "migration"

    @property
    def directory_name(self) -> str:
        return f"{self.value}-system"

    @classmethod
    def parse(cls, name: str) -> "Stack":
        """Look up a stack by name, raising UnknownStackError for anything else."""
        try:
            return cls(name)
        except ValueError:
            raise UnknownStackError(name) from None


def parse_env(content: str) -> Dict[str, str]:
    """
    Parse ``KEY=VALUE`` lines.

    Blank lines and ``#`` comments are skipped, the first ``=`` separates key
    from value, both sides are trimmed and later duplicates win.
    """
    config: Dict[str, str] = {}
    for line in content.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        key, _, value = stripped.partition("=")
        key = key.strip()
        if key:
            config[key] = value.strip()
    return config


def render_env(config: Mapping[str, Optional[str]]) -> str:
    """Render a mapping as ``KEY=VALUE`` lines. ``None`` becomes an empty value."""
    return "".join(
        f"{key}={'' if value is None else value}\n"
        for key, value in config.items()
    )


class ConfigStore:
    """
    Reads and writes per-stack configuration files.

    Neither operation raises on I/O problems: ``load`` returns an empty
    mapping and ``save`` returns False, both after logging the cause.
    """

    def __init__(
        self,
        container_root: str = None,
        local_root: str = None,
    ):
        """
        Initialize the store.

        Args:
            container_root: Root holding stack directories inside the container
            local_root: Fallback root used when the container root lacks the stack
        """
        self.container_root = Path(container_root or settings.CONFIG_CONTAINER_ROOT)
        self.local_root = Path(local_root or settings.CONFIG_LOCAL_ROOT)

    def stack_dir(self, stack: Stack) -> Path:
        """Resolve the directory of a stack, preferring the container layout."""
        stack = Stack(stack)
        container_dir = self.container_root / stack.directory_name
        if container_dir.exists():
            return container_dir
        return self.local_root / stack.directory_name

    def env_path(self, stack: Stack) -> Path:
        return self.stack_dir(stack) / ENV_FILE_NAME

    def load(self, stack: Stack = Stack.NLQ) -> Dict[str, str]:
        """
        Load the configuration of a stack.

        Returns:
            Mapping of keys to values, empty when the file is missing or unreadable
        """
        path = self.env_path(stack)
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info(f"Config not found yet: {path}")
            return {}
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read config {path}: {e}")
            return {}
        return parse_env(content)

    def save(self, stack: Stack, config: Mapping[str, Optional[str]]) -> bool:
        """
        Replace the configuration file of a stack.

        Existing keys missing from ``config`` are dropped; nothing is merged.

        Returns:
            True if the file was written, False otherwise
        """
        stack = Stack(stack)
        path = self.env_path(stack)
        try:
            os.makedirs(path.parent, exist_ok=True)
            path.write_text(render_env(config), encoding="utf-8")
        except OSError as e:
            logger.error(f"Error saving config to {path}: {e}")
            return False

        event_dispatcher.dispatch(ConfigurationSavedEvent(
            stack=stack.value,
            path=str(path),
            keys=list(config.keys()),
        ))
        return True


# Singleton instance
config_store = ConfigStore()
