"""
docker-compose invocation for the deployment helper.
"""
import asyncio
import logging
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from nlq_dashboard.core.config import settings
from nlq_dashboard.services.config_store import ConfigStore, Stack
from nlq_dashboard.services.deployment.executor_base import DeploymentResult

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    return_code: int
    stdout: str
    stderr: str


class ComposeRunner:
    """
    Runs ``docker-compose -f <stack>/docker-compose.yml up -d``.

    Stack directories are located the same way the dashboard locates their
    configuration files, so both sides agree on where a stack lives.
    """

    def __init__(
        self,
        store: ConfigStore = None,
        compose_command: str = None,
        compose_file_name: str = None,
        timeout: float = None,
    ):
        self.store = store or ConfigStore()
        self.compose_command = shlex.split(compose_command or settings.COMPOSE_COMMAND)
        self.compose_file_name = compose_file_name or settings.COMPOSE_FILE_NAME
        self.timeout = timeout or settings.DEPLOYMENT_TIMEOUT_SECONDS

    def compose_path(self, stack: Stack) -> Path:
        return self.store.stack_dir(stack)

    def build_command(self, stack: Stack) -> List[str]:
        compose_file = self.compose_path(stack) / self.compose_file_name
        return [*self.compose_command, "-f", str(compose_file), "up", "-d"]

    async def _run_command(self, cmd: List[str], timeout: Optional[float] = None) -> CommandResult:
        """
        Run a command via subprocess.

        Returns:
            CommandResult; a timeout or launch failure yields return code -1
        """
        logger.info(f"Starting deployment: {' '.join(cmd)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error(f"Command failed to start: {e}")
            return CommandResult(-1, "", str(e))

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(),
                timeout=timeout or self.timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"Command timed out: {' '.join(cmd)}")
            process.kill()
            await process.wait()
            return CommandResult(-1, "", "Command timed out")

        return CommandResult(
            process.returncode,
            stdout.decode(errors="replace").strip() if stdout else "",
            stderr.decode(errors="replace").strip() if stderr else "",
        )

    async def deploy(self, stack: Stack) -> DeploymentResult:
        """Bring a stack up and report the outcome in the helper's wire shape."""
        stack = Stack(stack)
        compose_path = self.compose_path(stack)
        result = await self._run_command(self.build_command(stack))

        if result.return_code != 0:
            logger.error(f"Deployment of '{stack.value}' failed: {result.stderr}")
            return DeploymentResult.failed(
                stack.value,
                f"Deployment failed: exit code {result.return_code}",
                stderr=result.stderr,
                compose_path=str(compose_path),
            )

        logger.info(f"Deployment of '{stack.value}' completed")
        return DeploymentResult.succeeded(
            stack.value,
            stdout=result.stdout,
            message=f"{stack.value} system deployment initiated",
        )
