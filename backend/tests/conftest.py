"""
Pytest configuration and fixtures for backend tests.

This file is automatically loaded by pytest before running tests.
It sets up necessary environment variables and common fixtures.
"""
import os
from typing import List, Optional, Tuple

import pytest

# Set environment variables BEFORE any package imports
# These keep the Settings defaults away from the real container layout
os.environ.setdefault("CONFIG_CONTAINER_ROOT", "/nonexistent/nlq-dashboard-test-root")
os.environ.setdefault("LOG_LEVEL", "debug")
os.environ.pop("RUNNING_IN_COMPOSE", None)


class FakeDeploymentClient:
    """Records deployment requests and answers with a canned result."""

    def __init__(self, result=None):
        self.calls: List[Tuple[str, Optional[int]]] = []
        self.result = result

    async def deploy(self, system: str, port: Optional[int] = None):
        from nlq_dashboard.services.deployment.executor_base import DeploymentResult

        self.calls.append((system, port))
        return self.result or DeploymentResult.succeeded(system, stdout="done")


@pytest.fixture
def config_store(tmp_path):
    """Config store rooted in a temporary directory (container root absent)."""
    from nlq_dashboard.services.config_store import ConfigStore

    return ConfigStore(
        container_root=str(tmp_path / "container"),
        local_root=str(tmp_path / "local"),
    )


@pytest.fixture
def event_dispatcher(monkeypatch):
    """Fresh dispatcher in place of the global one for the publishing services."""
    from nlq_dashboard.core.events import EventDispatcher
    from nlq_dashboard.services import config_store as config_store_module
    from nlq_dashboard.services.deployment import task_runner as task_runner_module

    dispatcher = EventDispatcher()
    monkeypatch.setattr(config_store_module, "event_dispatcher", dispatcher)
    monkeypatch.setattr(task_runner_module, "event_dispatcher", dispatcher)
    return dispatcher


@pytest.fixture
def fake_deployment_client():
    return FakeDeploymentClient()


@pytest.fixture
def occupied_ports():
    """Mutable set of ports the fake prober reports as in use."""
    return set()


@pytest.fixture
def fake_port_allocator(occupied_ports):
    from nlq_dashboard.services.deployment.port_allocator import PortAllocator

    return PortAllocator(probe=lambda port, host: port not in occupied_ports)


@pytest.fixture
def make_app(tmp_path, config_store, fake_deployment_client, fake_port_allocator):
    """Factory building an isolated dashboard app; keyword arguments override collaborators."""
    from nlq_dashboard.core.config import Settings
    from nlq_dashboard.main import create_app

    def factory(**overrides):
        settings_overrides = overrides.pop("settings", {})
        app_settings = Settings(
            CONFIG_CONTAINER_ROOT=str(tmp_path / "container"),
            CONFIG_LOCAL_ROOT=str(tmp_path / "local"),
            UI_DIST_DIR=str(tmp_path / "dist"),
            **settings_overrides,
        )
        kwargs = {
            "config_store": config_store,
            "deployment_client": fake_deployment_client,
            "port_allocator": fake_port_allocator,
            "host_resolver": lambda: "helper.test",
        }
        kwargs.update(overrides)
        return create_app(app_settings, **kwargs)

    return factory


@pytest.fixture
def client(make_app):
    """TestClient with the application lifespan running."""
    from fastapi.testclient import TestClient

    with TestClient(make_app()) as test_client:
        yield test_client
