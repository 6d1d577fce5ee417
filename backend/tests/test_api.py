"""
Tests for the dashboard HTTP API.

The application is built with a temporary configuration directory, a fake
port prober and a fake deployment client, so no request leaves the process.

Run with: pytest backend/tests/test_api.py -v
"""
import socket
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from nlq_dashboard.services.config_store import Stack
from nlq_dashboard.services.installation_service import MASK

INSTALL_PAYLOAD = {
    "apiKey": "sk-live-key",
    "openwebuiPassword": "webui-pw",
    "mcpdbPassword": "mcp-pw",
    "litellmKey": "lite-key",
    "webuiSecret": "web-secret",
    "includeMigration": False,
}


class TestHealthAndStatus:
    """Tests for /health and /api/status."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert "timestamp" in body

    def test_status_without_configuration(self, client):
        body = client.get("/api/status").json()
        assert body["installed"] is False
        assert body["hasApiKey"] is False
        assert body["hasPasswords"] is False
        assert "timestamp" in body

    def test_placeholder_key_is_not_installed(self, client, config_store):
        config_store.save(Stack.NLQ, {
            "ANTHROPIC_API_KEY": "sk-ant-api03-real",
            "OPENWEBUI_DB_PASSWORD": "x",
            "MCPDB_PASSWORD": "y",
        })
        body = client.get("/api/status").json()
        assert body["installed"] is False
        assert body["hasApiKey"] is True
        assert body["hasPasswords"] is True

        config_store.save(Stack.NLQ, {
            "ANTHROPIC_API_KEY": "sk-live-real",
            "OPENWEBUI_DB_PASSWORD": "x",
            "MCPDB_PASSWORD": "y",
        })
        assert client.get("/api/status").json()["installed"] is True


class TestConfigEndpoints:
    """Tests for /api/config."""

    def test_get_masks_secrets(self, client, config_store):
        secrets = {
            "ANTHROPIC_API_KEY": "sk-live-key",
            "OPENWEBUI_DB_PASSWORD": "pw1",
            "MCPDB_PASSWORD": "pw2",
            "LITELLM_MASTER_KEY": "master",
            "WEBUI_SECRET_KEY": "secret",
        }
        config_store.save(Stack.NLQ, {**secrets, "MCP_VERSION": "v2.0.0"})

        body = client.get("/api/config").json()

        for key in secrets:
            assert body[key] == MASK
        for value in secrets.values():
            assert value not in body.values()
        assert body["MCP_VERSION"] == "v2.0.0"

    def test_get_omits_unlisted_keys(self, client, config_store):
        config_store.save(Stack.NLQ, {"DATABASE_URL": "postgres://u:hunter2@db/x"})

        response = client.get("/api/config")

        assert "DATABASE_URL" not in response.json()
        assert "hunter2" not in response.text

    def test_get_without_configuration(self, client):
        body = client.get("/api/config").json()
        assert body["ANTHROPIC_API_KEY"] == ""
        assert body["MCP_REGISTRY"] == "rfinancials/mydocker-repo"

    def test_post_replaces_configuration(self, client, config_store):
        config_store.save(Stack.NLQ, {"OLD": "1"})

        response = client.post("/api/config", json={"MCP_VERSION": "v3", "MCP_PORT": 8100})

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert config_store.load(Stack.NLQ) == {"MCP_VERSION": "v3", "MCP_PORT": "8100"}

    def test_post_to_migration_stack(self, client, config_store):
        response = client.post("/api/config?stack=migration", json={"MIGRATION_DB_PASSWORD": "m"})
        assert response.status_code == 200
        assert config_store.load(Stack.MIGRATION) == {"MIGRATION_DB_PASSWORD": "m"}

    def test_unknown_stack_is_rejected(self, client):
        response = client.get("/api/config?stack=billing")
        assert response.status_code == 400
        assert response.json()["error"] == "Unknown stack: billing"

    def test_save_failure_returns_500(self, make_app, config_store, monkeypatch):
        monkeypatch.setattr(config_store, "save", lambda stack, config: False)
        with TestClient(make_app()) as client:
            response = client.post("/api/config", json={"A": "1"})
        assert response.status_code == 500
        assert response.json()["error"] == "Failed to save configuration"


class TestServiceEndpoints:
    """Tests for /api/services."""

    def test_status_uses_health_checker(self, make_app):
        checker = AsyncMock()
        checker.get_status.return_value = {"openwebui": {"port": 3000, "healthy": True}}
        with TestClient(make_app(health_checker=checker)) as client:
            response = client.get("/api/services/status")
        assert response.status_code == 200
        assert response.json() == {"openwebui": {"port": 3000, "healthy": True}}

    def test_restart_placeholder(self, client):
        body = client.post("/api/services/mcp/restart").json()
        assert body == {"success": True, "message": "Service mcp restart initiated", "service": "mcp"}

    def test_logs_placeholder(self, client):
        body = client.get("/api/services/litellm/logs").json()
        assert body["service"] == "litellm"
        assert "logs" in body


class TestDeploymentPort:
    """Tests for /api/deployment-port."""

    def test_default_port_available(self, client):
        body = client.get("/api/deployment-port").json()
        assert body == {
            "available": True,
            "port": 3002,
            "host": "helper.test",
            "url": "http://helper.test:3002",
        }

    def test_default_port_occupied_suggests_alternatives(self, client, occupied_ports):
        occupied_ports.update({3002, 3004})
        body = client.get("/api/deployment-port").json()
        assert body["available"] is False
        assert body["alternatives"] == [3003, 3005, 3006, 3007]
        assert "url" not in body

    def test_alternatives_limited_to_five(self, client, occupied_ports):
        occupied_ports.add(3002)
        body = client.get("/api/deployment-port").json()
        assert body["alternatives"] == [3003, 3004, 3005, 3006, 3007]

    def test_real_listener_makes_port_unavailable(self, make_app):
        from nlq_dashboard.services.deployment.port_allocator import PortAllocator

        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as listener:
            listener.bind(("127.0.0.1", 0))
            listener.listen(1)
            port = listener.getsockname()[1]
            app = make_app(
                port_allocator=PortAllocator(),
                settings={"DEPLOYMENT_SERVICE_PORT": port},
            )
            with TestClient(app) as client:
                body = client.get("/api/deployment-port").json()

        assert body["available"] is False
        assert len(body["alternatives"]) <= 5
        assert all(port < alt <= port + 5 for alt in body["alternatives"])

    def test_set_port(self, client):
        response = client.post("/api/deployment-port", json={"port": 3010})
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "port": 3010,
            "host": "helper.test",
            "url": "http://helper.test:3010",
        }
        assert client.app.state.deployment_context.port == 3010

    @pytest.mark.parametrize("payload", [{"port": 0}, {"port": 70000}, {"port": "abc"}, {}])
    def test_set_invalid_port(self, client, payload):
        response = client.post("/api/deployment-port", json=payload)
        assert response.status_code == 400
        assert "error" in response.json()
        assert client.app.state.deployment_context.negotiated_port is None

    def test_set_occupied_port(self, client, occupied_ports):
        occupied_ports.add(3010)
        response = client.post("/api/deployment-port", json={"port": 3010})
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Port 3010 is already in use"
        assert body["alternatives"] == [3011, 3012, 3013, 3014, 3015]


class TestInstall:
    """Tests for /api/install."""

    def test_install_primary_stack_only(self, client, config_store, fake_deployment_client):
        response = client.post("/api/install", json=INSTALL_PAYLOAD)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert len(body["deployments"]) == 1

        assert config_store.load(Stack.NLQ) == {
            "ANTHROPIC_API_KEY": "sk-live-key",
            "OPENWEBUI_DB_PASSWORD": "webui-pw",
            "MCPDB_PASSWORD": "mcp-pw",
            "LITELLM_MASTER_KEY": "lite-key",
            "WEBUI_SECRET_KEY": "web-secret",
            "MCP_REGISTRY": "rfinancials/mydocker-repo",
            "MCP_VERSION": "v1.0.0",
        }
        assert not config_store.env_path(Stack.MIGRATION).exists()

        tasks = client.app.state.task_runner.list_tasks()
        assert [task.system for task in tasks] == ["nlq"]
        assert tasks[0].port == 3002

    def test_install_with_migration(self, client, config_store):
        payload = {**INSTALL_PAYLOAD, "includeMigration": True, "registry": "acme/repo", "version": "v9"}
        response = client.post("/api/install", json=payload)

        assert response.status_code == 200
        assert len(response.json()["deployments"]) == 2
        assert config_store.load(Stack.MIGRATION) == {"MIGRATION_DB_PASSWORD": "mcp-pw"}
        assert config_store.load(Stack.NLQ)["MCP_REGISTRY"] == "acme/repo"
        assert config_store.load(Stack.NLQ)["MCP_VERSION"] == "v9"
        systems = sorted(task.system for task in client.app.state.task_runner.list_tasks())
        assert systems == ["migration", "nlq"]

    def test_install_uses_migration_password(self, client, config_store):
        payload = {**INSTALL_PAYLOAD, "includeMigration": True, "migrationPassword": "mig-pw"}
        client.post("/api/install", json=payload)
        assert config_store.load(Stack.MIGRATION) == {"MIGRATION_DB_PASSWORD": "mig-pw"}

    def test_install_negotiates_deployment_port(self, client):
        client.post("/api/install", json={**INSTALL_PAYLOAD, "deploymentServicePort": 3020})
        task = client.app.state.task_runner.list_tasks()[0]
        assert task.port == 3020

    def test_install_uses_previously_negotiated_port(self, client):
        client.post("/api/deployment-port", json={"port": 3011})
        client.post("/api/install", json=INSTALL_PAYLOAD)
        assert client.app.state.task_runner.list_tasks()[0].port == 3011

    def test_install_rejects_invalid_port(self, client, config_store):
        response = client.post("/api/install", json={**INSTALL_PAYLOAD, "deploymentServicePort": 99999})
        assert response.status_code == 400
        assert config_store.load(Stack.NLQ) == {}

    def test_install_requires_credentials(self, client):
        response = client.post("/api/install", json={"includeMigration": False})
        assert response.status_code == 400

    def test_install_then_status_is_installed(self, client):
        client.post("/api/install", json=INSTALL_PAYLOAD)
        assert client.get("/api/status").json()["installed"] is True


class TestDeploymentTasks:
    """Tests for /api/deployments."""

    def test_unknown_task(self, client):
        response = client.get("/api/deployments/does-not-exist")
        assert response.status_code == 404
        assert response.json()["error"] == "Deployment task not found: does-not-exist"

    def test_task_visible_after_install(self, client):
        task_id = client.post("/api/install", json=INSTALL_PAYLOAD).json()["deployments"][0]

        response = client.get(f"/api/deployments/{task_id}")
        assert response.status_code == 200
        assert response.json()["system"] == "nlq"

        listed = client.get("/api/deployments").json()
        assert [task["id"] for task in listed] == [task_id]


class TestErrorsAndUi:
    """Tests for unhandled errors and the single-page app fallback."""

    def test_unhandled_error_returns_500_with_message(self, make_app, config_store, monkeypatch):
        def broken_load(stack=Stack.NLQ):
            raise RuntimeError("disk on fire")

        app = make_app()
        monkeypatch.setattr(config_store, "load", broken_load)
        client = TestClient(app, raise_server_exceptions=False)
        response = client.get("/api/status")
        assert response.status_code == 500
        assert response.json() == {"error": "disk on fire"}

    def test_spa_fallback_serves_index(self, client, tmp_path):
        dist = tmp_path / "dist"
        dist.mkdir()
        (dist / "index.html").write_text("<html>dashboard</html>")
        (dist / "app.js").write_text("console.log('hi')")

        assert "dashboard" in client.get("/").text
        assert "dashboard" in client.get("/setup/step-2").text
        assert "console.log" in client.get("/app.js").text

    def test_spa_missing_build(self, client):
        response = client.get("/anything")
        assert response.status_code == 404
        assert "error" in response.json()
