"""Tests for the HTTP interface."""

import pytest
from fastapi.testclient import TestClient

from sashi.core.config_store import InMemoryConfigStore
from sashi.core.settings import SashiSettings
from sashi.server import SESSION_ID_HEADER, SESSION_TOKEN_HEADER, create_app, sign_session
from tests.shared.generators import StaticGenerator

SECRET = "test-secret"


def workflow(*actions: dict) -> dict:
    return {"type": "workflow", "actions": list(actions)}


@pytest.fixture
def client(registry) -> TestClient:
    app = create_app(registry, config_store=InMemoryConfigStore({"theme": "dark"}), name="acme-admin")
    return TestClient(app)


@pytest.fixture
def secured_client(registry) -> TestClient:
    return TestClient(create_app(registry, session_secret=SECRET))


def session_headers(session_id: str = "session-1", secret: str = SECRET) -> dict[str, str]:
    return {SESSION_ID_HEADER: session_id, SESSION_TOKEN_HEADER: sign_session(session_id, secret)}


class TestExecute:
    def test_success(self, client):
        response = client.post(
            "/workflow/execute",
            json={"workflow": workflow({"id": "sum", "tool": "add", "parameters": {"a": 1, "b": 2}})},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "results": [{"actionId": "sum", "result": 3}], "errors": []}

    def test_action_failures_still_answer_200(self, client):
        response = client.post(
            "/workflow/execute",
            json={
                "workflow": workflow(
                    {"id": "sum", "tool": "add", "parameters": {"a": 1, "b": "two"}},
                    {"id": "user", "tool": "get_user", "parameters": {"user_id": "userInput.id"}},
                ),
                "userInput": {"id": "5"},
            },
        )

        body = response.json()
        assert response.status_code == 200
        assert body["success"] is False
        assert body["results"][0]["actionId"] == "user"
        assert body["errors"][0]["kind"] == "TypeMismatch"

    def test_unknown_tool_is_400(self, client):
        response = client.post("/workflow/execute", json={"workflow": workflow({"id": "x", "tool": "nope"})})

        assert response.status_code == 400
        body = response.json()
        assert body["error"].startswith("UnknownTool: ")
        assert body["details"][0]["kind"] == "UnknownTool"
        assert body["details"][0]["actionId"] == "x"

    def test_malformed_document_is_400(self, client):
        response = client.post("/workflow/execute", json={"workflow": {"type": "workflow", "actions": []}})

        assert response.status_code == 400
        assert response.json()["error"].startswith("InvalidWorkflow: ")

    def test_malformed_body_is_400(self, client):
        response = client.post("/workflow/execute", json={"not_workflow": 1})

        assert response.status_code == 400
        assert response.json()["error"] == "Malformed request"

    def test_generator_is_used(self, registry):
        client = TestClient(create_app(registry, StaticGenerator(generated={"pick": "9"})))

        response = client.post(
            "/workflow/execute",
            json={"workflow": workflow({"id": "u", "tool": "get_user", "parameters": {"user_id": {"_generate": "pick"}}})},
        )

        assert response.json()["results"][0]["result"]["id"] == "9"

    def test_settings_timeout_applies(self, registry):
        import asyncio

        from sashi.core.param_spec import ParamSpec, ParamType

        @registry.function(parameters=[ParamSpec(name="seconds", type=ParamType.NUMBER)])
        async def sleep(seconds):
            await asyncio.sleep(seconds)

        settings = SashiSettings(runtime={"timeout_seconds": 0.05})
        client = TestClient(create_app(registry, settings=settings))

        response = client.post(
            "/workflow/execute", json={"workflow": workflow({"id": "s", "tool": "sleep", "parameters": {"seconds": 5}})}
        )

        assert response.json()["errors"][0]["kind"] == "ExecutionAborted"


class TestVerify:
    def test_verify_reports_without_running(self, client):
        response = client.post(
            "/workflow/verify",
            json={"workflow": workflow({"id": "x", "tool": "fail", "parameters": {"message": "never"}})},
        )

        assert response.status_code == 200
        assert response.json() == {"valid": True, "status": "ready", "errors": [], "warnings": []}

    def test_verify_disabled_status(self, client):
        response = client.post("/workflow/verify", json={"workflow": workflow({"id": "x", "tool": "gone"})})

        assert response.json()["status"] == "disabled"


class TestFunctionsAndMetadata:
    def test_sanity_check(self, client):
        response = client.get("/sanity-check")

        assert response.status_code == 200
        assert response.json()["message"] == "Sashi Middleware is running"

    def test_metadata(self, client):
        body = client.get("/metadata").json()

        assert body["name"] == "acme-admin"
        assert [entry["name"] for entry in body["functions"]] == ["add", "fail", "get_user", "scale"]

    def test_tool_feed(self, client):
        feed = client.get("/functions").json()

        assert feed[0] == {
            "name": "add",
            "description": "Add two numbers.",
            "parameters": {"a": {"type": "number"}, "b": {"type": "number"}},
            "required": ["a", "b"],
            "returns": {"type": "number"},
        }

    def test_toggle_active(self, client):
        response = client.get("/functions/fail/toggle_active")

        assert response.json() == {"name": "fail", "active": False}
        assert "fail" not in [entry["name"] for entry in client.get("/functions").json()]

    def test_toggle_unknown_is_404(self, client):
        response = client.get("/functions/nope/toggle_active")

        assert response.status_code == 404
        assert "not registered" in response.json()["error"]


class TestConfigs:
    def test_get_all(self, client):
        assert client.get("/configs").json() == {"theme": "dark"}

    def test_set_and_get(self, client):
        assert client.put("/configs/page_size", json={"value": 50}).status_code == 200

        assert client.get("/configs/page_size").json() == {"key": "page_size", "value": 50}

    def test_missing_is_404(self, client):
        assert client.get("/configs/none").status_code == 404


class TestSession:
    def test_missing_token_is_401(self, secured_client):
        response = secured_client.get("/functions")

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized: invalid or missing session token"}

    def test_wrong_token_is_401(self, secured_client):
        headers = session_headers(secret="other-secret")

        assert secured_client.get("/functions", headers=headers).status_code == 401

    def test_valid_token(self, secured_client):
        assert secured_client.get("/functions", headers=session_headers()).status_code == 200

    def test_sanity_check_is_public(self, secured_client):
        assert secured_client.get("/sanity-check").status_code == 200

    def test_secret_from_settings(self, registry):
        settings = SashiSettings(server={"session_secret": SECRET})
        client = TestClient(create_app(registry, settings=settings))

        assert client.get("/metadata").status_code == 401
        assert client.get("/metadata", headers=session_headers()).status_code == 200
