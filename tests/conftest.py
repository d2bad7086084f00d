"""Root-level test configuration and fixtures."""

import pytest

from sashi.core.param_spec import ParamSpec, ParamType
from sashi.registry import FunctionRegistry
from tests.shared.llm_mock import create_mock_get_model


@pytest.fixture(autouse=True, scope="function")
def mock_llm_calls(monkeypatch, request):
    """Auto-applied fixture that mocks all LLM calls to prevent API usage."""
    mock_get_model = create_mock_get_model()
    monkeypatch.setattr("llm.get_model", mock_get_model)

    # Make the mock available to tests that want to configure it
    request.node.mock_llm = mock_get_model

    yield mock_get_model

    mock_get_model.reset()


@pytest.fixture
def mock_llm_responses(request):
    """Configure LLM mock responses for a test.

    Usage:
        def test_something(mock_llm_responses):
            mock_llm_responses.set_response('{"total": 3}')
    """
    return request.node.mock_llm


@pytest.fixture(autouse=True, scope="function")
def isolate_sashi_config(tmp_path, monkeypatch):
    """Keep tests away from the user's ~/.sashi directory and SASHI_* overrides."""
    monkeypatch.setenv("HOME", str(tmp_path))
    for name in ("SASHI_TIMEOUT_SECONDS", "SASHI_VALIDATE_RETURNS", "SASHI_LLM_MODEL", "SASHI_SESSION_SECRET"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path / ".sashi"


@pytest.fixture
def registry() -> FunctionRegistry:
    """Registry with a few small admin-style functions used across tests."""
    reg = FunctionRegistry()
    number = ParamType.NUMBER

    @reg.function(
        parameters=[ParamSpec(name="a", type=number), ParamSpec(name="b", type=number)],
        returns=ParamSpec(name="result", type=number),
    )
    def add(a, b):
        """Add two numbers."""
        return a + b

    @reg.function(
        parameters=[ParamSpec(name="value", type=number), ParamSpec(name="factor", type=number, required=False)],
        returns=ParamSpec(name="result", type=number),
    )
    def scale(value, factor=None):
        """Multiply a value by a factor (default 2)."""
        return value * (2 if factor is None else factor)

    @reg.function(parameters=[ParamSpec(name="user_id", type=ParamType.STRING)])
    def get_user(user_id):
        """Look up a user record by id."""
        return {"id": user_id, "name": f"user-{user_id}", "tags": ["admin", "ops"]}

    @reg.function(parameters=[ParamSpec(name="message", type=ParamType.STRING)])
    def fail(message):
        """Always raise."""
        raise RuntimeError(message)

    return reg
