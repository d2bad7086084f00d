"""Tests for FunctionRegistry registration, activation and invocation."""

import asyncio

import pytest

from sashi.core.exceptions import (
    ImplementationError,
    MissingRequiredParameterError,
    ReturnTypeMismatchError,
    TypeMismatchError,
    UnknownToolError,
)
from sashi.core.param_spec import ParamSpec, ParamType
from sashi.registry import CallingConvention, FunctionDescriptor, FunctionRegistry


def descriptor(name: str = "echo", implementation=None, **kwargs) -> FunctionDescriptor:
    return FunctionDescriptor(
        name=name,
        description=kwargs.pop("description", "Echo"),
        implementation=implementation or (lambda *args, **kw: (args, kw)),
        **kwargs,
    )


class TestRegistration:
    def test_decorator_uses_name_and_first_docstring_line(self, registry):
        found = registry.lookup("add")

        assert found is not None
        assert found.description == "Add two numbers."
        assert [spec.name for spec in found.parameters] == ["a", "b"]

    def test_decorator_returns_function_unchanged(self):
        reg = FunctionRegistry()

        @reg.function(name="triple", description="x3")
        def impl(value):
            return value * 3

        assert impl(2) == 6
        assert reg.lookup("triple").description == "x3"

    def test_last_registration_wins(self):
        reg = FunctionRegistry()
        reg.register("echo", descriptor(description="first"))
        reg.register("echo", descriptor(description="second"))

        assert len(reg) == 1
        assert reg.lookup("echo").description == "second"

    def test_names_sorted(self, registry):
        assert registry.names() == ["add", "fail", "get_user", "scale"]
        assert "add" in registry
        assert "missing" not in registry

    def test_describe_unknown(self, registry):
        with pytest.raises(UnknownToolError):
            registry.describe("missing")


class TestActivation:
    def test_toggle_flips_state(self, registry):
        assert registry.toggle_active("add") is False
        assert not registry.is_active("add")
        assert registry.toggle_active("add") is True

    def test_inactive_functions_leave_the_tool_feed(self, registry):
        registry.set_active("fail", False)

        assert "fail" not in [entry["name"] for entry in registry.describe_all()]
        assert {"name": "fail", "active": False}.items() <= next(
            entry for entry in registry.metadata() if entry["name"] == "fail"
        ).items()

    def test_toggle_unknown(self, registry):
        with pytest.raises(UnknownToolError):
            registry.toggle_active("missing")

    def test_hidden_functions_stay_in_feed_but_not_metadata(self):
        reg = FunctionRegistry()
        reg.register("internal", descriptor("internal", hidden=True))
        reg.register("public", descriptor("public", needs_confirmation=True))

        assert [entry["name"] for entry in reg.describe_all()] == ["internal", "public"]
        assert reg.metadata() == [
            {"name": "public", "description": "Echo", "needsConfirmation": True, "active": True}
        ]


class TestPrepareArguments:
    def test_coerces_and_drops_undeclared(self, registry):
        prepared = registry.prepare_arguments(registry.lookup("add"), {"a": "1", "b": 2, "extra": True})

        assert prepared == {"a": 1, "b": 2}

    def test_none_counts_as_missing(self, registry):
        with pytest.raises(MissingRequiredParameterError) as exc_info:
            registry.prepare_arguments(registry.lookup("add"), {"a": 1, "b": None})

        assert exc_info.value.parameter == "b"

    def test_type_mismatch(self, registry):
        with pytest.raises(TypeMismatchError):
            registry.prepare_arguments(registry.lookup("add"), {"a": 1, "b": "two"})


class TestInvoke:
    def test_invoke_sync(self, registry):
        assert registry.invoke_sync("add", {"a": "1", "b": "2"}) == 3

    def test_optional_trailing_parameter_is_dropped(self, registry):
        assert registry.invoke_sync("scale", {"value": 4}) == 8
        assert registry.invoke_sync("scale", {"value": 4, "factor": 3}) == 12

    def test_positional_fills_middle_optionals_with_none(self):
        reg = FunctionRegistry()
        reg.register(
            "join",
            descriptor(
                "join",
                implementation=lambda a, sep, b: f"{a}{sep or '-'}{b}",
                parameters=[
                    ParamSpec(name="a", type=ParamType.STRING),
                    ParamSpec(name="sep", type=ParamType.STRING, required=False),
                    ParamSpec(name="b", type=ParamType.STRING),
                ],
            ),
        )

        assert reg.invoke_sync("join", {"a": "x", "b": "y"}) == "x-y"

    def test_keyword_convention(self):
        reg = FunctionRegistry()
        reg.register(
            "kw",
            descriptor(
                "kw",
                implementation=lambda **kwargs: kwargs,
                parameters=[
                    ParamSpec(name="a", type=ParamType.NUMBER),
                    ParamSpec(name="b", type=ParamType.NUMBER, required=False),
                ],
                calling_convention=CallingConvention.KEYWORD,
            ),
        )

        assert reg.invoke_sync("kw", {"a": "5"}) == {"a": 5}

    def test_async_implementation_is_awaited(self):
        reg = FunctionRegistry()

        @reg.function(parameters=[ParamSpec(name="value", type=ParamType.NUMBER)])
        async def slow_double(value):
            await asyncio.sleep(0)
            return value * 2

        assert reg.lookup("slow_double").is_async
        assert asyncio.run(reg.invoke("slow_double", {"value": 21})) == 42

    def test_implementation_errors_are_wrapped(self, registry):
        with pytest.raises(ImplementationError) as exc_info:
            registry.invoke_sync("fail", {"message": "boom"})

        error = exc_info.value
        assert error.describe() == "ImplementationError: RuntimeError: boom"
        assert isinstance(error.original_error, RuntimeError)

    def test_unknown_function(self, registry):
        with pytest.raises(UnknownToolError):
            registry.invoke_sync("missing", {})

    def test_return_validation_when_enabled(self):
        reg = FunctionRegistry(validate_returns=True)

        @reg.function(returns=ParamSpec(name="result", type=ParamType.NUMBER))
        def broken():
            return "not a number"

        with pytest.raises(ReturnTypeMismatchError):
            reg.invoke_sync("broken")

    def test_return_validation_off_by_default(self):
        reg = FunctionRegistry()

        @reg.function(returns=ParamSpec(name="result", type=ParamType.NUMBER))
        def broken():
            return "not a number"

        assert reg.invoke_sync("broken") == "not a number"
