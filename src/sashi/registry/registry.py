"""Function registry for sashi.

The registry is an explicit object: application code constructs one at
startup, registers functions on it and hands it to the executor, the HTTP
app or the CLI. There is no module-level instance.
"""

import asyncio
import inspect
import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any, Optional

from sashi.core.exceptions import (
    ImplementationError,
    MissingRequiredParameterError,
    UnknownToolError,
    WorkflowRuntimeError,
)
from sashi.core.param_coercion import check_return_value, coerce_value
from sashi.core.param_spec import ParamSpec
from sashi.registry.tool_schema import describe_function
from sashi.registry.types import CallingConvention, FunctionDescriptor

logger = logging.getLogger(__name__)


class FunctionRegistry:
    """Maps function names to descriptors and invokes them with coerced arguments."""

    def __init__(self, validate_returns: bool = False):
        """Initialize an empty registry.

        Args:
            validate_returns: Check results against declared return specs on every call
        """
        self.validate_returns = validate_returns
        self._functions: dict[str, FunctionDescriptor] = {}
        self._inactive: set[str] = set()
        self._lock = threading.Lock()

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def __len__(self) -> int:
        return len(self._functions)

    def register(self, name: str, descriptor: FunctionDescriptor) -> None:
        """Insert or replace a function. Never validates, never fails."""
        if name in self._functions:
            logger.debug(f"Replacing registered function '{name}'")
        self._functions[name] = descriptor

    def function(
        self,
        name: Optional[str] = None,
        *,
        description: Optional[str] = None,
        parameters: Optional[list[ParamSpec]] = None,
        returns: Optional[ParamSpec] = None,
        calling_convention: CallingConvention = CallingConvention.POSITIONAL,
        hidden: bool = False,
        needs_confirmation: bool = False,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator registering the wrapped callable.

        The name defaults to the callable's ``__name__`` and the description to
        the first line of its docstring. The callable is returned unchanged.

        Example:
            >>> registry = FunctionRegistry()
            >>> @registry.function(parameters=[ParamSpec(name="a", type="number")])
            ... def double(a):
            ...     '''Double a number.'''
            ...     return a * 2
            >>> "double" in registry
            True
        """

        def decorator(implementation: Callable[..., Any]) -> Callable[..., Any]:
            function_name = name or implementation.__name__
            doc = inspect.getdoc(implementation) or ""
            self.register(
                function_name,
                FunctionDescriptor(
                    name=function_name,
                    description=description if description is not None else doc.split("\n")[0],
                    implementation=implementation,
                    parameters=list(parameters or []),
                    returns=returns,
                    calling_convention=calling_convention,
                    hidden=hidden,
                    needs_confirmation=needs_confirmation,
                ),
            )
            return implementation

        return decorator

    def lookup(self, name: str) -> Optional[FunctionDescriptor]:
        return self._functions.get(name)

    def names(self) -> list[str]:
        return sorted(self._functions)

    def _require(self, name: str) -> FunctionDescriptor:
        descriptor = self._functions.get(name)
        if descriptor is None:
            raise UnknownToolError(f"Function '{name}' is not registered")
        return descriptor

    # Description and metadata

    def describe(self, name: str) -> dict[str, Any]:
        """Return the tool schema for one function.

        Raises:
            UnknownToolError: If the function is not registered
        """
        return describe_function(name, self._require(name))

    def describe_all(self) -> list[dict[str, Any]]:
        """Return the tool-description feed: every active function, sorted by name."""
        return [describe_function(name, self._functions[name]) for name in self.names() if self.is_active(name)]

    def metadata(self) -> list[dict[str, Any]]:
        """Return UI metadata for visible functions."""
        return [
            {
                "name": name,
                "description": descriptor.description,
                "needsConfirmation": descriptor.needs_confirmation,
                "active": self.is_active(name),
            }
            for name, descriptor in sorted(self._functions.items())
            if not descriptor.hidden
        ]

    # Activation

    def is_active(self, name: str) -> bool:
        return name not in self._inactive

    def set_active(self, name: str, active: bool) -> None:
        self._require(name)
        with self._lock:
            if active:
                self._inactive.discard(name)
            else:
                self._inactive.add(name)
        logger.info(f"Function '{name}' is now {'active' if active else 'inactive'}")

    def toggle_active(self, name: str) -> bool:
        """Flip a function's active flag and return the new state."""
        self._require(name)
        with self._lock:
            active = name in self._inactive
            if active:
                self._inactive.discard(name)
            else:
                self._inactive.add(name)
        logger.info(f"Function '{name}' is now {'active' if active else 'inactive'}")
        return active

    # Search

    def search(self, query: str) -> list[tuple[str, FunctionDescriptor, int]]:
        """Search with multi-keyword support (AND logic).

        All space-separated keywords must match a function's name or
        description. Scores are averaged across keywords.

        Returns:
            List of (name, descriptor, avg_score) tuples, sorted by score descending
        """
        keywords = [k.strip().lower() for k in (query or "").split() if k.strip()]
        if not keywords:
            return []

        results = []
        for name, descriptor in self._functions.items():
            scores = []
            for keyword in keywords:
                score = self._calculate_keyword_score(keyword, name.lower(), descriptor.description.lower())
                if score == 0:
                    break
                scores.append(score)
            if len(scores) == len(keywords):
                results.append((name, descriptor, sum(scores) // len(scores)))

        results.sort(key=lambda x: (-x[2], x[0]))
        return results

    def _calculate_keyword_score(self, keyword: str, name_lower: str, desc_lower: str) -> int:
        """Score: 100 (exact), 90 (prefix), 70 (name contains), 50 (desc contains), 0 (no match)."""
        if name_lower == keyword:
            return 100
        elif name_lower.startswith(keyword):
            return 90
        elif keyword in name_lower:
            return 70
        elif keyword in desc_lower:
            return 50
        return 0

    # Invocation

    def prepare_arguments(self, descriptor: FunctionDescriptor, args: Optional[Mapping[str, Any]]) -> dict[str, Any]:
        """Coerce supplied arguments against the declared parameters.

        Absent and None values count as not supplied. Undeclared arguments are
        dropped.

        Returns:
            Coerced values keyed by parameter name, in declaration order

        Raises:
            MissingRequiredParameterError: A required parameter is not supplied
            TypeMismatchError: A value cannot be coerced
            InvalidEnumValueError: An enum value is not an exact member
        """
        supplied = dict(args or {})
        prepared: dict[str, Any] = {}

        for spec in descriptor.parameters:
            value = supplied.get(spec.name)
            if value is None:
                if spec.required:
                    raise MissingRequiredParameterError(
                        f"Missing required parameter '{spec.name}' for function '{descriptor.name}'",
                        parameter=spec.name,
                    )
                continue
            prepared[spec.name] = coerce_value(value, spec)

        extra = set(supplied) - {spec.name for spec in descriptor.parameters}
        if extra:
            logger.debug(
                f"Ignoring undeclared arguments for '{descriptor.name}': {sorted(extra)}",
                extra={"tool": descriptor.name},
            )
        return prepared

    def _call_implementation(self, descriptor: FunctionDescriptor, prepared: dict[str, Any]) -> Any:
        if descriptor.calling_convention == CallingConvention.KEYWORD:
            return descriptor.implementation(**prepared)

        # Omitted optionals in the middle become None, trailing ones are dropped
        names = [spec.name for spec in descriptor.parameters]
        supplied_positions = [i for i, param_name in enumerate(names) if param_name in prepared]
        last = supplied_positions[-1] + 1 if supplied_positions else 0
        positional = [prepared.get(param_name) for param_name in names[:last]]
        return descriptor.implementation(*positional)

    async def invoke(self, name: str, args: Optional[Mapping[str, Any]] = None) -> Any:
        """Look up, coerce, call and optionally validate a function.

        Args:
            name: Registered function name
            args: Raw arguments keyed by parameter name

        Returns:
            The implementation's result (awaited when the implementation is async)

        Raises:
            UnknownToolError: Function not registered
            WorkflowRuntimeError: Coercion, validation or implementation failure
        """
        descriptor = self._require(name)
        prepared = self.prepare_arguments(descriptor, args)

        logger.debug(f"Invoking '{name}'", extra={"tool": name, "arguments": list(prepared)})
        try:
            if descriptor.is_async:
                result = self._call_implementation(descriptor, prepared)
            else:
                # Sync implementations never run on the event loop thread
                result = await asyncio.to_thread(self._call_implementation, descriptor, prepared)
            if inspect.isawaitable(result):
                result = await result
        except WorkflowRuntimeError:
            raise
        except Exception as e:
            raise ImplementationError.wrap(e) from e

        if self.validate_returns and descriptor.returns is not None:
            check_return_value(result, descriptor.returns, name)
        return result

    def invoke_sync(self, name: str, args: Optional[Mapping[str, Any]] = None) -> Any:
        """Blocking wrapper around ``invoke`` for code without an event loop."""
        return asyncio.run(self.invoke(name, args))
