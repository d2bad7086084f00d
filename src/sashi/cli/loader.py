"""Load a user function registry from a ``module:attribute`` reference."""

import importlib
import logging
from typing import Optional

from sashi.functions import register_builtin_functions
from sashi.registry import FunctionRegistry

logger = logging.getLogger(__name__)


class RegistryLoadError(Exception):
    """The ``--functions`` reference could not be turned into a registry."""


def load_registry(reference: Optional[str] = None) -> FunctionRegistry:
    """Build the registry the CLI runs workflows against.

    ``reference`` names either a ``FunctionRegistry`` instance or a callable
    returning one, e.g. ``myapp.admin:registry`` or ``myapp.admin:build_registry``.
    Built-in functions are always registered first, so user functions with the
    same name win.

    Raises:
        RegistryLoadError: Bad reference, import failure, or wrong object type
    """
    registry = FunctionRegistry()
    register_builtin_functions(registry)
    if not reference:
        return registry

    module_name, sep, attr = reference.partition(":")
    if not sep or not module_name or not attr:
        raise RegistryLoadError(f"Expected 'module:attribute', got '{reference}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise RegistryLoadError(f"Cannot import module '{module_name}': {e}") from e

    target = getattr(module, attr, None)
    if target is None:
        raise RegistryLoadError(f"Module '{module_name}' has no attribute '{attr}'")
    if not isinstance(target, FunctionRegistry) and callable(target):
        try:
            target = target()
        except Exception as e:
            raise RegistryLoadError(f"Calling '{reference}' failed: {type(e).__name__}: {e}") from e
    if not isinstance(target, FunctionRegistry):
        raise RegistryLoadError(f"'{reference}' is not a FunctionRegistry (got {type(target).__name__})")

    for name in target.names():
        descriptor = target.lookup(name)
        if descriptor is not None:
            registry.register(name, descriptor)
            if not target.is_active(name):
                registry.set_active(name, False)
    registry.validate_returns = target.validate_returns
    logger.info(f"Loaded {len(target)} functions from {reference}")
    return registry
