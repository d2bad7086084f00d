"""Built-in utility functions.

Registered as hidden: planners can call them, but they stay out of the UI
metadata listing.
"""

import logging

from sashi.functions import arithmetic, data, text
from sashi.registry import FunctionRegistry

logger = logging.getLogger(__name__)


def register_builtin_functions(registry: FunctionRegistry, hidden: bool = True) -> None:
    """Register the arithmetic, text and data helpers on ``registry``."""
    count = 0
    for module in (arithmetic, text, data):
        for descriptor in module.descriptors():
            descriptor.hidden = hidden
            registry.register(descriptor.name, descriptor)
            count += 1
    logger.debug(f"Registered {count} built-in functions")


__all__ = ["register_builtin_functions"]
