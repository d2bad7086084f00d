"""Text formatting for registered functions (CLI listings and details)."""

from typing import Any

from sashi.registry import FunctionDescriptor, FunctionRegistry


def format_function_list(registry: FunctionRegistry, include_hidden: bool = False) -> str:
    """Format registered functions as an aligned name/description table."""
    rows = []
    for name in registry.names():
        descriptor = registry.lookup(name)
        if descriptor is None or (descriptor.hidden and not include_hidden):
            continue
        flags = []
        if not registry.is_active(name):
            flags.append("inactive")
        if descriptor.needs_confirmation:
            flags.append("confirm")
        if descriptor.hidden:
            flags.append("hidden")
        rows.append((name, descriptor.description, f" [{', '.join(flags)}]" if flags else ""))

    if not rows:
        return "No functions registered."

    width = max(len(name) for name, _, _ in rows)
    lines = [f"  {name:<{width}}  {description}{flags}" for name, description, flags in rows]
    lines.append(f"\nTotal: {len(rows)} functions")
    return "\n".join(lines)


def _format_schema(schema: dict[str, Any]) -> str:
    kind = schema["type"]
    if "enum" in schema:
        return f"enum({', '.join(schema['enum'])})"
    if kind == "array" and "items" in schema:
        return f"array<{_format_schema(schema['items'])}>"
    return kind


def format_function_details(name: str, descriptor: FunctionDescriptor, description: dict[str, Any]) -> str:
    """Format one function's signature-style description.

    Args:
        name: Registry key
        descriptor: The registered descriptor
        description: Output of ``FunctionRegistry.describe(name)``
    """
    lines = [name, "─" * len(name), description["description"] or "(no description)", ""]

    parameters = description["parameters"]
    required = set(description["required"])
    if parameters:
        lines.append("Parameters:")
        for param_name, schema in parameters.items():
            marker = "" if param_name in required else " (optional)"
            text = schema.get("description", "")
            lines.append(f"  - {param_name}: {_format_schema(schema)}{marker}{'  ' + text if text else ''}")
    else:
        lines.append("Parameters: none")

    if "returns" in description:
        lines.append(f"Returns: {_format_schema(description['returns'])}")
    lines.append(f"Calling convention: {descriptor.calling_convention.value}")
    if descriptor.needs_confirmation:
        lines.append("Requires confirmation before running")
    return "\n".join(lines)


def format_search_results(results: list[tuple[str, FunctionDescriptor, int]], query: str) -> str:
    if not results:
        return f"No functions match '{query}'."
    width = max(len(name) for name, _, _ in results)
    lines = [f"Functions matching '{query}':", ""]
    lines.extend(f"  {name:<{width}}  {descriptor.description}" for name, descriptor, _ in results)
    return "\n".join(lines)
