"""Command-line interface for sashi.

Examples:
    sashi run workflow.json --functions myapp.admin:registry --input userId=42
    sashi validate workflow.json --functions myapp.admin:registry
    sashi functions list --all
    sashi serve --functions myapp.admin:registry --port 3000

Exit codes for ``run``: 0 when every action succeeded, 1 when the workflow
ran but at least one action failed, 2 when the workflow was rejected before
execution (unreadable file, bad registry reference, pre-flight errors).
"""

import json
import logging
from typing import IO, Any, Optional

import click

from sashi import __version__
from sashi.cli.loader import RegistryLoadError, load_registry
from sashi.cli.logging_config import configure_logging
from sashi.core.exceptions import SettingsError, WorkflowValidationError
from sashi.core.settings import SettingsManager
from sashi.execution.formatters import (
    format_function_details,
    format_function_list,
    format_report,
    format_search_results,
    format_validation_issues,
)
from sashi.registry import FunctionRegistry
from sashi.runtime.generation import LLMGenerator
from sashi.runtime.workflow_executor import WorkflowExecutor

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ACTION_FAILED = 1
EXIT_REJECTED = 2

functions_option = click.option(
    "--functions",
    "functions_ref",
    envvar="SASHI_FUNCTIONS",
    help="Registry to load, as 'module:attribute' (a FunctionRegistry or a callable returning one)",
)


def infer_type(value: str) -> Any:
    """Infer a Python value from a ``key=value`` command-line string.

    Booleans and numbers are recognized, arrays and objects are parsed as
    JSON, everything else stays a string.
    """
    if value.lower() in ("true", "false"):
        return value.lower() == "true"

    try:
        if "." not in value and "e" not in value.lower():
            return int(value)
        return float(value)
    except ValueError:
        pass

    if value.startswith(("[", "{")):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            pass

    return value


def parse_inputs(pairs: tuple[str, ...], input_json: Optional[str]) -> dict[str, Any]:
    """Merge ``--input-json`` with repeated ``--input key=value`` pairs (pairs win)."""
    user_input: dict[str, Any] = {}
    if input_json:
        try:
            parsed = json.loads(input_json)
        except json.JSONDecodeError as e:
            raise click.BadParameter(f"not valid JSON: {e}", param_hint="--input-json") from e
        if not isinstance(parsed, dict):
            raise click.BadParameter("must be a JSON object", param_hint="--input-json")
        user_input.update(parsed)

    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got '{pair}'", param_hint="--input")
        user_input[key] = infer_type(value)
    return user_input


def _read_workflow(source: IO[str]) -> dict[str, Any]:
    try:
        data = json.load(source)
    except json.JSONDecodeError as e:
        click.echo(f"Error: Workflow file is not valid JSON: {e}", err=True)
        raise SystemExit(EXIT_REJECTED) from e
    if not isinstance(data, dict):
        click.echo("Error: Workflow file must contain a JSON object", err=True)
        raise SystemExit(EXIT_REJECTED)
    return data


def _load_registry_or_exit(functions_ref: Optional[str]) -> FunctionRegistry:
    try:
        return load_registry(functions_ref)
    except RegistryLoadError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(EXIT_REJECTED) from e


@click.group()
@click.version_option(__version__, prog_name="sashi")
@click.option("-v", "--verbose", is_flag=True, help="Show INFO logs")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """Run typed admin functions as workflows."""
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@main.command()
@click.argument("workflow_file", type=click.File("r"))
@functions_option
@click.option("--input", "-i", "inputs", multiple=True, help="userInput field as key=value (repeatable)")
@click.option("--input-json", help="userInput as a JSON object")
@click.option("--timeout", type=float, help="Deadline in seconds for the whole workflow")
@click.option("--json", "output_json", is_flag=True, help="Print the execution report as JSON")
def run(
    workflow_file: IO[str],
    functions_ref: Optional[str],
    inputs: tuple[str, ...],
    input_json: Optional[str],
    timeout: Optional[float],
    output_json: bool,
) -> None:
    """Execute WORKFLOW_FILE ('-' reads stdin)."""
    document = _read_workflow(workflow_file)
    user_input = parse_inputs(inputs, input_json)
    registry = _load_registry_or_exit(functions_ref)

    settings = SettingsManager().load()
    if settings.runtime.validate_returns:
        registry.validate_returns = True
    executor = WorkflowExecutor(
        registry,
        LLMGenerator.from_settings(settings),
        default_timeout=settings.runtime.timeout_seconds,
    )

    try:
        report = executor.execute_sync(document, user_input, timeout=timeout)
    except WorkflowValidationError as e:
        if output_json:
            click.echo(json.dumps({"error": e.describe(), "details": [i.to_dict() for i in e.issues]}, indent=2))
        else:
            click.echo(f"Error: {e.describe()}", err=True)
            click.echo(format_validation_issues(e.issues, []), err=True)
        raise SystemExit(EXIT_REJECTED) from e

    if output_json:
        click.echo(json.dumps(report.to_dict(), indent=2, default=str))
    else:
        click.echo(format_report(report))
    raise SystemExit(EXIT_OK if report.success else EXIT_ACTION_FAILED)


@main.command()
@click.argument("workflow_file", type=click.File("r"))
@functions_option
@click.option("--json", "output_json", is_flag=True, help="Print the verification result as JSON")
def validate(workflow_file: IO[str], functions_ref: Optional[str], output_json: bool) -> None:
    """Check WORKFLOW_FILE without running anything."""
    document = _read_workflow(workflow_file)
    registry = _load_registry_or_exit(functions_ref)
    result = WorkflowExecutor(registry).verify(document)

    if output_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        click.echo(format_validation_issues(result.errors, result.warnings))
    raise SystemExit(EXIT_OK if result.valid else EXIT_ACTION_FAILED)


@main.group()
def functions() -> None:
    """Inspect registered functions."""
    pass


@functions.command(name="list")
@functions_option
@click.option("--all", "include_hidden", is_flag=True, help="Include hidden (built-in) functions")
@click.option("--json", "output_json", is_flag=True, help="Print the tool-description feed as JSON")
def list_functions(functions_ref: Optional[str], include_hidden: bool, output_json: bool) -> None:
    """List registered functions."""
    registry = _load_registry_or_exit(functions_ref)
    if output_json:
        click.echo(json.dumps(registry.describe_all(), indent=2))
    else:
        click.echo(format_function_list(registry, include_hidden=include_hidden))


@functions.command()
@click.argument("name")
@functions_option
@click.option("--json", "output_json", is_flag=True, help="Print the tool schema as JSON")
def describe(name: str, functions_ref: Optional[str], output_json: bool) -> None:
    """Show NAME's parameters and return type."""
    registry = _load_registry_or_exit(functions_ref)
    descriptor = registry.lookup(name)
    if descriptor is None:
        click.echo(f"Error: Function '{name}' is not registered", err=True)
        raise SystemExit(EXIT_ACTION_FAILED)

    description = registry.describe(name)
    if output_json:
        click.echo(json.dumps(description, indent=2))
        return
    click.echo(format_function_details(name, descriptor, description))


@functions.command()
@click.argument("query")
@functions_option
def search(query: str, functions_ref: Optional[str]) -> None:
    """Search functions by name and description keywords."""
    registry = _load_registry_or_exit(functions_ref)
    click.echo(format_search_results(registry.search(query), query))


@main.command()
@functions_option
@click.option("--host", help="Bind address (default from settings)")
@click.option("--port", type=int, help="Port (default from settings)")
def serve(functions_ref: Optional[str], host: Optional[str], port: Optional[int]) -> None:
    """Serve the HTTP interface with uvicorn."""
    import uvicorn

    from sashi.server import create_app

    registry = _load_registry_or_exit(functions_ref)
    settings = SettingsManager().load()
    app = create_app(registry, LLMGenerator.from_settings(settings), settings=settings)

    bind_host = host or settings.server.host
    bind_port = port or settings.server.port
    click.echo(f"Serving {len(registry)} functions on http://{bind_host}:{bind_port}")
    uvicorn.run(app, host=bind_host, port=bind_port, log_level="info")


@main.group()
def settings() -> None:
    """Manage sashi settings (~/.sashi/settings.json)."""
    pass


@settings.command()
def show() -> None:
    """Show current settings with secrets masked."""
    manager = SettingsManager()
    click.echo(f"Settings file: {manager.settings_path}")
    click.echo("\nCurrent settings:")
    click.echo(json.dumps(manager.masked_dump(), indent=2))


@settings.command(name="set")
@click.argument("key")
@click.argument("value")
def set_setting(key: str, value: str) -> None:
    """Set KEY (e.g. runtime.timeout_seconds) to VALUE.

    VALUE is parsed as JSON when possible, so 'null' clears an optional setting.
    """
    try:
        parsed: Any = json.loads(value)
    except json.JSONDecodeError:
        parsed = value

    manager = SettingsManager()
    try:
        manager.set_value(key, parsed)
    except SettingsError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(EXIT_ACTION_FAILED) from e
    click.echo(f"✓ Set {key}")


@settings.command()
def reset() -> None:
    """Delete the settings file and fall back to defaults."""
    manager = SettingsManager()
    click.confirm(f"Remove {manager.settings_path}?", abort=True)
    manager.reset()
    click.echo("✓ Settings reset to defaults")


if __name__ == "__main__":
    main()
