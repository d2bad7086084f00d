"""HTTP routes.

Execution always answers 200 once the document passes pre-flight, even when
some or all actions failed: callers read ``success`` and ``errors`` from the
body. Pre-flight failures and malformed bodies answer 400, bad session
tokens 401.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request

from sashi import __version__
from sashi.core.exceptions import UnknownToolError, WorkflowValidationError
from sashi.server.auth import require_session
from sashi.server.errors import ApiError
from sashi.server.models import (
    ConfigValue,
    ExecuteRequest,
    MetadataResponse,
    SanityResponse,
    ToggleResponse,
    VerifyRequest,
)

logger = logging.getLogger(__name__)

public_router = APIRouter(tags=["health"])
router = APIRouter(dependencies=[Depends(require_session)])


@public_router.get("/sanity-check", response_model=SanityResponse)
async def sanity_check() -> SanityResponse:
    return SanityResponse(message="Sashi Middleware is running", version=__version__)


@router.get("/metadata", response_model=MetadataResponse, tags=["functions"])
async def get_metadata(request: Request) -> MetadataResponse:
    state = request.app.state
    return MetadataResponse(name=state.app_name, description=state.app_description, functions=state.registry.metadata())


@router.get("/functions", tags=["functions"])
async def list_functions(request: Request) -> list[dict[str, Any]]:
    return request.app.state.registry.describe_all()


@router.get("/functions/{name}/toggle_active", response_model=ToggleResponse, tags=["functions"])
async def toggle_function(request: Request, name: str) -> ToggleResponse:
    try:
        active = request.app.state.registry.toggle_active(name)
    except UnknownToolError as e:
        raise ApiError(404, str(e)) from e
    return ToggleResponse(name=name, active=active)


@router.post("/workflow/verify", tags=["workflows"])
async def verify_workflow(request: Request, payload: VerifyRequest) -> dict[str, Any]:
    return request.app.state.executor.verify(payload.workflow).to_dict()


@router.post("/workflow/execute", tags=["workflows"])
async def execute_workflow(request: Request, payload: ExecuteRequest) -> dict[str, Any]:
    executor = request.app.state.executor
    try:
        report = await executor.execute(payload.workflow, payload.user_input)
    except WorkflowValidationError as e:
        raise ApiError(400, e.describe(), details=[issue.to_dict() for issue in e.issues]) from e

    if payload.debug:
        logger.info(
            f"Workflow report: success={report.success}, {len(report.results)} results, {len(report.errors)} errors",
            extra={"route": "/workflow/execute"},
        )
    return report.to_dict()


@router.get("/configs", tags=["configs"])
async def get_all_configs(request: Request) -> dict[str, Any]:
    return request.app.state.config_store.get_all_configs()


@router.get("/configs/{key}", tags=["configs"])
async def get_config(request: Request, key: str) -> dict[str, Any]:
    value = request.app.state.config_store.get_config(key)
    if value is None:
        raise ApiError(404, f"Config '{key}' not found")
    return {"key": key, "value": value}


@router.put("/configs/{key}", tags=["configs"])
async def set_config(request: Request, key: str, payload: ConfigValue) -> dict[str, Any]:
    request.app.state.config_store.set_config(key, payload.value)
    return {"key": key, "value": payload.value}
