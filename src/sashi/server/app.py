"""FastAPI application factory.

Usage:
    from sashi.server import create_app

    app = create_app(registry, LLMGenerator(), session_secret="...")

    uvicorn myservice:app --port 3000
"""

import logging
from typing import Optional

from fastapi import FastAPI

from sashi import __version__
from sashi.core.config_store import ConfigStore, InMemoryConfigStore
from sashi.core.settings import SashiSettings
from sashi.registry import FunctionRegistry
from sashi.runtime.generation import Generator
from sashi.runtime.workflow_executor import WorkflowExecutor
from sashi.server.errors import install_error_handlers
from sashi.server.routes import public_router, router

logger = logging.getLogger(__name__)


def create_app(
    registry: FunctionRegistry,
    generator: Optional[Generator] = None,
    *,
    session_secret: Optional[str] = None,
    config_store: Optional[ConfigStore] = None,
    settings: Optional[SashiSettings] = None,
    name: str = "sashi",
    description: str = "Admin functions exposed to the workflow engine",
) -> FastAPI:
    """Build the HTTP app around a registry.

    Args:
        registry: Functions exposed to workflows
        generator: Hook for ``_generate``/``_transform``; directives fail without one
        session_secret: Enables the session-token check; falls back to settings
        config_store: Backing store for ``/configs``; in-memory by default
        settings: Runtime settings (timeout, return validation, session secret)
        name: Reported by ``/metadata``
        description: Reported by ``/metadata``
    """
    settings = settings or SashiSettings()
    if settings.runtime.validate_returns:
        registry.validate_returns = True

    app = FastAPI(title="Sashi", description=description, version=__version__)
    app.state.registry = registry
    app.state.executor = WorkflowExecutor(registry, generator, default_timeout=settings.runtime.timeout_seconds)
    app.state.config_store = config_store or InMemoryConfigStore()
    app.state.session_secret = session_secret or settings.server.session_secret
    app.state.app_name = name
    app.state.app_description = description

    install_error_handlers(app)
    app.include_router(public_router)
    app.include_router(router)

    if not app.state.session_secret:
        logger.info("Session check disabled: no session secret configured")
    return app
