"""HTTP surface for the workflow engine (FastAPI)."""

from sashi.server.app import create_app
from sashi.server.auth import SESSION_ID_HEADER, SESSION_TOKEN_HEADER, sign_session

__all__ = ["SESSION_ID_HEADER", "SESSION_TOKEN_HEADER", "create_app", "sign_session"]
