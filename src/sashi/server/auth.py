"""Session-token check for the HTTP surface.

A client sends its session id in ``x-sashi-session-id`` and the token in
``x-sashi-session-token``. The token is the hex HMAC-SHA256 of the session id
keyed by the server's session secret. With no secret configured the check
is disabled.
"""

import hashlib
import hmac
import logging
from typing import Optional

from fastapi import Request

from sashi.server.errors import ApiError

logger = logging.getLogger(__name__)

SESSION_ID_HEADER = "x-sashi-session-id"
SESSION_TOKEN_HEADER = "x-sashi-session-token"


def sign_session(session_id: str, secret: str) -> str:
    """Return the token a client must present for ``session_id``."""
    return hmac.new(secret.encode("utf-8"), session_id.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_session(session_id: Optional[str], token: Optional[str], secret: str) -> bool:
    if not session_id or not token:
        return False
    return hmac.compare_digest(sign_session(session_id, secret), token)


async def require_session(request: Request) -> None:
    """FastAPI dependency rejecting requests without a valid session token."""
    secret: Optional[str] = request.app.state.session_secret
    if not secret:
        return

    session_id = request.headers.get(SESSION_ID_HEADER)
    token = request.headers.get(SESSION_TOKEN_HEADER)
    if not verify_session(session_id, token, secret):
        logger.warning("Rejected request with invalid session token", extra={"route": request.url.path})
        raise ApiError(401, "Unauthorized: invalid or missing session token")
