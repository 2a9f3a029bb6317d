"""Admin API key authentication.

Catalog reads are public. Routes that change data, and the trash listing,
declare the ``AdminScope`` dependency and require
``Authorization: Bearer <api_key>``.
"""

from typing import Annotated

import structlog
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.infrastructure.config import settings

logger = structlog.get_logger()

bearer_scheme = HTTPBearer(auto_error=False, description="Admin API key")


def _unauthorized(error_code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error_code": error_code, "message": message, "details": []},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def require_api_key(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> None:
    """Reject the request unless it carries the admin API key.

    Raises:
        HTTPException: 401 when the header is missing, malformed or
            carries the wrong key.
    """
    if credentials is None:
        reason = (
            "Invalid Authorization header format. Use 'Bearer <api_key>'"
            if request.headers.get("Authorization")
            else "Missing Authorization header"
        )
        logger.warning("Admin request rejected", reason=reason)
        raise _unauthorized("UNAUTHORIZED", reason)

    if credentials.credentials != settings.stockroom_api_key:
        logger.warning("Invalid API key")
        raise _unauthorized("INVALID_API_KEY", "Invalid API key")

    request.state.authenticated = True


AdminScope = Depends(require_api_key)
